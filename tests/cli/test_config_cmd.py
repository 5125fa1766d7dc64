from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from gitr.cli.main import cli
from gitr.config import default_config, load_config


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "home" / ".gitr.yaml"
    monkeypatch.setenv("GITR_CONFIG", str(path))
    return path


@pytest.mark.short
def test_config_init(config_path):
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "init"])
    assert result.exit_code == 0, result.output
    assert "Created configuration" in result.output
    assert load_config(config_path) == default_config()

    result = runner.invoke(cli, ["config", "init"])
    assert result.exit_code == 0
    assert "already exists" in result.output


@pytest.mark.short
def test_config_show(config_path):
    result = CliRunner().invoke(cli, ["config", "show"])

    assert result.exit_code == 0, result.output
    data = yaml.safe_load(result.output)
    assert [host["hostname"] for host in data["scm"]["hosts"]] == [
        "github.com",
        "gitlab.com",
        "bitbucket.org",
    ]


@pytest.mark.short
def test_config_path(config_path):
    result = CliRunner().invoke(cli, ["config", "path"])

    assert result.exit_code == 0
    assert result.output.strip() == str(config_path)
    assert not config_path.exists()


@pytest.mark.short
def test_config_edit(config_path):
    with patch("gitr.cli.config.click.edit") as mock_edit:
        result = CliRunner().invoke(cli, ["config", "edit"])

    assert result.exit_code == 0, result.output
    mock_edit.assert_called_once_with(filename=str(config_path))
    assert "Configuration is valid" in result.output


@pytest.mark.short
def test_config_edit_reports_invalid_result(config_path):
    def break_config(filename):
        with open(filename, "w") as f:
            f.write("scm:\n  hosts:\n    - provider: github\n")

    with patch("gitr.cli.config.click.edit", side_effect=break_config):
        result = CliRunner().invoke(cli, ["config", "edit"])

    assert result.exit_code == 1
    assert "Configuration Error" in result.output
    assert "hostname" in result.output


@pytest.mark.short
def test_version():
    result = CliRunner().invoke(cli, ["version"])

    assert result.exit_code == 0
    assert result.output.startswith("gitr ")
