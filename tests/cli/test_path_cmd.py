import pytest
from click.testing import CliRunner

from gitr.cli.main import cli


@pytest.mark.short
def test_path_hierarchy(gitr_config_file, scm_home):
    result = CliRunner().invoke(cli, ["path", "https://github.com/owner/repo/pull/1"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(scm_home / "github.com" / "owner" / "repo")
    assert not scm_home.exists()


@pytest.mark.short
def test_path_create_dir(gitr_config_file, scm_home):
    runner = CliRunner()

    flat = runner.invoke(cli, ["path", "git@gitlab.com:group/sub/project.git"])
    nested = runner.invoke(
        cli, ["path", "git@gitlab.com:group/sub/project.git", "--create-dir"]
    )

    assert flat.output.strip() == str(scm_home / "project")
    assert nested.output.strip() == str(scm_home / "group" / "sub" / "project")


@pytest.mark.short
def test_path_unparsable_url(gitr_config_file):
    result = CliRunner().invoke(cli, ["path", "https://github.com/owner"])

    assert result.exit_code == 1
    assert "Invalid Repository URL" in result.output
