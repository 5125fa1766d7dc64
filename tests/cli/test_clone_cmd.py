from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from gitr.cli.main import cli
from gitr.exceptions import RepoNotFoundError
from gitr.git.clone import CloneResult, CloneStatus
from gitr.model.repo import TransportKind


@pytest.fixture
def mock_orchestrator(gitr_config_file):
    with patch("gitr.cli.clone.CloneOrchestrator") as mock:
        yield mock.return_value


@pytest.mark.short
def test_clone_success(mock_orchestrator):
    mock_orchestrator.clone.return_value = CloneResult(
        CloneStatus.cloned, Path("/srv/scm/repo"), transport=TransportKind.ssh
    )

    result = CliRunner().invoke(
        cli, ["clone", "https://github.com/owner/repo/pull/1", "--create-dir"]
    )

    assert result.exit_code == 0, result.output
    assert "Repository cloned successfully over ssh" in result.output
    assert "cd /srv/scm/repo" in result.output
    mock_orchestrator.clone.assert_called_once_with(
        "https://github.com/owner/repo/pull/1",
        token=None,
        create_dir=True,
        dry=False,
    )


@pytest.mark.short
def test_clone_passes_token(mock_orchestrator):
    mock_orchestrator.clone.return_value = CloneResult(
        CloneStatus.cloned, Path("/srv/scm/repo"), transport=TransportKind.https_token
    )

    result = CliRunner().invoke(
        cli, ["clone", "https://github.com/owner/repo.git", "--token", "ghp_x"]
    )

    assert result.exit_code == 0, result.output
    assert mock_orchestrator.clone.call_args.kwargs["token"] == "ghp_x"


@pytest.mark.short
def test_clone_already_exists(mock_orchestrator):
    mock_orchestrator.clone.return_value = CloneResult(
        CloneStatus.already_exists, Path("/srv/scm/repo")
    )

    result = CliRunner().invoke(cli, ["clone", "git@github.com:owner/repo.git"])

    assert result.exit_code == 0
    assert "Repository already exists at" in result.output


@pytest.mark.short
def test_clone_error_exits_with_1(mock_orchestrator):
    mock_orchestrator.clone.side_effect = RepoNotFoundError("git@github.com:o/r.git")

    result = CliRunner().invoke(cli, ["clone", "git@github.com:o/r.git"])

    assert result.exit_code == 1
    assert "Repository Not Found" in result.output
    assert "Please verify the URL exists" in result.output


@pytest.mark.short
def test_clone_dry_run(gitr_config_file, scm_home):
    result = CliRunner().invoke(
        cli, ["clone", "-d", "https://github.com/owner/repo/blob/main/setup.py"]
    )

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert "repo-name" in result.output
    assert "git@github.com:owner/repo.git" in result.output
    assert not scm_home.exists()


@pytest.mark.short
def test_clone_unknown_host(gitr_config_file):
    result = CliRunner().invoke(cli, ["clone", "https://example.org/owner/repo"])

    assert result.exit_code == 1
    assert "Unknown SCM Host" in result.output
    assert "example.org" in result.output


@pytest.mark.short
def test_clone_invalid_config(tmp_path, monkeypatch):
    config_path = tmp_path / "broken.yaml"
    config_path.write_text("scm:\n  hosts: 3\n")
    monkeypatch.setenv("GITR_CONFIG", str(config_path))

    result = CliRunner().invoke(cli, ["clone", "git@github.com:owner/repo.git"])

    assert result.exit_code == 1
    assert "Configuration Error" in result.output


@pytest.mark.short
def test_clone_requires_url():
    result = CliRunner().invoke(cli, ["clone"])

    assert result.exit_code == 2
    assert "Missing argument 'URL'" in result.output
