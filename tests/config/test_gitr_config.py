"""
Unit tests for the gitr configuration file.
"""

import pytest
import yaml

from gitr.config import (
    ConfigError,
    default_config,
    dump_config,
    ensure_initial_config,
    get_config_file,
    load_config,
    parse_config,
)
from gitr.exceptions import UnknownHostError
from gitr.model.repo import Provider
from gitr.model.scm import HttpScheme


@pytest.mark.short
def test_default_config():
    config = default_config()

    assert config.scm.home_dir == "~/scm"
    registry = config.registry()
    assert registry.hostnames() == ["github.com", "gitlab.com", "bitbucket.org"]
    assert registry.lookup("GITHUB.COM").provider is Provider.github
    assert registry.lookup("bitbucket.org").provider is Provider.bitbucket_cloud
    assert config.clone.not_found_patterns == []


@pytest.mark.short
def test_dump_and_parse_default_config():
    text = dump_config(default_config())

    data = yaml.safe_load(text)
    assert data["scm"]["hosts"][0]["hostname"] == "github.com"
    assert data["scm"]["hosts"][0]["provider"] == "github"
    assert parse_config(text) == default_config()


@pytest.mark.short
def test_parse_minimal_config():
    config = parse_config(
        """
scm:
  hosts:
    - hostname: git.example.com
      provider: bitbucket-datacenter
      scheme: http
clone:
  not_found_patterns:
    - "does not appear to be a git repository"
"""
    )

    policy = config.registry().lookup("git.example.com")
    assert policy.provider is Provider.bitbucket_datacenter
    assert policy.scheme is HttpScheme.http
    assert policy.always_create_dir_hierarchy is False
    assert policy.home_dir is None
    assert config.scm.home_dir is None
    assert config.clone.not_found_patterns == [
        "does not appear to be a git repository"
    ]

    with pytest.raises(UnknownHostError):
        config.registry().lookup("github.com")


@pytest.mark.short
def test_empty_file_is_empty_config():
    config = parse_config("")

    assert config.scm.hosts == []
    assert len(config.registry()) == 0


@pytest.mark.short
@pytest.mark.parametrize(
    "text,message",
    [
        ("scm: [unclosed", "Invalid YAML"),
        ("- just\n- a list\n", "must be a mapping"),
        ("scm:\n  hosts:\n    - provider: github\n", "scm.hosts.0.hostname"),
        (
            "scm:\n  hosts:\n    - hostname: github.com\n      provider: gitea\n",
            "scm.hosts.0.provider",
        ),
        ("scm:\n  hosts:\n    - hostname: https://github.com\n", "scheme or path"),
        (
            "scm:\n  hosts:\n    - hostname: github.com\n    - hostname: GitHub.com\n",
            "duplicate SCM host",
        ),
        ("scm:\n  unknown_key: 1\n", "scm.unknown_key"),
    ],
)
def test_invalid_config(text, message):
    with pytest.raises(ConfigError) as exc_info:
        parse_config(text)
    assert message in exc_info.value.message


@pytest.mark.short
def test_blank_home_dir_is_unset():
    config = parse_config("scm:\n  hosts:\n    - hostname: x.org\n      home_dir: ''\n")

    assert config.registry().lookup("x.org").home_dir is None


@pytest.mark.short
def test_config_file_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("GITR_CONFIG", str(tmp_path / "custom.yaml"))
    assert get_config_file() == tmp_path / "custom.yaml"

    monkeypatch.delenv("GITR_CONFIG")
    assert get_config_file().name == ".gitr.yaml"


@pytest.mark.short
def test_ensure_initial_config(tmp_path):
    config_path = tmp_path / "nested" / "gitr.yaml"

    assert ensure_initial_config(config_path) == config_path
    assert load_config(config_path) == default_config()

    # an existing file is never overwritten
    config_path.write_text("scm:\n  home_dir: /srv/scm\n")
    ensure_initial_config(config_path)
    assert load_config(config_path).scm.home_dir == "/srv/scm"


@pytest.mark.short
def test_load_missing_config(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        load_config(tmp_path / "missing.yaml")

    assert "not found" in exc_info.value.message
    assert exc_info.value.hints
