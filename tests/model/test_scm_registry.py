"""
Tests for host policies and the SCM host registry.
"""

import pytest
from pydantic import ValidationError

from gitr.exceptions import UnknownHostError
from gitr.model.repo import Provider, TransportKind
from gitr.model.scm import HostPolicy, HttpScheme, ScmHostRegistry


@pytest.mark.short
def test_host_policy_defaults():
    policy = HostPolicy(hostname="git.example.com")

    assert policy.provider is Provider.generic
    assert policy.scheme is HttpScheme.https
    assert policy.always_create_dir_hierarchy is False
    assert policy.include_host_in_dir_hierarchy is False
    assert policy.home_dir is None


@pytest.mark.short
@pytest.mark.parametrize("hostname", ["", "  ", "https://github.com", "github.com/x"])
def test_host_policy_rejects_bad_hostnames(hostname):
    with pytest.raises(ValidationError):
        HostPolicy(hostname=hostname)


@pytest.mark.short
def test_host_policy_is_frozen():
    policy = HostPolicy(hostname="github.com")

    with pytest.raises(ValidationError):
        policy.hostname = "gitlab.com"


@pytest.mark.short
def test_registry_lookup(registry):
    assert registry.lookup("github.com").provider is Provider.github
    assert registry.lookup("GitLab.COM").provider is Provider.gitlab
    assert "BITBUCKET.org" in registry
    assert "example.org" not in registry
    assert len(registry) == 5

    with pytest.raises(UnknownHostError) as exc_info:
        registry.lookup("example.org")
    assert "not configured" in exc_info.value.message
    assert exc_info.value.hints


@pytest.mark.short
def test_registry_rejects_duplicates():
    with pytest.raises(ValueError):
        ScmHostRegistry(
            [HostPolicy(hostname="github.com"), HostPolicy(hostname="GITHUB.com")]
        )


@pytest.mark.short
def test_provider_and_transport_helpers():
    assert Provider.bitbucket_cloud.is_bitbucket
    assert Provider.bitbucket_datacenter.is_bitbucket
    assert not Provider.github.is_bitbucket

    assert not TransportKind.ssh.is_https
    assert TransportKind.https_token.is_https
    assert TransportKind.https_anonymous.is_https
