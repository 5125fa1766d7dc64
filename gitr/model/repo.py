"""Per-invocation repository models: what was asked for and how to fetch it."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class Provider(str, Enum):
    """SCM product behind a hostname."""

    github = "github"
    gitlab = "gitlab"
    bitbucket_cloud = "bitbucket-cloud"
    bitbucket_datacenter = "bitbucket-datacenter"
    generic = "generic"

    @property
    def is_bitbucket(self) -> bool:
        return self in (Provider.bitbucket_cloud, Provider.bitbucket_datacenter)


class UrlKind(str, Enum):
    """Shape of the url given by the user."""

    ssh_git = "ssh-git"
    https_git = "https-git"
    browser_page = "browser-page"


class TransportKind(str, Enum):
    """Mechanism used to fetch repository data."""

    ssh = "ssh"
    https_token = "https-token"
    https_anonymous = "https-anonymous"

    @property
    def is_https(self) -> bool:
        return self is not TransportKind.ssh


@dataclass(frozen=True)
class RepoReference:
    """A normalized repository reference.

    ``repo_path`` is ``owner/repo`` (or ``group/sub/project``) without a
    ``.git`` suffix, without leading/trailing slashes and without any
    query or fragment characters.
    """

    hostname: str
    repo_path: str
    provider: Provider
    url_kind: UrlKind
    url: str

    @property
    def repo_name(self) -> str:
        return self.repo_path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class ClonePlan:
    """Everything needed to run one clone, built fresh for every invocation."""

    local_path: Path
    ssh_url: str
    https_url: str
    chosen_transport: TransportKind
    fallback_transport: Optional[TransportKind] = None
    credential: Optional[str] = field(default=None, repr=False)
    https_username: Optional[str] = None
    ssh_key_path: Optional[Path] = None

    def url_for(self, transport: TransportKind) -> str:
        return self.ssh_url if transport is TransportKind.ssh else self.https_url
