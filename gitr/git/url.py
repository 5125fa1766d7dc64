"""
Repository URL normalization.

Turns the many url shapes a repository can be referenced by into a canonical
``(hostname, repo_path, provider)`` triple.

Supported shapes:
    git@github.com:owner/repo.git                 -> ssh-git
    ssh://git@host:7999/project/repo.git          -> ssh-git
    git@github.com:owner/repo                     -> browser-page
    https://[user@]github.com/owner/repo.git      -> https-git
    https://github.com/owner/repo/pull/123        -> browser-page
    https://gitlab.com/group/sub/project/-/tree/x -> browser-page

Browser urls carry trailing segments that are not part of the repository
identity (``/tree/<ref>``, ``/blob/<ref>/<file>``, ``/pull/<n>``, ...). The
repository path is cut at the first such resource marker.

Note that the ``.git`` suffix is only removed while extracting a repository
path. ``get_repo_name`` is a pure last-segment lookup and keeps it:

    get_repo_name("swarupdonepudi/gitr.git") == "gitr.git"
"""

import re
from typing import Tuple

from gitr.exceptions import UnparsableUrlError
from gitr.model.repo import Provider, RepoReference, UrlKind
from gitr.model.scm import ScmHostRegistry

GIT_SUFFIX = ".git"

_SCHEME_RE = re.compile(r"^(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*)://(?P<rest>.*)$")
_HTTP_USERNAME_RE = re.compile(r"^https?://(?P<user>[^/@]+)@", re.IGNORECASE)

# Path segments that start the non-repository part of a browser url.
RESOURCE_MARKERS = frozenset(
    {
        "-",
        "actions",
        "activity",
        "blame",
        "blob",
        "branches",
        "browse",
        "commit",
        "commits",
        "compare",
        "discussions",
        "issues",
        "merge_requests",
        "pipelines",
        "pull",
        "pull-requests",
        "pulls",
        "raw",
        "releases",
        "src",
        "tags",
        "tree",
        "wiki",
        "wikis",
    }
)


def strip_query_params(url: str) -> str:
    """
    Remove the query string and fragment from a url.

    Browser-copied links often carry tracking parameters (``?utm_source=...``).

    Args:
        url: Any repository url

    Returns:
        The url up to (not including) the first ``?`` or ``#``
    """
    for separator in ("?", "#"):
        url = url.split(separator, 1)[0]
    return url


def is_git_url(url: str) -> bool:
    """True iff the url ends with the literal ``.git``."""
    return url.endswith(GIT_SUFFIX)


def is_git_ssh_url(url: str) -> bool:
    """True iff the url is a git url prefixed by ``git@`` or ``ssh://``."""
    return is_git_url(url) and (url.startswith("git@") or url.startswith("ssh://"))


def is_git_http_url_has_username(url: str) -> bool:
    """True if an http(s) url carries a ``user@`` segment before the host."""
    return _HTTP_USERNAME_RE.match(url) is not None


def get_http_username(url: str) -> str:
    """Return the username embedded in an http(s) url, or an empty string."""
    match = _HTTP_USERNAME_RE.match(url)
    if not match:
        return ""
    return match.group("user").split(":", 1)[0]


def _split_host_path(url: str) -> Tuple[str, str]:
    """Split a url into ``(host, path)``; host is empty if none is found."""
    if url.startswith("git@"):
        host, sep, path = url[len("git@") :].partition(":")
        if not sep:
            return "", ""
        return host.split("/", 1)[0], path

    match = _SCHEME_RE.match(url)
    if not match:
        return "", ""

    authority, _, path = match.group("rest").partition("/")
    if "@" in authority:
        authority = authority.rsplit("@", 1)[1]
    host, _, port = authority.partition(":")
    if port and not port.isdigit():
        # scp-like path glued to an http url: https://user@host:owner/repo.git
        path = f"{port}/{path}" if path else port
    return host, path


def get_hostname(url: str) -> str:
    """
    Extract the hostname from an ssh, scp-like or http(s) url.

    Userinfo and port are dropped. Returns an empty string when the url has
    no recognizable host.
    """
    host, _ = _split_host_path(strip_query_params(url))
    return host


def get_url_kind(url: str) -> UrlKind:
    """
    Classify a url.

    ``git@`` and ``ssh://`` urls ending in ``.git`` are ssh clone urls and
    http(s) urls ending in ``.git`` are https clone urls. Everything else with
    one of those schemes (``git@github.com:owner/repo`` included) is treated
    like a browser page: both clone urls are rebuilt from the repo path.

    Raises:
        UnparsableUrlError: For any other scheme or shape
    """
    if is_git_ssh_url(url):
        return UrlKind.ssh_git
    if url.startswith("git@") or url.startswith("ssh://"):
        return UrlKind.browser_page

    match = _SCHEME_RE.match(url)
    if match and match.group("scheme").lower() in ("http", "https"):
        return UrlKind.https_git if is_git_url(url) else UrlKind.browser_page

    raise UnparsableUrlError(url, "unsupported url scheme")


def _strip_git_suffix(segment: str) -> str:
    if segment.endswith(GIT_SUFFIX) and len(segment) > len(GIT_SUFFIX):
        return segment[: -len(GIT_SUFFIX)]
    return segment


def _browser_repo_segments(segments: list, provider: Provider) -> list:
    if provider is Provider.bitbucket_datacenter:
        # /projects/KEY/repos/SLUG/browse/...
        if len(segments) >= 4 and segments[0] == "projects" and segments[2] == "repos":
            return [segments[1], segments[3]]
        return segments[:2]

    cut = len(segments)
    for index, segment in enumerate(segments):
        if index >= 2 and segment in RESOURCE_MARKERS:
            cut = index
            break
    segments = segments[:cut]

    # gitlab groups nest arbitrarily deep, everyone else is owner/repo
    if provider is not Provider.gitlab:
        segments = segments[:2]
    return segments


def get_repo_path(url: str, hostname: str, provider: Provider) -> str:
    """
    Extract the repository path (``owner/repo``) from a url.

    Examples:
        git@github.com:owner/repo.git -> owner/repo
        https://github.com/owner/repo/tree/main/src -> owner/repo
        https://github.com/owner/repo/compare/main...feature -> owner/repo
        https://gitlab.com/group/sub/project.git -> group/sub/project

    Args:
        url: Repository url in any supported shape
        hostname: Configured hostname the url belongs to
        provider: Provider of that hostname, selects the browser url grammar

    Returns:
        Repository path without ``.git`` suffix and without surrounding slashes

    Raises:
        UnparsableUrlError: If the url does not contain at least owner and repo
    """
    url = strip_query_params(url.strip())
    kind = get_url_kind(url)
    host, path = _split_host_path(url)
    if not host:
        raise UnparsableUrlError(url, "no hostname")
    if host.lower() != hostname.lower():
        raise UnparsableUrlError(url, f"url does not belong to {hostname}")

    segments = [segment for segment in path.split("/") if segment]
    if kind is UrlKind.browser_page:
        segments = _browser_repo_segments(segments, provider)
    elif (
        provider is Provider.bitbucket_datacenter
        and len(segments) > 2
        and segments[0] == "scm"
    ):
        segments = segments[1:]

    if segments:
        segments[-1] = _strip_git_suffix(segments[-1])
    if len(segments) < 2:
        raise UnparsableUrlError(url, "expected an owner/repo path")
    return "/".join(segments)


def get_repo_name(repo_path: str) -> str:
    """Return the last path segment; a path without slash is returned unchanged."""
    return repo_path.rsplit("/", 1)[-1]


def get_ssh_clone_url(hostname: str, repo_path: str) -> str:
    return f"git@{hostname}:{repo_path}.git"


def get_http_clone_url(hostname: str, repo_path: str, scheme: str = "https") -> str:
    return f"{scheme}://{hostname}/{repo_path}.git"


def normalize(raw: str, registry: ScmHostRegistry) -> RepoReference:
    """
    Normalize a raw url into a ``RepoReference``.

    The provider is taken from the host registry, never guessed from the path.

    Raises:
        UnparsableUrlError: If the url has no host/path structure
        UnknownHostError: If the hostname is not configured
    """
    url = strip_query_params(raw.strip())
    if not url:
        raise UnparsableUrlError(raw, "empty url")

    kind = get_url_kind(url)
    hostname = get_hostname(url)
    if not hostname:
        raise UnparsableUrlError(url, "no hostname")

    policy = registry.lookup(hostname)
    repo_path = get_repo_path(url, policy.hostname, policy.provider)
    return RepoReference(
        hostname=policy.hostname,
        repo_path=repo_path,
        provider=policy.provider,
        url_kind=kind,
        url=url,
    )
