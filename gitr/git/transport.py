"""
Transport selection and credential discovery.

Credentials live where the user already keeps them:
    - ssh keys: ``IdentityFile`` of a matching ``Host`` block in
      ``~/.ssh/config``, else the default key names in ``~/.ssh``
    - https tokens: ``~/.personal_access_tokens/<hostname>``, a plain file
      holding the token
"""

import fnmatch
import logging
import re
from pathlib import Path
from typing import List, Optional

from gitr.exceptions import (
    FilesystemError,
    SshKeyNotFoundError,
    UnsupportedBrowserUrlError,
)
from gitr.git.url import (
    get_http_clone_url,
    get_http_username,
    get_ssh_clone_url,
)
from gitr.model.repo import ClonePlan, RepoReference, TransportKind, UrlKind
from gitr.model.scm import HostPolicy

logger = logging.getLogger(__name__)

DEFAULT_SSH_KEY_NAMES = ("id_ed25519", "id_ecdsa", "id_rsa")
TOKENS_DIR_NAME = ".personal_access_tokens"
# Any non-empty username works for token based basic auth.
DEFAULT_TOKEN_USERNAME = "gitr"

_PRIVATE_KEY_HEADER = re.compile(rb"-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY-----")
_SSH_CONFIG_LINE = re.compile(r"^\s*(?P<key>\w+)(?:\s*=\s*|\s+)(?P<value>.+?)\s*$")


def _default_ssh_dir() -> Path:
    return Path("~/.ssh").expanduser()


def _default_tokens_dir() -> Path:
    return Path("~").expanduser() / TOKENS_DIR_NAME


def _host_matches(hostname: str, patterns: List[str]) -> bool:
    hostname = hostname.lower()
    matched = False
    for pattern in patterns:
        pattern = pattern.lower()
        if pattern.startswith("!"):
            if fnmatch.fnmatch(hostname, pattern[1:]):
                return False
        elif fnmatch.fnmatch(hostname, pattern):
            matched = True
    return matched


def _identity_files(hostname: str, ssh_dir: Path) -> List[Path]:
    """IdentityFile entries of the ssh_dir/config ``Host`` blocks matching hostname."""
    config_path = ssh_dir / "config"
    if not config_path.is_file():
        return []

    home = ssh_dir.parent
    identity_files = []
    matching = False
    for line in config_path.read_text(errors="replace").splitlines():
        if not line.strip() or line.strip().startswith("#"):
            continue
        match = _SSH_CONFIG_LINE.match(line)
        if not match:
            continue
        key = match.group("key").lower()
        value = match.group("value").strip('"')
        if key == "host":
            matching = _host_matches(hostname, value.split())
        elif key == "match":
            matching = False
        elif key == "identityfile" and matching:
            value = value.replace("%d", str(home)).replace("%h", hostname)
            if value.startswith("~"):
                path = home / value[1:].lstrip("/")
            else:
                path = Path(value)
            identity_files.append(path if path.is_absolute() else home / path)
    return identity_files


def find_ssh_key(hostname: str, ssh_dir: Optional[Path] = None) -> Path:
    """
    Locate the private key used for a host.

    Args:
        hostname: SCM hostname
        ssh_dir: ssh directory (defaults to ~/.ssh)

    Returns:
        Path to a readable private key

    Raises:
        SshKeyNotFoundError: If no candidate exists or the key cannot be read
    """
    ssh_dir = ssh_dir or _default_ssh_dir()
    candidates = _identity_files(hostname, ssh_dir)
    candidates += [ssh_dir / name for name in DEFAULT_SSH_KEY_NAMES]

    rejected = None
    for candidate in candidates:
        if not candidate.is_file():
            logger.debug(f"{candidate} file not found")
            continue
        try:
            pem = candidate.read_bytes()
        except OSError as e:
            raise SshKeyNotFoundError(hostname, f"{candidate} ({e})") from e
        if not _PRIVATE_KEY_HEADER.search(pem):
            logger.debug(f"{candidate} is not a private key")
            rejected = rejected or candidate
            continue
        logger.debug(f"Using ssh key {candidate} for {hostname}")
        return candidate

    if rejected is not None:
        raise SshKeyNotFoundError(hostname, f"{rejected} (not a private key)")
    raise SshKeyNotFoundError(hostname)


def get_https_clone_token(
    hostname: str, tokens_dir: Optional[Path] = None
) -> Optional[str]:
    """
    Read the personal access token stored for a host.

    Returns:
        The token, or None when no token file exists
    """
    token_file = (tokens_dir or _default_tokens_dir()) / hostname
    if not token_file.is_file():
        return None
    try:
        token = token_file.read_text().strip()
    except OSError as e:
        raise FilesystemError(str(token_file), f"failed to read token file ({e})")
    return token or None


def _strip_userinfo(url: str) -> str:
    scheme, sep, rest = url.partition("://")
    authority, slash, path = rest.partition("/")
    if "@" in authority:
        authority = authority.rsplit("@", 1)[1]
    return f"{scheme}{sep}{authority}{slash}{path}"


def select_transport(
    ref: RepoReference,
    policy: HostPolicy,
    local_path: Path,
    explicit_token: Optional[str] = None,
    ssh_dir: Optional[Path] = None,
    tokens_dir: Optional[Path] = None,
) -> ClonePlan:
    """
    Decide how a repository is fetched.

    - ssh clone urls use ssh. A missing key is not fatal there, git falls
      back to its own ssh configuration and agent.
    - https clone urls use the explicit token, else the token file, else
      anonymous https.
    - browser urls start with ssh when a key exists and fall back to https;
      without a key they go straight to https.

    Raises:
        UnsupportedBrowserUrlError: For BitBucket browser urls, whose page
            paths do not map to repository paths
    """
    ssh_url = get_ssh_clone_url(ref.hostname, ref.repo_path)
    https_url = get_http_clone_url(ref.hostname, ref.repo_path, policy.scheme.value)

    if ref.url_kind is UrlKind.ssh_git:
        try:
            key_path: Optional[Path] = find_ssh_key(ref.hostname, ssh_dir)
        except SshKeyNotFoundError as e:
            logger.debug(f"{e.message}, relying on git's ssh configuration")
            key_path = None
        return ClonePlan(
            local_path=local_path,
            ssh_url=ref.url,
            https_url=https_url,
            chosen_transport=TransportKind.ssh,
            ssh_key_path=key_path,
        )

    if ref.url_kind is UrlKind.browser_page and ref.provider.is_bitbucket:
        raise UnsupportedBrowserUrlError(ref.url, ref.provider.value)

    token = explicit_token or get_https_clone_token(ref.hostname, tokens_dir)
    https_transport = (
        TransportKind.https_token if token else TransportKind.https_anonymous
    )
    username = None
    if token:
        username = get_http_username(ref.url) or DEFAULT_TOKEN_USERNAME

    if ref.url_kind is UrlKind.https_git:
        return ClonePlan(
            local_path=local_path,
            ssh_url=ssh_url,
            https_url=_strip_userinfo(ref.url),
            chosen_transport=https_transport,
            credential=token,
            https_username=username,
        )

    try:
        key_path = find_ssh_key(ref.hostname, ssh_dir)
    except SshKeyNotFoundError as e:
        logger.debug(f"{e.message}, cloning over {https_transport.value}")
        return ClonePlan(
            local_path=local_path,
            ssh_url=ssh_url,
            https_url=https_url,
            chosen_transport=https_transport,
            credential=token,
            https_username=username,
        )

    return ClonePlan(
        local_path=local_path,
        ssh_url=ssh_url,
        https_url=https_url,
        chosen_transport=TransportKind.ssh,
        fallback_transport=https_transport,
        credential=token,
        https_username=username,
        ssh_key_path=key_path,
    )
