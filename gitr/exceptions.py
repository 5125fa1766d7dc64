"""
Exception classes for URL resolution and cloning.
"""

from typing import List, Optional


class GitrError(Exception):
    """Base exception for all gitr errors.

    Every error carries a short ``title`` and a list of ``hints`` so the CLI
    can render a single diagnostic with remediation text.
    """

    title = "Error"

    def __init__(self, message: str, hints: Optional[List[str]] = None):
        self.message = message
        self.hints = list(hints) if hints else []
        super().__init__(message)


class UnparsableUrlError(GitrError):
    """Raised when a string has no recognizable host/path structure."""

    title = "Invalid Repository URL"

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        message = f"Could not parse repository URL '{url}'"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            hints=[
                "Use an SSH url (git@host:owner/repo.git), an HTTPS clone url "
                "or a browser url such as https://github.com/owner/repo"
            ],
        )


class UnknownHostError(GitrError):
    """Raised when a hostname is not configured in the SCM host registry."""

    title = "Unknown SCM Host"

    def __init__(self, hostname: str):
        self.hostname = hostname
        super().__init__(
            f"The hostname {hostname} is not configured in gitr.",
            hints=["Add it to your config with 'gitr config edit'"],
        )


class UnsupportedBrowserUrlError(GitrError):
    """Raised for browser urls whose page paths do not map to repo paths."""

    title = "Unsupported URL Format"

    def __init__(self, url: str, provider: str):
        self.url = url
        self.provider = provider
        super().__init__(
            f"gitr does not support clone using browser URLs for {provider}.",
            hints=["Please use SSH or HTTPS clone URLs instead"],
        )


class SshKeyNotFoundError(GitrError):
    """Raised when no usable private key exists for a host."""

    title = "SSH Key Not Found"

    def __init__(self, hostname: str, key_path: Optional[str] = None):
        self.hostname = hostname
        self.key_path = key_path
        if key_path:
            message = f"No usable ssh private key for {hostname} at {key_path}"
        else:
            message = f"No ssh private key found for {hostname}"
        super().__init__(
            message,
            hints=["Configure an IdentityFile for the host in ~/.ssh/config"],
        )


class RepoNotFoundError(GitrError):
    """Raised when the remote reports that the repository does not exist.

    This is terminal: an HTTPS retry would only produce a misleading
    authentication error.
    """

    title = "Repository Not Found"

    def __init__(self, url: str, output: str = ""):
        self.url = url
        self.output = output
        super().__init__(
            "repository not found. Please verify the URL exists and you have access",
            hints=[f"Checked {url}"],
        )


class CloneTransportError(GitrError):
    """Raised when a transport fails and no further fallback is available."""

    title = "Clone Failed"

    def __init__(self, url: str, output: str = "", transport: Optional[str] = None):
        self.url = url
        self.output = output.strip()
        self.transport = transport
        message = f"Failed to clone the repository from {url}"
        if self.output:
            message += f":\n{self.output}"
        super().__init__(
            message,
            hints=[
                "Check your network connection and repository URL",
                "For private repos, ensure you have the correct access token",
            ],
        )


class FilesystemError(GitrError):
    """Raised when the clone directory cannot be created or removed."""

    title = "Filesystem Error"

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"{reason}: {path}")


class NotInGitRepoError(GitrError):
    """Raised when a web command runs outside of a git working tree."""

    title = "Not a Git Repository"

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"{path} is not inside a git repository",
            hints=["Run this command from within a cloned repository"],
        )


class LocalRepoError(GitrError):
    """Raised when the local repository lacks what a web command needs."""

    title = "Repository Error"
