"""
Clone orchestration.

``CloneOrchestrator`` turns a raw url into a cloned directory:

    idle -> resolving -> cloning(transport) -> success
                                   |
                                   +-> retrying -> cloning(https) -> success | failed
                                   +-> failed

Transports and the progress renderer are injected, so the state machine can be
driven without a network, a terminal or a ``git`` executable.
"""

import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Tuple

from gitr.config import GitrConfig
from gitr.exceptions import CloneTransportError, FilesystemError, RepoNotFoundError
from gitr.git.paths import get_scm_home, resolve_clone_path, use_dir_hierarchy
from gitr.git.progress import ProgressTracker
from gitr.git.runners import DulwichHttpsRunner, GitRunner, SubprocessGitRunner
from gitr.git.transport import select_transport
from gitr.git.url import get_http_clone_url, get_ssh_clone_url, normalize
from gitr.model.repo import ClonePlan, Provider, RepoReference, TransportKind
from gitr.model.scm import HostPolicy

logger = logging.getLogger(__name__)

# Case-insensitive substrings of transport output meaning the remote repository
# does not exist (or is invisible to us). Retrying on another transport would
# only turn them into a misleading authentication error.
REPO_NOT_FOUND_PATTERNS = (
    "repository not found",
    "repo not found",
    "remote: repository not found",
    "project not found",
    "the project you were looking for could not be found",
    "error: repository '",
)


def is_repo_not_found(
    output: str, patterns: Iterable[str] = REPO_NOT_FOUND_PATTERNS
) -> bool:
    output = output.lower()
    return any(pattern.lower() in output for pattern in patterns)


class CloneState(str, Enum):
    idle = "idle"
    resolving = "resolving"
    cloning = "cloning"
    retrying = "retrying"
    success = "success"
    failed = "failed"


class CloneStatus(str, Enum):
    cloned = "cloned"
    already_exists = "already-exists"
    dry_run = "dry-run"


@dataclass(frozen=True)
class CloneReport:
    """What a clone would do, shown by dry runs."""

    remote: str
    provider: Provider
    hostname: str
    repo_name: str
    ssh_url: str
    http_url: str
    create_dir: bool
    scm_home: Path
    clone_path: Path

    def rows(self) -> List[Tuple[str, str]]:
        return [
            ("remote", self.remote),
            ("provider", self.provider.value),
            ("host", self.hostname),
            ("repo-name", self.repo_name),
            ("ssh-url", self.ssh_url),
            ("http-url", self.http_url),
            ("create-dir", str(self.create_dir).lower()),
            ("scm-home", str(self.scm_home)),
            ("clone-path", str(self.clone_path)),
        ]


@dataclass(frozen=True)
class CloneResult:
    status: CloneStatus
    local_path: Path
    transport: Optional[TransportKind] = None
    report: Optional[CloneReport] = None


class ProgressReporter(Protocol):
    """Renders a transport attempt while it runs."""

    def start(self, url: str, tracker: ProgressTracker) -> None: ...

    def stop(self) -> None: ...


class NullProgressReporter:
    def start(self, url: str, tracker: ProgressTracker) -> None:
        logger.debug(f"Cloning {url}")

    def stop(self) -> None:
        pass


def remove_directory(path: Path) -> None:
    """Remove a clone directory, raising FilesystemError when it stays behind."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FilesystemError(str(path), f"failed to remove directory ({e})") from e


class CloneOrchestrator:
    """
    Resolve and clone repositories according to a configuration.

    Args:
        config: Loaded gitr configuration
        ssh_runner: Runner used for the ssh transport
        https_runner: Runner used for both https transports
        reporter: Progress renderer, started and stopped around every attempt
        ssh_dir: ssh directory used for key discovery (defaults to ~/.ssh)
        tokens_dir: Token directory (defaults to ~/.personal_access_tokens)
        cwd: Clone home when none is configured (defaults to os.getcwd())
    """

    def __init__(
        self,
        config: GitrConfig,
        ssh_runner: Optional[GitRunner] = None,
        https_runner: Optional[GitRunner] = None,
        reporter: Optional[ProgressReporter] = None,
        ssh_dir: Optional[Path] = None,
        tokens_dir: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ):
        self.config = config
        self.registry = config.registry()
        self.ssh_runner = ssh_runner or SubprocessGitRunner()
        self.https_runner = https_runner or DulwichHttpsRunner()
        self.reporter = reporter or NullProgressReporter()
        self.ssh_dir = ssh_dir
        self.tokens_dir = tokens_dir
        self.cwd = cwd
        self.not_found_patterns = REPO_NOT_FOUND_PATTERNS + tuple(
            config.clone.not_found_patterns
        )
        self.tracker = ProgressTracker()
        self.state = CloneState.idle

    def _transition(self, state: CloneState, detail: str = "") -> None:
        logger.debug(
            f"clone state {self.state.value} -> {state.value}"
            + (f" ({detail})" if detail else "")
        )
        self.state = state

    def resolve(
        self, raw_url: str, create_dir: bool = False
    ) -> Tuple[RepoReference, HostPolicy, Path]:
        """Normalize a url and compute its clone path. Pure, touches nothing."""
        ref = normalize(raw_url, self.registry)
        policy = self.registry.lookup(ref.hostname)
        local_path = resolve_clone_path(
            ref,
            policy,
            force_create_dir_hierarchy=create_dir,
            global_home_dir=self.config.scm.home_dir,
            cwd=self.cwd,
        )
        return ref, policy, local_path

    def get_clone_path(self, raw_url: str, create_dir: bool = False) -> Path:
        return self.resolve(raw_url, create_dir)[2]

    def describe(self, raw_url: str, create_dir: bool = False) -> CloneReport:
        ref, policy, local_path = self.resolve(raw_url, create_dir)
        return self._report(ref, policy, local_path, create_dir)

    def _report(
        self,
        ref: RepoReference,
        policy: HostPolicy,
        local_path: Path,
        create_dir: bool,
    ) -> CloneReport:
        return CloneReport(
            remote=ref.url,
            provider=ref.provider,
            hostname=ref.hostname,
            repo_name=ref.repo_name,
            ssh_url=get_ssh_clone_url(ref.hostname, ref.repo_path),
            http_url=get_http_clone_url(
                ref.hostname, ref.repo_path, policy.scheme.value
            ),
            create_dir=use_dir_hierarchy(policy, create_dir),
            scm_home=get_scm_home(policy.home_dir, self.config.scm.home_dir, self.cwd),
            clone_path=local_path,
        )

    def clone(
        self,
        raw_url: str,
        token: Optional[str] = None,
        create_dir: bool = False,
        dry: bool = False,
    ) -> CloneResult:
        """
        Clone a repository into its resolved directory.

        Args:
            raw_url: Any supported repository url
            token: Personal access token, overrides the token file
            create_dir: Force the owner/repo directory hierarchy
            dry: Only resolve and report, touch neither disk nor network

        Returns:
            CloneResult describing what happened

        Raises:
            GitrError: Subclasses for every resolution or transport failure
        """
        self._transition(CloneState.resolving)
        try:
            ref, policy, local_path = self.resolve(raw_url, create_dir)
        except Exception:
            self._transition(CloneState.failed)
            raise

        if dry:
            report = self._report(ref, policy, local_path, create_dir)
            self._transition(CloneState.success, "dry run")
            return CloneResult(CloneStatus.dry_run, local_path, report=report)

        if (local_path / ".git").exists():
            self._transition(CloneState.success, "already exists")
            return CloneResult(CloneStatus.already_exists, local_path)

        try:
            plan = select_transport(
                ref,
                policy,
                local_path,
                explicit_token=token,
                ssh_dir=self.ssh_dir,
                tokens_dir=self.tokens_dir,
            )
            if local_path.exists():
                logger.debug(f"Removing {local_path}, it is not a git repository")
                remove_directory(local_path)
            transport = self._clone_with_fallback(plan)
        except BaseException:
            self._transition(CloneState.failed)
            raise

        self._transition(CloneState.success, transport.value)
        return CloneResult(CloneStatus.cloned, local_path, transport=transport)

    def _clone_with_fallback(self, plan: ClonePlan) -> TransportKind:
        transport = plan.chosen_transport
        try:
            self._attempt(plan, transport)
            return transport
        except CloneTransportError as e:
            if transport is not TransportKind.ssh:
                raise
            if is_repo_not_found(e.output, self.not_found_patterns):
                raise RepoNotFoundError(plan.ssh_url, e.output) from e
            if plan.fallback_transport is None:
                raise
            logger.debug(f"ssh clone failed: {e.output}")

        transport = plan.fallback_transport
        self._transition(CloneState.retrying, transport.value)
        self._attempt(plan, transport)
        return transport

    def _attempt(self, plan: ClonePlan, transport: TransportKind) -> None:
        """Run one transport attempt, leaving no partial directory behind on failure."""
        url = plan.url_for(transport)
        runner = (
            self.ssh_runner if transport is TransportKind.ssh else self.https_runner
        )
        self._transition(CloneState.cloning, transport.value)

        try:
            plan.local_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                str(plan.local_path.parent), f"failed to create directory ({e})"
            ) from e

        tracker = self.tracker
        tracker.reset()
        self.reporter.start(url, tracker)
        succeeded = False
        try:
            runner.run(
                url,
                plan.local_path,
                tracker,
                ssh_key_path=plan.ssh_key_path,
                username=plan.https_username if transport.is_https else None,
                password=(
                    plan.credential if transport is TransportKind.https_token else None
                ),
            )
            tracker.finish()
            succeeded = True
        finally:
            self.reporter.stop()
            if not succeeded:
                self._cleanup(plan.local_path)

    def _cleanup(self, path: Path) -> None:
        try:
            remove_directory(path)
        except FilesystemError as e:
            # the transport error is the one worth reporting
            logger.debug(f"Failed to clean up: {e.message}")
