"""
Transport execution.

Two runners share one interface, ``run(url, dest, progress, ...)``:

    SubprocessGitRunner: shells out to ``git clone --progress`` (ssh, using the
        user's ssh setup)
    DulwichHttpsRunner: ``dulwich.porcelain.clone`` over http(s), with an
        optional token as basic-auth password

Both stream progress into a ``ProgressTracker`` and raise
``CloneTransportError`` carrying the transport's diagnostic output on failure.
"""

import logging
import os
import shlex
import signal
import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

from dulwich import porcelain

from gitr.exceptions import CloneTransportError
from gitr.git.progress import ProgressTracker

logger = logging.getLogger(__name__)

TERMINATE_GRACE_SECONDS = 5
_READ_CHUNK = 4096


class GitRunner(Protocol):
    def run(
        self,
        url: str,
        dest: Path,
        progress: ProgressTracker,
        *,
        ssh_key_path: Optional[Path] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None: ...


def _terminate(process: subprocess.Popen) -> None:
    """SIGTERM the clone's process group, SIGKILL it if it does not exit in time."""
    try:
        os.killpg(os.getpgid(process.pid), signal.SIGTERM)
        try:
            process.wait(timeout=TERMINATE_GRACE_SECONDS)
            logger.debug("git clone terminated gracefully.")
        except subprocess.TimeoutExpired:
            logger.debug("git clone did not terminate gracefully, forcing kill...")
            os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            process.wait()
    except (ProcessLookupError, OSError):
        # already gone
        pass


class SubprocessGitRunner:
    """Clone with the ``git`` executable."""

    def __init__(self, git_executable: str = "git"):
        self.git_executable = git_executable

    def build_command(self, url: str, dest: Path) -> List[str]:
        # --progress forces progress output although stderr is not a tty
        return [self.git_executable, "clone", "--progress", url, dest.as_posix()]

    def build_env(self, ssh_key_path: Optional[Path] = None) -> dict:
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        if ssh_key_path is not None and "GIT_SSH_COMMAND" not in env:
            env["GIT_SSH_COMMAND"] = (
                f"ssh -i {shlex.quote(ssh_key_path.as_posix())} -o IdentitiesOnly=yes"
            )
        return env

    def run(
        self,
        url: str,
        dest: Path,
        progress: ProgressTracker,
        *,
        ssh_key_path: Optional[Path] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        command = self.build_command(url, dest)
        logger.debug(f"Running {' '.join(command)}")

        output = bytearray()
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                env=self.build_env(ssh_key_path),
                start_new_session=True,
            )
        except OSError as e:
            raise CloneTransportError(url, f"failed to run {self.git_executable}: {e}")

        stderr = process.stderr
        try:
            for chunk in iter(lambda: stderr.read1(_READ_CHUNK), b""):
                output += chunk
                progress.write(chunk)
            exit_code = process.wait()
        finally:
            if process.poll() is None:
                _terminate(process)
            stderr.close()

        if exit_code != 0:
            text = output.decode("utf-8", errors="replace")
            logger.debug(f"git clone exited with {exit_code}: {text.strip()}")
            raise CloneTransportError(url, f"clone failed: {text}", transport="ssh")


class DulwichHttpsRunner:
    """Clone over http(s) with dulwich."""

    def run(
        self,
        url: str,
        dest: Path,
        progress: ProgressTracker,
        *,
        ssh_key_path: Optional[Path] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        kwargs = {}
        if password:
            kwargs["username"] = username
            kwargs["password"] = password

        logger.debug(f"Cloning {url} with dulwich")
        try:
            repo = porcelain.clone(
                source=url,
                target=dest.as_posix(),
                checkout=True,
                bare=False,
                errstream=progress,
                **kwargs,
            )
        except Exception as e:
            if password:
                raise CloneTransportError(
                    url,
                    f"failed to clone repo using personal access token: {e}",
                    transport="https",
                ) from e
            raise CloneTransportError(url, str(e), transport="https") from e
        repo.close()
