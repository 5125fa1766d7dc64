"""
Read the local checkout the web commands operate on.

Remote url, current branch and remote branches come from GitPython; nothing
here talks to the network.
"""

import logging
from pathlib import Path
from typing import Optional

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from gitr.exceptions import LocalRepoError, NotInGitRepoError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
FALLBACK_DEFAULT_BRANCHES = ("main", "master")


def open_repo(path: Optional[Path] = None) -> Repo:
    """Open the repository containing ``path`` (defaults to the cwd)."""
    path = Path(path) if path is not None else Path.cwd()
    try:
        return Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise NotInGitRepoError(str(path)) from None


def _remote(repo: Repo):
    if not repo.remotes:
        raise LocalRepoError(
            "No remotes found for this repository",
            hints=["Add one with 'git remote add origin <url>'"],
        )
    for remote in repo.remotes:
        if remote.name == DEFAULT_REMOTE:
            return remote
    return repo.remotes[0]


def get_remote_url(repo: Repo) -> str:
    """Fetch url of ``origin``, or of the first remote when there is no origin."""
    return next(_remote(repo).urls)


def get_branch(repo: Repo) -> str:
    try:
        return repo.active_branch.name
    except TypeError as e:
        # detached HEAD
        raise LocalRepoError(
            f"Failed to get the current branch: {e}",
            hints=["Check out a branch first"],
        ) from e


def _remote_branch_names(repo: Repo) -> set:
    remote = _remote(repo)
    prefix = f"{remote.name}/"
    return {
        ref.name[len(prefix) :] for ref in remote.refs if ref.name.startswith(prefix)
    }


def branch_exists_on_remote(repo: Repo, branch: str) -> bool:
    return branch in _remote_branch_names(repo)


def get_default_branch(repo: Repo) -> str:
    """
    Default branch of the remote.

    Uses the remote's ``HEAD`` symbolic ref when it was recorded by the clone,
    otherwise the first of main/master present on the remote.

    Raises:
        LocalRepoError: If the default branch cannot be determined
    """
    remote = _remote(repo)
    prefix = f"{remote.name}/"
    for ref in remote.refs:
        if ref.name == f"{prefix}HEAD":
            try:
                target = ref.reference.name
            except TypeError:
                break
            logger.debug(f"{ref.name} points at {target}")
            return target[len(prefix) :] if target.startswith(prefix) else target

    names = _remote_branch_names(repo)
    for candidate in FALLBACK_DEFAULT_BRANCHES:
        if candidate in names:
            return candidate
    raise LocalRepoError(f"Unable to determine the default branch of {remote.name}")


def get_relative_path(repo: Repo, path: Path) -> str:
    """Path of a file relative to the working tree root, with forward slashes."""
    root = Path(repo.working_tree_dir).resolve()
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        raise LocalRepoError(f"{path} is outside of the repository at {root}") from None
