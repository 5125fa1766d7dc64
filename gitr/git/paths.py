"""Deterministic clone locations."""

import os
from pathlib import Path
from typing import Optional

from gitr.model.repo import RepoReference
from gitr.model.scm import HostPolicy


def get_scm_home(
    host_home_dir: Optional[str],
    global_home_dir: Optional[str],
    cwd: Optional[Path] = None,
) -> Path:
    """
    Pick the directory clones are placed under.

    The first non-empty of the host's home dir, the global home dir and the
    current working directory wins. ``~`` is expanded and relative homes are
    anchored at ``cwd``.
    """
    base = cwd if cwd is not None else Path(os.getcwd())
    for candidate in (host_home_dir, global_home_dir):
        if candidate:
            home = Path(candidate).expanduser()
            return home if home.is_absolute() else base / home
    return base


def use_dir_hierarchy(policy: HostPolicy, force_create_dir_hierarchy: bool) -> bool:
    return force_create_dir_hierarchy or policy.always_create_dir_hierarchy


def get_relative_clone_path(
    ref: RepoReference, policy: HostPolicy, force_create_dir_hierarchy: bool
) -> str:
    """
    Relative clone path for a repository.

    Hierarchy mode mirrors the SCM structure (``[host/]owner/repo``). Otherwise
    only the repository name is used, so repositories sharing a name land in
    the same flat directory.
    """
    if use_dir_hierarchy(policy, force_create_dir_hierarchy):
        if policy.include_host_in_dir_hierarchy:
            return f"{ref.hostname}/{ref.repo_path}"
        return ref.repo_path
    return ref.repo_name


def resolve_clone_path(
    ref: RepoReference,
    policy: HostPolicy,
    force_create_dir_hierarchy: bool = False,
    global_home_dir: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> Path:
    """
    Compute the local directory a repository is cloned into.

    The result depends only on its arguments: the same reference, policy,
    flag and home always give the same path.

    Args:
        ref: Normalized repository reference
        policy: Policy of the reference's host
        force_create_dir_hierarchy: Use the directory hierarchy even if the
            policy does not ask for it
        global_home_dir: Clone home from the global configuration
        cwd: Directory used when no home is configured (defaults to os.getcwd())

    Returns:
        Absolute path of the clone directory
    """
    home = get_scm_home(policy.home_dir, global_home_dir, cwd)
    relative = get_relative_clone_path(ref, policy, force_create_dir_hierarchy)
    return home.joinpath(*relative.split("/"))
