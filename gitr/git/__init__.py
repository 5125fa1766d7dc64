"""
Git operations for gitr.

This module turns repository urls into local clones:

    url        - normalize ssh, https and browser urls into a RepoReference
    paths      - deterministic clone directories
    transport  - ssh key / https token discovery and transport selection
    runners    - git executable (ssh) and dulwich (https) transports
    progress   - transport progress parsing
    clone      - the clone orchestrator with ssh to https fallback
"""

from .clone import (
    CloneOrchestrator,
    CloneReport,
    CloneResult,
    CloneState,
    CloneStatus,
    is_repo_not_found,
)
from .paths import resolve_clone_path
from .progress import ProgressPhase, ProgressState, ProgressTracker
from .transport import find_ssh_key, get_https_clone_token, select_transport
from .url import normalize

__all__ = [
    "CloneOrchestrator",
    "CloneReport",
    "CloneResult",
    "CloneState",
    "CloneStatus",
    "ProgressPhase",
    "ProgressState",
    "ProgressTracker",
    "find_ssh_key",
    "get_https_clone_token",
    "is_repo_not_found",
    "normalize",
    "resolve_clone_path",
    "select_transport",
]
