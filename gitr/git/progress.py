"""
Clone progress tracking.

Git reports progress on its stderr (or the sideband channel for dulwich) as
carriage-return separated status lines:

    Enumerating objects: 1234, done.
    Counting objects:  42% (519/1234)
    Receiving objects:  87% (1074/1234), 1.20 MiB | 2.40 MiB/s

``ProgressTracker`` is a binary writable stream: it assembles complete lines
from arbitrary byte chunks and folds them into a ``ProgressState`` guarded by a
lock. A renderer reads ``snapshot()`` from another thread.
"""

import re
import threading
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Callable, List, Optional, Tuple


class ProgressPhase(IntEnum):
    """Phases of a git clone, in the order git reports them."""

    starting = 0
    enumerating = 1
    counting = 2
    compressing = 3
    receiving = 4
    resolving = 5
    done = 6


PHASE_LABELS = {
    ProgressPhase.enumerating: "Enumerating objects",
    ProgressPhase.counting: "Counting objects",
    ProgressPhase.compressing: "Compressing objects",
    ProgressPhase.receiving: "Receiving objects",
    ProgressPhase.resolving: "Resolving deltas",
}


@dataclass(frozen=True)
class ProgressState:
    phase: ProgressPhase = ProgressPhase.starting
    percentage: int = 0
    current: int = 0
    total: int = 0
    size: str = ""
    speed: str = ""
    message: str = ""


def _counted(phase: ProgressPhase) -> Callable[[re.Match], ProgressState]:
    def parse(match: re.Match) -> ProgressState:
        return ProgressState(
            phase=phase,
            percentage=min(int(match.group("pct")), 100),
            current=int(match.group("cur")),
            total=int(match.group("total")),
            size=match.groupdict().get("size") or "",
            speed=match.groupdict().get("speed") or "",
        )

    return parse


def _enumerated(match: re.Match) -> ProgressState:
    return ProgressState(
        phase=ProgressPhase.enumerating, total=int(match.group("total"))
    )


_COUNTS = r":\s*(?P<pct>\d+)%\s*\((?P<cur>\d+)/(?P<total>\d+)\)"

# Evaluated top to bottom, first match wins. New phrasings go here.
LINE_PATTERNS: List[Tuple[re.Pattern, Callable[[re.Match], ProgressState]]] = [
    (
        re.compile(
            r"Receiving objects" + _COUNTS + r"(?:,\s*(?P<size>[0-9.]+\s*[KMG]?i?B))?"
            r"(?:\s*\|\s*(?P<speed>[0-9.]+\s*[KMG]?i?B/s))?"
        ),
        _counted(ProgressPhase.receiving),
    ),
    (re.compile(r"Resolving deltas" + _COUNTS), _counted(ProgressPhase.resolving)),
    (
        re.compile(r"Compressing objects" + _COUNTS),
        _counted(ProgressPhase.compressing),
    ),
    (re.compile(r"Counting objects" + _COUNTS), _counted(ProgressPhase.counting)),
    (re.compile(r"Enumerating objects:\s*(?P<total>\d+)"), _enumerated),
]

# Terse or localized lines that only name the phase.
PHASE_KEYWORDS: List[Tuple[str, ProgressPhase]] = [
    ("Enumerating", ProgressPhase.enumerating),
    ("Counting", ProgressPhase.counting),
    ("Compressing", ProgressPhase.compressing),
    ("Receiving", ProgressPhase.receiving),
    ("Resolving", ProgressPhase.resolving),
]

DONE_RE = re.compile(r"done\.?\s*$")


def parse_progress_line(line: str) -> Optional[ProgressState]:
    """
    Map one status line to a progress state.

    Returns None for blank lines, ``done.`` lines and lines that do not name a
    known phase.
    """
    line = line.strip()
    if not line or DONE_RE.search(line):
        return None

    for pattern, build in LINE_PATTERNS:
        match = pattern.search(line)
        if match:
            return build(match)

    for keyword, phase in PHASE_KEYWORDS:
        if keyword in line:
            return ProgressState(phase=phase, message=line)
    return None


class ProgressTracker:
    """Single-writer progress state fed by a transport's progress stream."""

    def __init__(self):
        self._lock = threading.Lock()
        self._state = ProgressState()
        self._buffer = b""
        self.last_line = ""

    # binary stream interface, so transports can write into the tracker directly
    def write(self, data: bytes) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8", errors="replace")
        self._buffer += data
        while True:
            match = re.search(rb"[\r\n]", self._buffer)
            if match is None:
                break
            end = match.start()
            skip = end + 1
            if self._buffer[end : end + 2] == b"\r\n":
                skip += 1
            line = self._buffer[:end].decode("utf-8", errors="replace")
            self._buffer = self._buffer[skip:]
            self.parse_line(line)
        return len(data)

    def flush(self) -> None:
        pass

    def parse_line(self, line: str) -> None:
        state = parse_progress_line(line)
        if state is not None:
            with self._lock:
                self._state = state
        if line.strip():
            self.last_line = line.strip()

    def reset(self) -> None:
        """Start over for a new transport attempt."""
        with self._lock:
            self._state = ProgressState()
            self._buffer = b""

    def finish(self) -> None:
        with self._lock:
            self._state = replace(self._state, phase=ProgressPhase.done, percentage=100)

    def snapshot(self) -> ProgressState:
        with self._lock:
            return self._state
