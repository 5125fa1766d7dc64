"""Live clone progress using rich."""

import threading
from typing import Optional

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from gitr.git.progress import (
    PHASE_LABELS,
    ProgressPhase,
    ProgressState,
    ProgressTracker,
)

BAR_WIDTH = 25
STOP_GRACE_SECONDS = 0.5


def format_count(current: int, total: int) -> str:
    """
    Format object counts with thousands separators.

    e.g. (1074, 12345) -> "1,074/12,345"
         (0, 982) -> "982"
    """
    if current:
        return f"{current:,}/{total:,}"
    return f"{total:,}" if total else ""


def render_progress(url: str, state: ProgressState) -> RenderableType:
    """One row per phase: finished phases checked, the active one with a bar."""
    table = Table.grid(padding=(0, 1))
    table.add_column(width=2)
    table.add_column(min_width=20)
    table.add_column()
    table.add_column()

    for phase, label in PHASE_LABELS.items():
        if phase < state.phase:
            table.add_row("[green]✓[/green]", f"[dim]{label}[/dim]", "", "")
        elif phase == state.phase:
            details = format_count(state.current, state.total)
            if state.size:
                details += f", {state.size}"
            if state.speed:
                details += f" | {state.speed}"
            table.add_row(
                "[cyan]●[/cyan]",
                f"[bold]{label}[/bold]",
                ProgressBar(total=100, completed=state.percentage, width=BAR_WIDTH),
                f"{state.percentage:>3}% {details}".rstrip(),
            )
        else:
            table.add_row("[dim]○[/dim]", f"[dim]{label}[/dim]", "", "")

    header = Text.from_markup(f"[dim]→[/dim] Cloning [bold]{url}[/bold]")
    if state.phase is ProgressPhase.starting:
        return Group(header, Text("  Starting...", style="dim"))
    if state.message:
        return Group(header, table, Text(f"  {state.message}", style="dim"))
    return Group(header, table)


class CloneProgressDisplay:
    """
    Render a ``ProgressTracker`` while a transport runs.

    A daemon thread polls the tracker's snapshot every tick and redraws the
    live display. The main thread is never blocked by rendering.
    """

    def __init__(
        self, console: Optional[Console] = None, refresh_per_second: int = 10
    ):
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second

        self._url = ""
        self._tracker: Optional[ProgressTracker] = None
        self._live: Optional[Live] = None
        self._render_thread: Optional[threading.Thread] = None
        self._stop_render_thread = threading.Event()

    def start(self, url: str, tracker: ProgressTracker) -> None:
        self._url = url
        self._tracker = tracker

        self._live = Live(
            self._render(),
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            transient=True,
        )
        self._live.start()

        self._stop_render_thread.clear()
        self._render_thread = threading.Thread(target=self._render_loop, daemon=True)
        self._render_thread.start()

    def _render(self) -> RenderableType:
        state = self._tracker.snapshot() if self._tracker else ProgressState()
        return render_progress(self._url, state)

    def _render_loop(self) -> None:
        interval = 1 / self.refresh_per_second
        while not self._stop_render_thread.wait(interval):
            live = self._live
            if live is not None:
                live.update(self._render())

    def stop(self) -> None:
        """Stop rendering and give the terminal back. Safe to call twice."""
        self._stop_render_thread.set()
        if self._render_thread and self._render_thread.is_alive():
            self._render_thread.join(timeout=STOP_GRACE_SECONDS)
        self._render_thread = None

        if self._live:
            self._live.stop()
            self._live = None
        self._tracker = None
