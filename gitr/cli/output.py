"""Console output for CLI commands."""

import sys
from functools import wraps
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gitr.exceptions import GitrError
from gitr.git.clone import CloneReport
from gitr.model.repo import TransportKind

from .utils.logging import logger

console = Console()
err_console = Console(stderr=True)


def display_path(path: Path) -> str:
    """Shorten paths under the home directory to ``~/...``."""
    home = Path("~").expanduser()
    try:
        return f"~/{Path(path).relative_to(home).as_posix()}"
    except ValueError:
        return str(path)


def print_summary(data: dict):
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column(overflow="fold")
    for key, value in data.items():
        table.add_row(f"{key}:", escape(str(value)))
    console.print(table)


def print_clone_report(report: CloneReport):
    console.print("[bold cyan]Dry run[/bold cyan], nothing was cloned")
    print_summary(dict(report.rows()))


def print_clone_success(path: Path, transport: Optional[TransportKind] = None):
    via = f" over {transport.value}" if transport else ""
    console.print(f"[green]✓ Repository cloned successfully{via}[/green]")
    console.print(f"  Run [bold]cd {escape(display_path(path))}[/bold]")


def print_already_exists(path: Path):
    console.print(
        f"[yellow]Repository already exists at[/yellow] {escape(display_path(path))}"
    )


def print_warning(title: str, message: str):
    err_console.print(f"[yellow]! {escape(title)}[/yellow] {escape(message)}")


def print_error(error: GitrError):
    err_console.print(f"[bold red]✗ {escape(error.title)}[/bold red]")
    err_console.print(escape(error.message))
    for hint in error.hints:
        err_console.print(f"[dim]→[/dim] {escape(hint)}")


def handle_gitr_errors(func):
    """Print a GitrError as one diagnostic on stderr and exit with status 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GitrError as e:
            logger.debug(f"{type(e).__name__}: {e.message}")
            print_error(e)
            sys.exit(1)

    return wrapper
