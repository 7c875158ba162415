"""Console logging helpers using Rich.

Everything goes to stderr so CLI output on stdout stays scriptable. Step and
info lines can be silenced with ``set_quiet``; warnings and errors always
print.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from draftreel.models.draft import Draft

console = Console(stderr=True)
_quiet = False


def set_quiet(quiet: bool) -> None:
    global _quiet
    _quiet = quiet


def _emit(message: str, *, style: str = "") -> None:
    ts = datetime.now().strftime("%H:%M:%S")
    console.print(f"[dim]\\[{ts}][/dim] {message}", style=style, highlight=False)


def log(message: str, *, style: str = "bold") -> None:
    """Log a timestamped message."""
    if not _quiet:
        _emit(message, style=style)


def log_step(step: str, message: str) -> None:
    """Log a processing step, tagged with the component doing it."""
    if not _quiet:
        _emit(f"[bold cyan]{step}[/bold cyan] {message}")


def log_success(message: str) -> None:
    log(f"[green]✓[/green] {message}", style="")


def log_warning(message: str) -> None:
    _emit(f"[yellow]⚠[/yellow] {message}")


def log_error(message: str) -> None:
    _emit(f"[red]✗[/red] {message}")


def drafts_table(drafts: list[Draft], *, title: str = "Drafts") -> Table:
    """Render drafts as a table, most recently modified first."""
    table = Table(title=title, show_lines=False)
    table.add_column("Draft", style="bold")
    table.add_column("Segments", justify="right")
    table.add_column("Kept", justify="right")
    table.add_column("Budget", justify="right")
    table.add_column("Modified")

    for draft in sorted(drafts, key=lambda d: d.last_modified, reverse=True):
        kept_seconds = sum(s.kept_duration_ms() for s in draft.segments) / 1000
        table.add_row(
            draft.id,
            str(len(draft.segments)),
            f"{kept_seconds:.1f}s",
            f"{draft.total_duration_budget:.0f}s",
            draft.last_modified.strftime("%Y-%m-%d %H:%M:%S"),
        )
    return table
