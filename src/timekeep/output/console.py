"""Rich Console factory, theme, and table views for timekeep output.

Creates Console instances that render to a StringIO buffer, preserving
the ``render_*() -> str`` contract. In non-TTY environments (tests,
pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO
from typing import Any

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

TIMEKEEP_THEME = Theme(
    {
        "tk.ok": "bold green",
        "tk.error": "bold red",
        "tk.warning": "bold yellow",
        "tk.slot.past": "dim",
        "tk.slot.present": "bold cyan",
        "tk.slot.future": "magenta",
        "tk.id": "bold blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=TIMEKEEP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def render_history(history: dict[str, Any], *, no_color: bool = False) -> str:
    """Render a ``History.to_dict()`` payload, newest entry at the top."""
    console = create_console(no_color=no_color)
    table = Table(title=f"History (capacity {history['capacity']})")
    table.add_column("slot")
    table.add_column("kind")
    table.add_column("id", style="tk.id")

    for ref in history["future"][::-1]:
        table.add_row("future", ref["kind"], ref["id"], style="tk.slot.future")
    if history["present"] is not None:
        ref = history["present"]
        table.add_row("present", ref["kind"], ref["id"], style="tk.slot.present")
    for ref in history["past"][::-1]:
        table.add_row("past", ref["kind"], ref["id"], style="tk.slot.past")

    console.print(table)
    flags = f"can_undo={history['can_undo']} can_redo={history['can_redo']}"
    console.print(flags)
    return get_output(console)


def render_rows(title: str, rows: list[dict[str, Any]], columns: list[str]) -> str:
    """Render a list of summary dicts as a table with the given *columns*."""
    console = create_console(width=160)
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if row.get(c) is None else str(row.get(c)) for c in columns))
    console.print(table)
    return get_output(console)
