"""Command: list time entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from timekeep.commands._base import TimekeepCommand

if TYPE_CHECKING:
    from timekeep.commands._context import AppContext

ENTRY_COLUMNS = ["id", "project_id", "date", "start_time", "end_time", "duration", "description"]


@click.command(
    cls=TimekeepCommand,
    examples="""\
  timekeep entries
  timekeep entries --project prj_0123456789ab
  timekeep --json entries""",
)
@click.option("--project", "project_id", default=None, help="Only entries of this project.")
@click.pass_obj
def entries(app: AppContext, project_id: str | None) -> None:
    """List time entries ordered by start time."""
    result = app.entries.load_entries(project_id=project_id)
    if app.settings.json_output or not result.ok:
        app.emit(result)
        return
    from timekeep.output.console import render_rows

    click.echo(render_rows("Time entries", result.data["entries"], ENTRY_COLUMNS), nl=False)
