"""Command: list projects."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from timekeep.commands._base import TimekeepCommand

if TYPE_CHECKING:
    from timekeep.commands._context import AppContext

PROJECT_COLUMNS = ["id", "name", "color", "client_name", "archived"]


@click.command(
    cls=TimekeepCommand,
    examples="""\
  timekeep projects
  timekeep projects --active
  timekeep --json projects""",
)
@click.option("--active", is_flag=True, help="Hide archived projects.")
@click.pass_obj
def projects(app: AppContext, active: bool) -> None:
    """List projects ordered by name."""
    result = app.projects.load_projects(include_archived=not active)
    if app.settings.json_output or not result.ok:
        app.emit(result)
        return
    from timekeep.output.console import render_rows

    click.echo(render_rows("Projects", result.data["projects"], PROJECT_COLUMNS), nl=False)
