"""Subcommand modules for timekeep.

Provides register_commands() which uses deferred imports to keep
``timekeep --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from timekeep.commands.entries import entries
    from timekeep.commands.projects import projects
    from timekeep.commands.session import session

    cli.add_command(session)
    cli.add_command(entries)
    cli.add_command(projects)
