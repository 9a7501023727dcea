"""Command: interactive session over one undo/redo history.

Reads one instruction per line from stdin until ``quit`` or end of input.
Every mutation goes through the producer services, so everything typed in
a session can be undone, redone, or cleared from the same history.
Instructions are split with :func:`shlex.split`, so quote values that
contain spaces.
"""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import click

from timekeep.commands._base import TimekeepCommand
from timekeep.commands.entries import ENTRY_COLUMNS
from timekeep.commands.projects import PROJECT_COLUMNS
from timekeep.services.projects import project_summary
from timekeep.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from timekeep.commands._context import AppContext

PROMPT = "timekeep> "

SESSION_HELP = """\
  project NAME [color=C] [client=NAME]   create a project
  rename PROJECT NAME                    rename a project
  archive PROJECT | unarchive PROJECT    toggle the archived flag
  add PROJECT START END [DESCRIPTION]    book a time entry (ISO timestamps)
  edit ENTRY FIELD=VALUE ...             change entry fields
  move ENTRY START                       shift an entry, keeping its duration
  delete ENTRY                           delete an entry
  undo | redo                            step through the history
  CHORD [--in-input]                     press a shortcut, e.g. ctrl+z
  entries | projects | history           show state
  clear                                  drop the whole history
  help | quit"""

Handler = Callable[["SessionRunner", list[str]], Awaitable[ServiceResult | None]]


def _usage(op: str, message: str) -> ServiceResult:
    return ServiceResult(ok=False, op=op, error=ServiceError(code="USAGE", message=message))


def _split_assignments(op: str, args: list[str]) -> dict[str, str] | ServiceResult:
    """Parse ``key=value`` tokens; returns a usage error result on a bare token."""
    pairs: dict[str, str] = {}
    for token in args:
        key, sep, value = token.partition("=")
        if not sep or not key:
            return _usage(op, f"Expected FIELD=VALUE, got {token!r}")
        pairs[key] = value
    return pairs


class SessionRunner:
    """Dispatches session lines to services and renders their results."""

    def __init__(self, app: AppContext) -> None:
        self.app = app
        self.done = False

    async def run_line(self, line: str) -> None:
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            self.app.emit(_usage("session", str(exc)), exit_on_error=False)
            return
        if not tokens:
            return

        verb, args = tokens[0].lower(), tokens[1:]
        handler = _HANDLERS.get(verb)
        if handler is None and "+" in verb:
            result: ServiceResult | None = await self._press(tokens[0], args)
        elif handler is None:
            result = _usage(verb, f"Unknown instruction {verb!r} (try 'help')")
        else:
            result = await handler(self, args)
        if result is not None:
            self.app.emit(result, exit_on_error=False)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def _project(self, args: list[str]) -> ServiceResult:
        if not args:
            return _usage("create_project", "project NAME [color=C] [client=NAME]")
        options = _split_assignments("create_project", args[1:])
        if isinstance(options, ServiceResult):
            return options
        color = options.pop("color", "BLUE")
        client_name = options.pop("client", None)
        if options:
            return _usage("create_project", f"Unknown option(s): {', '.join(sorted(options))}")
        return await self.app.projects.create_project(
            args[0], color=_resolve_color(color), client_name=client_name
        )

    async def _rename(self, args: list[str]) -> ServiceResult:
        if len(args) != 2:
            return _usage("update_project", "rename PROJECT NAME")
        return await self.app.projects.update_project(self._project_id(args[0]), name=args[1])

    async def _archive(self, args: list[str], *, archived: bool = True) -> ServiceResult:
        if len(args) != 1:
            return _usage("archive_project", "archive PROJECT")
        return await self.app.projects.archive_project(
            self._project_id(args[0]), archived=archived
        )

    async def _unarchive(self, args: list[str]) -> ServiceResult:
        return await self._archive(args, archived=False)

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def _add(self, args: list[str]) -> ServiceResult:
        if len(args) not in (3, 4):
            return _usage("add_entry", "add PROJECT START END [DESCRIPTION]")
        description = args[3] if len(args) == 4 else None
        return await self.app.entries.add_entry(
            self._project_id(args[0]), args[1], args[2], description=description
        )

    async def _edit(self, args: list[str]) -> ServiceResult:
        if len(args) < 2:
            return _usage("update_entry", "edit ENTRY FIELD=VALUE ...")
        changes = _split_assignments("update_entry", args[1:])
        if isinstance(changes, ServiceResult):
            return changes
        if "project_id" in changes:
            changes["project_id"] = self._project_id(changes["project_id"])
        return await self.app.entries.update_entry(args[0], **changes)

    async def _move(self, args: list[str]) -> ServiceResult:
        if len(args) != 2:
            return _usage("move_entry", "move ENTRY START")
        return await self.app.entries.move_entry(args[0], args[1])

    async def _delete(self, args: list[str]) -> ServiceResult:
        if len(args) != 1:
            return _usage("delete_entry", "delete ENTRY")
        return await self.app.entries.delete_entry(args[0])

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def _undo(self, _args: list[str]) -> ServiceResult:
        return await self.app.history.undo()

    async def _redo(self, _args: list[str]) -> ServiceResult:
        return await self.app.history.redo()

    async def _press(self, chord: str, args: list[str]) -> ServiceResult:
        if args not in ([], ["--in-input"]):
            return _usage("press", "CHORD [--in-input]")
        return await self.app.history.press(chord, in_text_input=bool(args))

    async def _clear(self, _args: list[str]) -> ServiceResult:
        return self.app.history.clear()

    async def _history(self, _args: list[str]) -> ServiceResult | None:
        result = self.app.history.show()
        if self.app.settings.json_output:
            return result
        from timekeep.output.console import render_history

        click.echo(render_history(result.data), nl=False)
        return None

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    async def _entries(self, _args: list[str]) -> ServiceResult | None:
        rows = [e.to_summary() for e in self.app.entries.entries]
        return self._rows("entries", "Time entries", rows, ENTRY_COLUMNS)

    async def _projects(self, _args: list[str]) -> ServiceResult | None:
        rows = [project_summary(p) for p in self.app.projects.projects]
        return self._rows("projects", "Projects", rows, PROJECT_COLUMNS)

    async def _help(self, _args: list[str]) -> None:
        click.echo(SESSION_HELP)

    async def _quit(self, _args: list[str]) -> None:
        self.done = True

    def _rows(
        self, op: str, title: str, rows: list[dict[str, Any]], columns: list[str]
    ) -> ServiceResult | None:
        if self.app.settings.json_output:
            return ServiceResult(ok=True, op=op, data={"count": len(rows), op: rows})
        from timekeep.output.console import render_rows

        click.echo(render_rows(title, rows, columns), nl=False)
        return None

    def _project_id(self, ref: str) -> str:
        """Accept a project ID or an exact (case-insensitive) project name."""
        if self.app.projects.get(ref) is not None:
            return ref
        matches = [p.id for p in self.app.projects.projects if p.name.lower() == ref.lower()]
        return matches[0] if len(matches) == 1 else ref


def _resolve_color(value: str) -> str:
    """Map a palette name (``green``) to its hex value; pass hex values through."""
    from timekeep.domain.entities import ProjectColor

    try:
        return ProjectColor[value.upper()].value
    except KeyError:
        return value


_HANDLERS: dict[str, Handler] = {
    "project": SessionRunner._project,
    "rename": SessionRunner._rename,
    "archive": SessionRunner._archive,
    "unarchive": SessionRunner._unarchive,
    "add": SessionRunner._add,
    "edit": SessionRunner._edit,
    "move": SessionRunner._move,
    "delete": SessionRunner._delete,
    "undo": SessionRunner._undo,
    "redo": SessionRunner._redo,
    "clear": SessionRunner._clear,
    "history": SessionRunner._history,
    "entries": SessionRunner._entries,
    "projects": SessionRunner._projects,
    "help": SessionRunner._help,
    "quit": SessionRunner._quit,
    "exit": SessionRunner._quit,
}


async def _run_session(app: AppContext) -> None:
    runner = SessionRunner(app)
    stdin = click.get_text_stream("stdin")
    interactive = stdin.isatty()
    while not runner.done:
        if interactive:
            click.echo(PROMPT, nl=False)
        line = stdin.readline()
        if not line:
            break
        await runner.run_line(line)


@click.command(
    cls=TimekeepCommand,
    examples="""\
  timekeep session
  printf 'project Acme\\nadd Acme 2024-05-01T09:00 2024-05-01T10:30\\nundo\\n' | timekeep session
  timekeep --json session < script.txt""",
)
@click.pass_obj
def session(app: AppContext) -> None:
    """Run an interactive session with undo/redo history.

    Type 'help' inside the session for the list of instructions.
    """
    for loaded in (app.projects.load_projects(), app.entries.load_entries()):
        if not loaded.ok:
            app.emit(loaded)
    asyncio.run(_run_session(app))
