"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Wires the store, plugin manager, coordinator and
services lazily, and centralizes result emission (stdout/stderr routing
plus exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from timekeep.output.formatters import format_result

if TYPE_CHECKING:
    from timekeep.config.settings import TimekeepSettings
    from timekeep.infrastructure.store import TimeStore
    from timekeep.plugins.manager import PluginManager
    from timekeep.services.coordinator import UndoRedoCoordinator
    from timekeep.services.entries import TimeEntryService
    from timekeep.services.history import HistoryService
    from timekeep.services.projects import ProjectService
    from timekeep.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Nothing touches the database until a command asks for the store, so
    ``--help`` and ``--version`` stay cheap. One coordinator is shared
    by every service built here.
    """

    def __init__(self, settings: TimekeepSettings) -> None:
        self.settings = settings
        self._store: TimeStore | None = None
        self._plugins: PluginManager | None = None
        self._coordinator: UndoRedoCoordinator | None = None
        self._entries: TimeEntryService | None = None
        self._projects: ProjectService | None = None
        self._history: HistoryService | None = None

        # Configure structured logging
        from timekeep.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        # Enable telemetry context var when verbose
        if settings.verbose:
            from timekeep.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> TimeStore:
        """The store (database opened lazily on first access)."""
        if self._store is None:
            from timekeep.infrastructure.store import TimeStore

            self._store = TimeStore.open(self.settings.db_path)
        return self._store

    @property
    def plugins(self) -> PluginManager:
        if self._plugins is None:
            from timekeep.plugins.builtins.notifier import NotifierPlugin
            from timekeep.plugins.manager import PluginManager

            pm = PluginManager()
            # registered under its entry-point name so discovery skips it
            pm.register_plugin(NotifierPlugin(), name="notifier")
            pm.discover_and_load()
            self._plugins = pm
        return self._plugins

    @property
    def coordinator(self) -> UndoRedoCoordinator:
        if self._coordinator is None:
            from timekeep.services.coordinator import UndoRedoCoordinator

            self._coordinator = UndoRedoCoordinator(self.settings.history, plugins=self.plugins)
        return self._coordinator

    @property
    def entries(self) -> TimeEntryService:
        if self._entries is None:
            from timekeep.services.entries import TimeEntryService

            self._entries = TimeEntryService(self.store, self.coordinator)
        return self._entries

    @property
    def projects(self) -> ProjectService:
        if self._projects is None:
            from timekeep.services.projects import ProjectService

            self._projects = ProjectService(self.store, self.coordinator)
        return self._projects

    @property
    def history(self) -> HistoryService:
        if self._history is None:
            from timekeep.services.history import HistoryService
            from timekeep.services.keybindings import UndoRedoKeybindings

            keybindings = UndoRedoKeybindings(self.coordinator, self.settings.keybindings)
            self._history = HistoryService(self.coordinator, keybindings)
        return self._history

    def emit(self, result: ServiceResult, *, exit_on_error: bool = True) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr and exits with code 1, unless
          *exit_on_error* is False (interactive session).
        """
        output = format_result(
            result,
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
        )
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            if exit_on_error:
                raise SystemExit(1)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
