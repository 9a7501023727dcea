"""Shared pytest fixtures and test helpers for timekeep tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from timekeep.config.models import HistoryConfig
from timekeep.domain.commands import Command, create_command
from timekeep.infrastructure.store import TimeStore
from timekeep.plugins.manager import PluginManager
from timekeep.services.coordinator import UndoRedoCoordinator
from timekeep.services.entries import TimeEntryService
from timekeep.services.projects import ProjectService
from timekeep.services.telemetry import _current_span, disable_telemetry

START = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)
END = datetime(2024, 5, 1, 10, 30, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep host config, log handlers and telemetry state out of every test."""
    monkeypatch.delenv("TIMEKEEP_CONFIG", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    tk_level = logging.getLogger("timekeep").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("timekeep").setLevel(tk_level)
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store(tmp_path: Path) -> Generator[TimeStore]:
    """Store on a fresh SQLite database with all tables created."""
    s = TimeStore.open(tmp_path / ".timekeep" / "timekeep.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def coordinator() -> UndoRedoCoordinator:
    return UndoRedoCoordinator(HistoryConfig(capacity=10))


@pytest.fixture
def projects(store: TimeStore, coordinator: UndoRedoCoordinator) -> ProjectService:
    return ProjectService(store, coordinator)


@pytest.fixture
def entries(store: TimeStore, coordinator: UndoRedoCoordinator) -> TimeEntryService:
    return TimeEntryService(store, coordinator)


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


class Recorder:
    """Counts effect invocations per command label."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.state: list[str] = []

    def command(self, label: str, *, fail_on: str | None = None) -> Command:
        """Command that appends *label* to ``state`` and removes it on undo.

        *fail_on* (``"execute"``, ``"undo"`` or ``"redo"``) makes that effect
        raise a ProducerEffectError instead.
        """
        from timekeep.domain.errors import ProducerEffectError

        def effect(name: str, action: Callable[[], None]) -> Callable[[], None]:
            def _run() -> None:
                self.calls.append(f"{name}:{label}")
                if fail_on == name:
                    raise ProducerEffectError(f"{name} {label} rejected")
                action()

            return _run

        def add() -> None:
            self.state.append(label)

        def remove() -> None:
            self.state.remove(label)

        return create_command(
            label.upper(),
            effect("execute", add),
            effect("undo", remove),
            redo=effect("redo", add) if fail_on == "redo" else None,
        )

    def count(self, name: str, label: str) -> int:
        return self.calls.count(f"{name}:{label}")


class HookRecorder:
    """Plugin capturing every lifecycle hook call."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> list[dict[str, Any]]:
        return [payload for n, payload in self.events if n == name]


def recording_plugins() -> tuple[PluginManager, HookRecorder]:
    """PluginManager with a HookRecorder registered for every hook."""
    import pluggy

    hookimpl = pluggy.HookimplMarker("timekeep")
    recorder = HookRecorder()

    class _Plugin:
        @hookimpl
        def post_execute(self, command_id: str, kind: str) -> None:
            recorder.events.append(("post_execute", {"command_id": command_id, "kind": kind}))

        @hookimpl
        def post_undo(self, command_id: str, kind: str, redoable: bool) -> None:
            recorder.events.append(
                ("post_undo", {"command_id": command_id, "kind": kind, "redoable": redoable})
            )

        @hookimpl
        def post_redo(self, command_id: str, kind: str) -> None:
            recorder.events.append(("post_redo", {"command_id": command_id, "kind": kind}))

        @hookimpl
        def post_clear(self, dropped: int) -> None:
            recorder.events.append(("post_clear", {"dropped": dropped}))

        @hookimpl
        def history_evicted(self, command_id: str, kind: str, capacity: int) -> None:
            recorder.events.append(
                ("history_evicted", {"command_id": command_id, "kind": kind, "capacity": capacity})
            )

        @hookimpl
        def history_changed(self, can_undo: bool, can_redo: bool, history: dict) -> None:
            recorder.events.append(
                ("history_changed", {"can_undo": can_undo, "can_redo": can_redo})
            )

        @hookimpl
        def effect_failed(self, operation: str, command_id: str, kind: str, error: str) -> None:
            recorder.events.append(
                ("effect_failed", {"operation": operation, "kind": kind, "error": error})
            )

    pm = PluginManager()
    pm.register_plugin(_Plugin(), name="recorder")
    return pm, recorder
