"""Tests for HistoryService — operator-facing undo/redo/clear results."""

from __future__ import annotations

import anyio
import pytest

from tests.conftest import Recorder
from timekeep.config.models import HistoryConfig
from timekeep.services.coordinator import UndoRedoCoordinator
from timekeep.services.history import HistoryService
from timekeep.services.keybindings import UndoRedoKeybindings


@pytest.fixture
def coord() -> UndoRedoCoordinator:
    return UndoRedoCoordinator(HistoryConfig(capacity=5))


@pytest.fixture
def svc(coord: UndoRedoCoordinator) -> HistoryService:
    return HistoryService(coord, UndoRedoKeybindings(coord))


class TestUndoRedo:
    def test_undo_reports_flags(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()
        anyio.run(coord.execute_command, rec.command("a"))
        result = anyio.run(svc.undo)
        assert result.ok
        assert result.data == {"changed": True}
        assert result.meta == {"can_undo": False, "can_redo": True}
        assert result.warnings == []

    def test_nothing_to_undo_warns(self, svc: HistoryService) -> None:
        result = anyio.run(svc.undo)
        assert result.ok
        assert result.data == {"changed": False}
        assert result.warnings == ["Nothing to undo"]

    def test_nothing_to_redo_warns(self, svc: HistoryService) -> None:
        result = anyio.run(svc.redo)
        assert result.warnings == ["Nothing to redo"]

    def test_effect_failure_surfaces(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()
        anyio.run(coord.execute_command, rec.command("a", fail_on="undo"))
        result = anyio.run(svc.undo)
        assert not result.ok
        assert result.error.code == "EFFECT_FAILED"
        assert "undo a rejected" in result.error.message
        assert result.meta == {"can_undo": True, "can_redo": False}


class TestPress:
    def test_press_undo(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()
        anyio.run(coord.execute_command, rec.command("a"))
        result = anyio.run(svc.press, "ctrl+z")
        assert result.ok
        assert result.data == {"changed": True, "chord": "ctrl+z", "consumed": True}
        assert rec.state == []

    def test_press_in_text_input(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()
        anyio.run(coord.execute_command, rec.command("a"))

        async def press() -> object:
            return await svc.press("ctrl+z", in_text_input=True)

        result = anyio.run(press)
        assert result.data["consumed"] is False
        assert result.data["changed"] is False
        assert result.warnings == []

    def test_invalid_chord(self, svc: HistoryService) -> None:
        result = anyio.run(svc.press, "ctrl+")
        assert result.error.code == "INVALID_CHORD"


class TestClearAndShow:
    def test_clear(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()

        async def scenario() -> None:
            await coord.execute_command(rec.command("a"))
            await coord.execute_command(rec.command("b"))
            await coord.undo()

        anyio.run(scenario)
        result = svc.clear()
        assert result.data == {"dropped": 2}
        assert result.meta == {"can_undo": False, "can_redo": False}
        assert rec.state == ["a"]

    def test_show(self, coord: UndoRedoCoordinator, svc: HistoryService) -> None:
        rec = Recorder()
        cmd = rec.command("a")
        anyio.run(coord.execute_command, cmd)
        result = svc.show()
        assert result.op == "history"
        assert result.data["capacity"] == 5
        assert result.data["present"] == {"id": cmd.id, "kind": "A"}
