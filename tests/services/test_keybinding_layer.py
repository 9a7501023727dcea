"""Tests for UndoRedoKeybindings — shortcut dispatch onto the coordinator."""

from __future__ import annotations

import anyio

from tests.conftest import Recorder
from timekeep.config.models import KeybindingConfig
from timekeep.domain.keybindings import KeyEvent, event_from_chord
from timekeep.services.coordinator import UndoRedoCoordinator
from timekeep.services.keybindings import UndoRedoKeybindings


def _layer(config: KeybindingConfig | None = None) -> tuple[UndoRedoKeybindings, Recorder]:
    coord = UndoRedoCoordinator()
    rec = Recorder()
    anyio.run(coord.execute_command, rec.command("a"))
    return UndoRedoKeybindings(coord, config), rec


def _press(layer: UndoRedoKeybindings, chord: str, *, in_text_input: bool = False) -> bool:
    return anyio.run(layer.handle, event_from_chord(chord, in_text_input=in_text_input))


class TestDefaults:
    def test_default_bindings(self) -> None:
        layer, _ = _layer()
        assert [(b.shortcut.chord(), b.action) for b in layer.bindings] == [
            ("ctrl+z", "undo"),
            ("ctrl+y", "redo"),
            ("cmd+shift+z", "redo"),
        ]

    def test_ctrl_z_undoes(self) -> None:
        layer, rec = _layer()
        assert _press(layer, "ctrl+z") is True
        assert rec.state == []

    def test_cmd_z_undoes(self) -> None:
        layer, rec = _layer()
        assert _press(layer, "cmd+z") is True
        assert rec.state == []

    def test_redo_chords(self) -> None:
        for chord in ("ctrl+y", "cmd+shift+z", "ctrl+shift+z"):
            layer, rec = _layer()
            _press(layer, "ctrl+z")
            assert _press(layer, chord) is True
            assert rec.state == ["a"], chord

    def test_unbound_chord_not_consumed(self) -> None:
        layer, rec = _layer()
        assert _press(layer, "ctrl+x") is False
        assert _press(layer, "alt+z") is False
        assert rec.state == ["a"]


class TestGuards:
    def test_disabled_action_consumed_without_effect(self) -> None:
        layer, rec = _layer()
        assert _press(layer, "ctrl+y") is True
        assert rec.calls == ["execute:a"]

    def test_text_input_skipped(self) -> None:
        layer, rec = _layer()
        assert _press(layer, "ctrl+z", in_text_input=True) is False
        assert rec.state == ["a"]
        assert layer.match(KeyEvent(key="z", ctrl=True, in_text_input=True)) is None

    def test_allow_in_inputs(self) -> None:
        layer, rec = _layer(KeybindingConfig(allow_in_inputs=True))
        assert _press(layer, "ctrl+z", in_text_input=True) is True
        assert rec.state == []

    def test_custom_chords(self) -> None:
        layer, rec = _layer(KeybindingConfig(undo=["alt+backspace"], redo=[]))
        assert _press(layer, "ctrl+z") is False
        assert _press(layer, "alt+backspace") is True
        assert rec.state == []
