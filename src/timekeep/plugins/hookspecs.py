"""Pluggy hook specifications for undo/redo lifecycle events.

The coordinator dispatches these synchronously after a transition has
committed (or, for ``effect_failed``, after an effect raised and the
history was left untouched). Payloads carry command IDs and kinds only;
command metadata stays opaque.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("timekeep")


class TimekeepHookSpec:
    """Hook specifications for the timekeep plugin system."""

    @hookspec
    def post_execute(self, command_id: str, kind: str) -> None:
        """Called after a command executed and became ``present``."""

    @hookspec
    def post_undo(self, command_id: str, kind: str, redoable: bool) -> None:
        """Called after a command was undone.

        ``redoable`` is False when the undone command was not fed into
        ``future`` (second and later consecutive undos in parity mode).
        """

    @hookspec
    def post_redo(self, command_id: str, kind: str) -> None:
        """Called after a command was redone."""

    @hookspec
    def post_clear(self, dropped: int) -> None:
        """Called after the history was cleared; ``dropped`` commands were discarded."""

    @hookspec
    def history_evicted(self, command_id: str, kind: str, capacity: int) -> None:
        """Called when the oldest command was dropped to respect capacity."""

    @hookspec
    def history_changed(self, can_undo: bool, can_redo: bool, history: dict[str, Any]) -> None:
        """Called after every committed transition with the derived flags."""

    @hookspec
    def effect_failed(self, operation: str, command_id: str, kind: str, error: str) -> None:
        """Called when an execute/undo/redo effect raised. History is unchanged."""
