"""Built-in notifier plugin — operator-facing messages for history events.

Each lifecycle event becomes one structured log line on the
``timekeep.notify`` logger. Failed effects are logged at warning level
so they reach the operator even without ``--verbose``.
"""

from __future__ import annotations

from typing import Any

import pluggy
import structlog

hookimpl = pluggy.HookimplMarker("timekeep")


class NotifierPlugin:
    """Log a human-readable notification for each undo/redo event."""

    def __init__(self) -> None:
        self._log = structlog.get_logger("timekeep.notify")

    @hookimpl
    def post_execute(self, command_id: str, kind: str) -> None:
        self._log.info("command.applied", kind=kind, command_id=command_id)

    @hookimpl
    def post_undo(self, command_id: str, kind: str, redoable: bool) -> None:
        self._log.info("command.undone", kind=kind, command_id=command_id, redoable=redoable)

    @hookimpl
    def post_redo(self, command_id: str, kind: str) -> None:
        self._log.info("command.redone", kind=kind, command_id=command_id)

    @hookimpl
    def post_clear(self, dropped: int) -> None:
        self._log.info("history.cleared", dropped=dropped)

    @hookimpl
    def history_evicted(self, command_id: str, kind: str, capacity: int) -> None:
        self._log.info("history.evicted", kind=kind, command_id=command_id, capacity=capacity)

    @hookimpl
    def history_changed(self, can_undo: bool, can_redo: bool, history: dict[str, Any]) -> None:
        self._log.debug("history.flags", can_undo=can_undo, can_redo=can_redo)

    @hookimpl
    def effect_failed(self, operation: str, command_id: str, kind: str, error: str) -> None:
        self._log.warning(
            "command.failed", operation=operation, kind=kind, command_id=command_id, error=error
        )
