"""HistoryService — undo/redo/clear and shortcut handling as ServiceResults.

Thin adapter for the CLI: the coordinator re-raises effect failures, and
this service is the caller that surfaces them to the operator.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from timekeep.domain.errors import CoordinatorBusyError, ProducerEffectError
from timekeep.domain.keybindings import event_from_chord
from timekeep.services.result import ServiceError, ServiceResult
from timekeep.services.telemetry import traced

if TYPE_CHECKING:
    from timekeep.services.coordinator import UndoRedoCoordinator
    from timekeep.services.keybindings import UndoRedoKeybindings


class HistoryService:
    """Operator-facing history operations."""

    def __init__(
        self,
        coordinator: UndoRedoCoordinator,
        keybindings: UndoRedoKeybindings,
    ) -> None:
        self._coordinator = coordinator
        self._keybindings = keybindings

    @traced
    async def undo(self) -> ServiceResult:
        return await self._run("undo", self._coordinator.undo)

    @traced
    async def redo(self) -> ServiceResult:
        return await self._run("redo", self._coordinator.redo)

    @traced
    async def press(self, chord: str, *, in_text_input: bool = False) -> ServiceResult:
        """Deliver a key chord to the keybinding layer."""
        try:
            event = event_from_chord(chord, in_text_input=in_text_input)
        except ValueError as exc:
            return ServiceResult(
                ok=False,
                op="press",
                error=ServiceError(code="INVALID_CHORD", message=str(exc)),
            )

        consumed: list[bool] = []

        async def handle() -> None:
            consumed.append(await self._keybindings.handle(event))

        result = await self._run("press", handle)
        if not result.ok:
            return result
        data = {**result.data, "chord": chord, "consumed": consumed[0]}
        return result.model_copy(update={"data": data})

    def clear(self) -> ServiceResult:
        dropped = len(self._coordinator.history.retained())
        self._coordinator.clear_history()
        return ServiceResult(ok=True, op="clear", data={"dropped": dropped}, meta=self._flags())

    def show(self) -> ServiceResult:
        return ServiceResult(ok=True, op="history", data=self._coordinator.history.to_dict())

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _run(self, op: str, operation: Callable[[], Awaitable[None]]) -> ServiceResult:
        before = self._coordinator.history
        try:
            await operation()
        except ProducerEffectError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="EFFECT_FAILED", message=str(exc)),
                meta=self._flags(),
            )
        except CoordinatorBusyError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="BUSY", message=str(exc)),
            )
        changed = self._coordinator.history is not before
        warnings = [] if changed or op == "press" else [f"Nothing to {op}"]
        return ServiceResult(
            ok=True,
            op=op,
            data={"changed": changed},
            warnings=warnings,
            meta=self._flags(),
        )

    def _flags(self) -> dict[str, Any]:
        return {
            "can_undo": self._coordinator.can_undo,
            "can_redo": self._coordinator.can_redo,
        }
