"""BaseService — shared foundation for the producer services.

Every producer receives the store it writes to and the coordinator it
submits commands to, by handle; there is no ambient global history.
Producers own their local cache (the slice state) and keep it in step
with the store inside each effect.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from timekeep.domain.errors import CoordinatorBusyError, ProducerEffectError
from timekeep.domain.ids import validate_id
from timekeep.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pydantic import ValidationError

    from timekeep.domain.commands import Command
    from timekeep.infrastructure.store import TimeStore
    from timekeep.services.coordinator import UndoRedoCoordinator

logger = logging.getLogger(__name__)


class BaseService:
    """Base for producer services.

    Subclasses build a Command per mutation and hand it to
    :meth:`_submit`, which turns effect failures into a failed
    ServiceResult instead of an exception.

    Usage::

        class TimeEntryService(BaseService):
            async def delete_entry(self, entry_id: str) -> ServiceResult:
                command = create_command("DELETE_ENTRY", execute, undo)
                return await self._submit("delete_entry", command, {"id": entry_id})
    """

    def __init__(self, store: TimeStore, coordinator: UndoRedoCoordinator) -> None:
        self._store = store
        self._coordinator = coordinator

    @property
    def coordinator(self) -> UndoRedoCoordinator:
        return self._coordinator

    async def _submit(self, op: str, command: Command, data: dict[str, Any]) -> ServiceResult:
        try:
            await self._coordinator.execute_command(command)
        except ProducerEffectError as exc:
            return self._failed(op, exc, kind=command.kind, command_id=command.id)
        except CoordinatorBusyError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="BUSY", message=str(exc)),
            )
        return ServiceResult(ok=True, op=op, data=data, meta=self._flags())

    def _flags(self) -> dict[str, Any]:
        return {
            "can_undo": self._coordinator.can_undo,
            "can_redo": self._coordinator.can_redo,
        }

    @staticmethod
    def _failed(op: str, exc: ProducerEffectError, **detail: Any) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code="EFFECT_FAILED", message=str(exc), detail=detail),
        )

    @staticmethod
    def _not_found(op: str, entity: str, entity_id: str) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="NOT_FOUND",
                message=f"No {entity} with id {entity_id}",
                detail={"entity": entity, "id": entity_id},
            ),
        )

    @staticmethod
    def _malformed_id(op: str, entity: str, entity_id: str) -> ServiceResult | None:
        """Return a VALIDATION_ERROR result when *entity_id* is not a *entity* ID."""
        if validate_id(entity_id, entity):
            return None
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="VALIDATION_ERROR",
                message=f"Malformed {entity} id: {entity_id!r}",
                detail={"entity": entity, "id": entity_id},
            ),
        )

    @staticmethod
    def _invalid(op: str, exc: ValidationError | ValueError) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code="VALIDATION_ERROR", message=str(exc)),
        )
