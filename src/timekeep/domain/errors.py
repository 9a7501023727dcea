"""Exception taxonomy for timekeep.

Only effect failures and busy rejections are errors. Undo/redo with
nothing to do and capacity eviction are expected outcomes, reported
through logging and lifecycle hooks instead of exceptions.
"""

from __future__ import annotations


class TimekeepError(Exception):
    """Base class for all timekeep errors."""


class ProducerEffectError(TimekeepError):
    """A command's execute/undo/redo side effect failed.

    The coordinator never catches this; it propagates to the caller with
    the history left exactly as it was before the attempt.
    """


class StoreError(ProducerEffectError):
    """The backing store rejected a read or write."""


class EntityNotFoundError(StoreError):
    """The targeted row does not exist in the store."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class CoordinatorBusyError(TimekeepError):
    """Raised under the ``reject`` busy policy while an operation is in flight."""

    def __init__(self, operation: str, in_flight: str | None) -> None:
        super().__init__(f"Cannot {operation}: {in_flight or 'another operation'} is still pending")
        self.operation = operation
        self.in_flight = in_flight
