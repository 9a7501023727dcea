"""Command — immutable description of one reversible unit of work.

A Command bundles a forward effect, its inverse, and optionally a distinct
redo effect. Effects close over external mutable state (a store, a cache)
but the Command record itself is never mutated after construction.

INVARIANT: When ``redo`` is absent, ``execute`` doubles as redo and must
be safe to invoke a second time with the same inputs.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from timekeep.domain.ids import generate_command_id

Effect = Callable[[], Awaitable[None] | None]


@runtime_checkable
class ReversibleEffect(Protocol):
    """Anything a producer can wrap into a Command.

    ``redo`` is optional; implementations that omit it must make
    ``execute`` safe to call twice.
    """

    def execute(self) -> Awaitable[None] | None: ...

    def undo(self) -> Awaitable[None] | None: ...


@dataclass(frozen=True, eq=False)
class Command:
    """One reversible mutation.

    Commands compare by identity: two commands with identical effects are
    still distinct history entries.

    Attributes:
        kind: Discriminator such as ``"ADD_ENTRY"``.
        execute: Forward effect.
        undo: Inverse effect.
        redo: Optional dedicated redo effect.
        metadata: Opaque payload for diagnostics; never inspected by the
            coordinator.
        id: Opaque unique token.
        created_at: UTC timestamp of construction.
    """

    kind: str
    execute: Effect
    undo: Effect
    redo: Effect | None = None
    metadata: Any = None
    id: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.kind:
            raise ValueError("Command kind must be a non-empty string")
        if not self.id:
            object.__setattr__(self, "id", generate_command_id(self.kind))

    @property
    def redo_effect(self) -> Effect:
        """The effect to run on redo: ``redo`` if provided, else ``execute``."""
        return self.redo if self.redo is not None else self.execute

    def describe(self) -> dict[str, Any]:
        """Return a JSON-friendly summary (effects and metadata omitted)."""
        return {
            "id": self.id,
            "kind": self.kind,
            "created_at": self.created_at.isoformat(),
            "has_redo": self.redo is not None,
        }


def create_command(
    kind: str,
    execute: Effect,
    undo: Effect,
    redo: Effect | None = None,
    metadata: Any = None,
) -> Command:
    """Build a Command from plain callables or coroutine functions."""
    return Command(kind=kind, execute=execute, undo=undo, redo=redo, metadata=metadata)


def command_from_effect(kind: str, effect: ReversibleEffect, *, metadata: Any = None) -> Command:
    """Adapt a :class:`ReversibleEffect` object into a Command.

    A ``redo`` attribute on *effect* is used when it is callable.
    """
    redo = getattr(effect, "redo", None)
    return Command(
        kind=kind,
        execute=effect.execute,
        undo=effect.undo,
        redo=redo if callable(redo) else None,
        metadata=metadata,
    )


async def run_effect(effect: Effect) -> None:
    """Invoke *effect*, awaiting its result when it returns an awaitable."""
    outcome = effect()
    if inspect.isawaitable(outcome):
        await outcome
