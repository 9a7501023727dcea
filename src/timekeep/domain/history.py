"""History — bounded past/present/future record of commands.

History is an immutable value. Every transition returns a new History
and never runs effects; the coordinator runs the effect first and only
swaps in the new value once the effect succeeded, so a failure can never
leave a half-applied transition behind.

Transitions:
- ``record``: push ``present`` onto ``past``, make the new command
  ``present``, clear ``future``. The only transition that clears ``future``.
- ``after_undo``: see the method docstring; in parity mode the second and
  later consecutive undos do not feed ``future``.
- ``after_redo``: pop the head of ``future`` into ``present``.
- ``cleared``: empty history with the same capacity.

INVARIANT: ``len(past) + (present is not None) <= capacity`` after every
``record`` and ``after_redo``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from timekeep.domain.commands import Command

DEFAULT_CAPACITY = 50


@dataclass(frozen=True)
class History:
    """Snapshot of the undo/redo record.

    Attributes:
        capacity: Upper bound on ``past`` plus ``present``.
        past: Applied commands, oldest first.
        present: Most recently applied command not yet undone, if any.
        future: Undone commands, next redo first.
    """

    capacity: int = DEFAULT_CAPACITY
    past: tuple[Command, ...] = ()
    present: Command | None = None
    future: tuple[Command, ...] = ()

    def __post_init__(self) -> None:
        if self.capacity < 1:
            msg = f"History capacity must be at least 1, got {self.capacity}"
            raise ValueError(msg)

    # ------------------------------------------------------------------
    # Derived flags
    # ------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return bool(self.past) or self.present is not None

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    @property
    def depth(self) -> int:
        """Number of entries across ``past`` and ``present``."""
        return len(self.past) + (1 if self.present is not None else 0)

    @property
    def is_empty(self) -> bool:
        return not self.past and self.present is None and not self.future

    def retained(self) -> tuple[Command, ...]:
        """Distinct commands held in any slot, oldest first."""
        seen: dict[int, Command] = {}
        slots = (*self.past, *((self.present,) if self.present is not None else ()), *self.future)
        for command in slots:
            seen.setdefault(id(command), command)
        return tuple(seen.values())

    # ------------------------------------------------------------------
    # Targets (which command the next undo/redo will run)
    # ------------------------------------------------------------------

    def undo_target(self) -> Command | None:
        if self.present is not None:
            return self.present
        if self.past:
            return self.past[-1]
        return None

    def redo_target(self) -> Command | None:
        return self.future[0] if self.future else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def record(self, command: Command) -> tuple[History, tuple[Command, ...]]:
        """Apply the Execute transition for *command*.

        Returns the new History and the commands evicted to respect
        ``capacity`` (oldest first, usually empty).
        """
        past, evicted = self._bounded_past(self._past_with_present())
        return replace(self, past=past, present=command, future=()), evicted

    def after_undo(self, *, symmetric: bool = False) -> History:
        """Apply the Undo transition (call only after the undo effect succeeded).

        With ``present`` set, it moves to the head of ``future`` and
        ``present`` becomes unset; ``past`` is untouched.

        With ``present`` unset, the tail of ``past`` was undone:

        - parity (default): the tail is dropped from ``past`` and the new
          tail (the original second-to-last entry) becomes ``present``
          while also staying in ``past``. The undone command is *not*
          added to ``future``.
        - symmetric: the tail moves to the head of ``future`` and
          ``present`` stays unset, so every undo is redoable.
        """
        if self.present is not None:
            return replace(self, present=None, future=(self.present, *self.future))
        if not self.past:
            return self
        popped = self.past[-1]
        remaining = self.past[:-1]
        if symmetric:
            return replace(self, past=remaining, present=None, future=(popped, *self.future))
        new_present = self.past[-2] if len(self.past) > 1 else None
        return replace(self, past=remaining, present=new_present)

    def after_redo(self) -> tuple[History, tuple[Command, ...]]:
        """Apply the Redo transition (call only after the redo effect succeeded).

        Returns the new History and any commands evicted by ``capacity``.
        """
        if not self.future:
            return self, ()
        head, *rest = self.future
        past, evicted = self._bounded_past(self._past_with_present())
        return replace(self, past=past, present=head, future=tuple(rest)), evicted

    def cleared(self) -> History:
        return History(capacity=self.capacity)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Command IDs and kinds per slot, for rendering and hook payloads."""
        return {
            "capacity": self.capacity,
            "past": [_ref(c) for c in self.past],
            "present": _ref(self.present) if self.present is not None else None,
            "future": [_ref(c) for c in self.future],
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _past_with_present(self) -> tuple[Command, ...]:
        if self.present is None:
            return self.past
        return (*self.past, self.present)

    def _bounded_past(
        self, past: tuple[Command, ...]
    ) -> tuple[tuple[Command, ...], tuple[Command, ...]]:
        """Trim *past* so that it plus a new ``present`` fits ``capacity``."""
        overflow = len(past) - (self.capacity - 1)
        if overflow <= 0:
            return past, ()
        return past[overflow:], past[:overflow]


def _ref(command: Command) -> dict[str, str]:
    return {"id": command.id, "kind": command.kind}
