"""UndoRedoKeybindings — maps shortcut chords onto coordinator undo/redo.

The first binding that matches an event wins. A matching binding is
skipped while focus is inside a free-text control unless the binding
opts in, so the control's native text undo is never shadowed. Undo and
redo are only invoked while ``can_undo`` / ``can_redo`` allow it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from timekeep.config.models import KeybindingConfig
from timekeep.domain.keybindings import KeyEvent, Shortcut, parse_chord

if TYPE_CHECKING:
    from timekeep.services.coordinator import UndoRedoCoordinator

logger = logging.getLogger(__name__)

Action = Literal["undo", "redo"]


@dataclass(frozen=True)
class Binding:
    shortcut: Shortcut
    action: Action
    allow_in_inputs: bool = False


class UndoRedoKeybindings:
    """Keybinding layer over an :class:`UndoRedoCoordinator`."""

    def __init__(
        self,
        coordinator: UndoRedoCoordinator,
        config: KeybindingConfig | None = None,
    ) -> None:
        self._coordinator = coordinator
        cfg = config or KeybindingConfig()
        self._bindings: list[Binding] = [
            Binding(parse_chord(chord), "undo", cfg.allow_in_inputs) for chord in cfg.undo
        ] + [Binding(parse_chord(chord), "redo", cfg.allow_in_inputs) for chord in cfg.redo]

    @property
    def bindings(self) -> list[Binding]:
        return list(self._bindings)

    def match(self, event: KeyEvent) -> Binding | None:
        """Return the binding *event* triggers, or None."""
        for binding in self._bindings:
            if not binding.shortcut.matches(event):
                continue
            if event.in_text_input and not binding.allow_in_inputs:
                logger.debug("Skipped %s: focus is in a text input", binding.shortcut.chord())
                continue
            return binding
        return None

    async def handle(self, event: KeyEvent) -> bool:
        """Dispatch *event*. Returns True if a binding consumed it.

        A consumed event whose action is currently disabled (nothing to
        undo or redo) is still consumed but invokes nothing.
        """
        binding = self.match(event)
        if binding is None:
            return False

        if binding.action == "undo":
            if self._coordinator.can_undo:
                await self._coordinator.undo()
        elif self._coordinator.can_redo:
            await self._coordinator.redo()
        return True
