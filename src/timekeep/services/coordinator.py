"""UndoRedoCoordinator — executes, undoes, and redoes commands over one History.

The coordinator knows nothing about entities. It runs a command's effect,
and only once the effect has resolved does it swap in the next History
value. A failing effect propagates unchanged to the caller with the
history (and therefore ``can_undo`` / ``can_redo``) exactly as before.

Operations on one coordinator never interleave: each async operation
holds an ``asyncio.Lock`` while it awaits its effect. With the ``queue``
busy policy later calls wait their turn; with ``reject`` they raise
:class:`CoordinatorBusyError` at once.

``clear_history()`` is synchronous and always succeeds. If it runs while
an effect is in flight, that operation's transition is dropped when the
effect resolves so the history stays cleared.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from timekeep.config.models import HistoryConfig
from timekeep.domain.commands import Command, Effect, run_effect
from timekeep.domain.errors import CoordinatorBusyError
from timekeep.domain.history import History
from timekeep.services.telemetry import trace_span

if TYPE_CHECKING:
    from timekeep.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class UndoRedoCoordinator:
    """Execute/undo/redo/clear over a single History.

    Usage::

        coordinator = UndoRedoCoordinator(HistoryConfig(capacity=100))
        await coordinator.execute_command(command)
        if coordinator.can_undo:
            await coordinator.undo()
    """

    def __init__(
        self,
        config: HistoryConfig | None = None,
        *,
        plugins: PluginManager | None = None,
    ) -> None:
        self._config = config or HistoryConfig()
        self._history = History(capacity=self._config.capacity)
        self._plugins = plugins
        self._lock = asyncio.Lock()
        self._in_flight: str | None = None
        # bumped by clear_history(); in-flight operations compare before committing
        self._generation = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def config(self) -> HistoryConfig:
        return self._config

    @property
    def history(self) -> History:
        """Current History snapshot (immutable)."""
        return self._history

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def is_busy(self) -> bool:
        """Whether an operation is awaiting its effect."""
        return self._lock.locked()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def execute_command(self, command: Command) -> None:
        """Run ``command.execute()`` and record it as ``present``.

        Raises whatever the effect raised, with the history untouched.
        """
        async with self._serialized("execute"):
            generation = self._generation
            await self._run("execute", command, command.execute)
            if self._superseded(generation, "execute", command):
                return

            history, evicted = self._history.record(command)
            self._commit(history)
            logger.debug("Executed %s (%s)", command.kind, command.id)
            self._emit("post_execute", command_id=command.id, kind=command.kind)
            self._announce_evictions(evicted)
            self._emit_flags()

    async def undo(self) -> None:
        """Undo the most recent applied command. No-op if nothing to undo."""
        async with self._serialized("undo"):
            target = self._history.undo_target()
            if target is None:
                logger.debug("Nothing to undo")
                return

            generation = self._generation
            await self._run("undo", target, target.undo)
            if self._superseded(generation, "undo", target):
                return

            symmetric = self._config.symmetric_undo
            redoable = symmetric or self._history.present is not None
            self._commit(self._history.after_undo(symmetric=symmetric))
            logger.debug("Undid %s (%s), redoable=%s", target.kind, target.id, redoable)
            self._emit("post_undo", command_id=target.id, kind=target.kind, redoable=redoable)
            self._emit_flags()

    async def redo(self) -> None:
        """Redo the next undone command. No-op if ``future`` is empty."""
        async with self._serialized("redo"):
            target = self._history.redo_target()
            if target is None:
                logger.debug("Nothing to redo")
                return

            generation = self._generation
            await self._run("redo", target, target.redo_effect)
            if self._superseded(generation, "redo", target):
                return

            history, evicted = self._history.after_redo()
            self._commit(history)
            logger.debug("Redid %s (%s)", target.kind, target.id)
            self._emit("post_redo", command_id=target.id, kind=target.kind)
            self._announce_evictions(evicted)
            self._emit_flags()

    def clear_history(self) -> None:
        """Drop every retained command without running any ``undo()``."""
        dropped = len(self._history.retained())
        self._generation += 1
        self._commit(self._history.cleared())
        logger.debug("History cleared, %d command(s) dropped", dropped)
        self._emit("post_clear", dropped=dropped)
        self._emit_flags()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _serialized(self, operation: str) -> AsyncIterator[None]:
        if self._config.busy_policy == "reject" and self._lock.locked():
            raise CoordinatorBusyError(operation, self._in_flight)
        async with self._lock:
            self._in_flight = operation
            try:
                yield
            finally:
                self._in_flight = None

    async def _run(self, operation: str, command: Command, effect: Effect) -> None:
        with trace_span(f"coordinator.{operation}") as span:
            if span is not None:
                span.annotate("kind", command.kind)
            try:
                await run_effect(effect)
            except Exception as exc:
                logger.warning(
                    "%s of %s (%s) failed: %s", operation, command.kind, command.id, exc
                )
                self._emit(
                    "effect_failed",
                    operation=operation,
                    command_id=command.id,
                    kind=command.kind,
                    error=str(exc),
                )
                raise

    def _superseded(self, generation: int, operation: str, command: Command) -> bool:
        if generation == self._generation:
            return False
        logger.warning(
            "History was cleared while %s of %s (%s) was in flight; transition dropped",
            operation,
            command.kind,
            command.id,
        )
        return True

    def _commit(self, history: History) -> None:
        self._history = history

    def _announce_evictions(self, evicted: tuple[Command, ...]) -> None:
        for command in evicted:
            logger.info(
                "Capacity %d reached, evicted %s (%s)",
                self._history.capacity,
                command.kind,
                command.id,
            )
            self._emit(
                "history_evicted",
                command_id=command.id,
                kind=command.kind,
                capacity=self._history.capacity,
            )

    def _emit_flags(self) -> None:
        self._emit(
            "history_changed",
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            history=self._history.to_dict(),
        )

    def _emit(self, hook_name: str, **payload: Any) -> None:
        if self._plugins is None:
            return
        self._plugins.dispatch(hook_name, **payload)
