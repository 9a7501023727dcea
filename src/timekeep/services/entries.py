"""TimeEntryService — time entry mutations as undoable commands.

Each mutation snapshots the affected row before building its command so
the inverse effect restores exactly what other readers saw. New entries
get their ID allocated up front; ``execute`` upserts that ID, so the
default redo (re-running ``execute``) never duplicates an entry.

Effects call the synchronous store inline on the event loop thread; each
one holds the loop for a single SQLite transaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from timekeep.domain.commands import Command, create_command
from timekeep.domain.entities import TimeEntry
from timekeep.domain.errors import StoreError
from timekeep.domain.ids import allocate_entity_id
from timekeep.services.base import BaseService
from timekeep.services.result import ServiceResult
from timekeep.services.telemetry import traced

EDITABLE_FIELDS = frozenset({"project_id", "start_time", "end_time", "description", "task"})


class TimeEntryService(BaseService):
    """Producer slice for time entries."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._entries: dict[str, TimeEntry] = {}

    @property
    def entries(self) -> list[TimeEntry]:
        """Cached entries ordered by start time."""
        return sorted(self._entries.values(), key=lambda e: (e.start_time, e.id))

    def get(self, entry_id: str) -> TimeEntry | None:
        return self._entries.get(entry_id)

    @traced
    def load_entries(self, *, project_id: str | None = None) -> ServiceResult:
        """Replace the cache with the store's rows. Not undoable."""
        try:
            rows = self._store.list_entries(project_id=project_id)
        except StoreError as exc:
            return self._failed("load_entries", exc)
        self._entries = {e.id: e for e in rows}
        return ServiceResult(
            ok=True,
            op="load_entries",
            data={"count": len(rows), "entries": [e.to_summary() for e in self.entries]},
        )

    @traced
    async def add_entry(
        self,
        project_id: str,
        start_time: datetime | str,
        end_time: datetime | str,
        *,
        description: str | None = None,
        task: str | None = None,
    ) -> ServiceResult:
        op = "add_entry"
        try:
            entry = TimeEntry.model_validate(
                {
                    "id": allocate_entity_id("time_entry"),
                    "project_id": project_id,
                    "start_time": start_time,
                    "end_time": end_time,
                    "description": description,
                    "task": task,
                }
            )
        except ValidationError as exc:
            return self._invalid(op, exc)

        def execute() -> None:
            self._store.put_entry(entry)
            self._entries[entry.id] = entry

        def undo() -> None:
            self._store.delete_entry(entry.id)
            self._entries.pop(entry.id, None)

        command = create_command("ADD_ENTRY", execute, undo, metadata=_meta(entry.id))
        return await self._submit(op, command, entry.to_summary())

    @traced
    async def update_entry(self, entry_id: str, **changes: Any) -> ServiceResult:
        """Apply field *changes* to an entry as one undoable step."""
        op = "update_entry"
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            msg = f"Cannot edit field(s): {', '.join(sorted(unknown))}"
            return self._invalid(op, ValueError(msg))

        malformed = self._malformed_id(op, "time_entry", entry_id)
        if malformed is not None:
            return malformed
        try:
            previous = self._lookup(entry_id)
        except StoreError as exc:
            return self._failed(op, exc)
        if previous is None:
            return self._not_found(op, "time_entry", entry_id)
        try:
            updated = TimeEntry.model_validate({**previous.model_dump(), **changes})
        except ValidationError as exc:
            return self._invalid(op, exc)

        command = self._replace_command("UPDATE_ENTRY", previous, updated)
        data = {**updated.to_summary(), "fields_changed": sorted(changes)}
        return await self._submit(op, command, data)

    @traced
    async def move_entry(self, entry_id: str, start_time: datetime | str) -> ServiceResult:
        """Shift an entry to a new start, keeping its duration (calendar drag)."""
        op = "move_entry"
        malformed = self._malformed_id(op, "time_entry", entry_id)
        if malformed is not None:
            return malformed
        try:
            previous = self._lookup(entry_id)
        except StoreError as exc:
            return self._failed(op, exc)
        if previous is None:
            return self._not_found(op, "time_entry", entry_id)
        if isinstance(start_time, str):
            try:
                start_time = datetime.fromisoformat(start_time)
            except ValueError as exc:
                return self._invalid(op, exc)

        try:
            moved = previous.moved_to(start_time)
        except ValidationError as exc:
            return self._invalid(op, exc)
        command = self._replace_command("MOVE_ENTRY", previous, moved)
        return await self._submit(op, command, moved.to_summary())

    @traced
    async def delete_entry(self, entry_id: str) -> ServiceResult:
        op = "delete_entry"
        malformed = self._malformed_id(op, "time_entry", entry_id)
        if malformed is not None:
            return malformed
        try:
            previous = self._lookup(entry_id)
        except StoreError as exc:
            return self._failed(op, exc)
        if previous is None:
            return self._not_found(op, "time_entry", entry_id)

        def execute() -> None:
            self._store.delete_entry(previous.id)
            self._entries.pop(previous.id, None)

        def undo() -> None:
            self._store.put_entry(previous)
            self._entries[previous.id] = previous

        command = create_command("DELETE_ENTRY", execute, undo, metadata=_meta(previous.id))
        return await self._submit(op, command, {"id": previous.id})

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _lookup(self, entry_id: str) -> TimeEntry | None:
        cached = self._entries.get(entry_id)
        if cached is not None:
            return cached
        return self._store.get_entry(entry_id)

    def _replace_command(self, kind: str, previous: TimeEntry, updated: TimeEntry) -> Command:
        def execute() -> None:
            self._store.update_entry(updated)
            self._entries[updated.id] = updated

        def undo() -> None:
            self._store.update_entry(previous)
            self._entries[previous.id] = previous

        return create_command(kind, execute, undo, metadata=_meta(previous.id))


def _meta(entry_id: str) -> dict[str, str]:
    return {"entity": "time_entry", "entity_id": entry_id}
