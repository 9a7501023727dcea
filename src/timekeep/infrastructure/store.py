"""TimeStore — repository over the projects and time_entries tables.

Every write runs in its own ``engine.begin()`` transaction. Database
failures surface as :class:`StoreError` (a ProducerEffectError), which is
what command effects built on this store raise when the write is rejected.

Writes are idempotent where undo/redo needs them to be:
- ``put_*`` upserts, so a creation effect re-run on redo rewrites the
  same row instead of duplicating it.
- ``delete_entry`` reports whether a row was removed and never fails on
  a missing row.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from timekeep.domain.entities import Project, TimeEntry
from timekeep.domain.errors import EntityNotFoundError, StoreError
from timekeep.infrastructure.database.engine import init_database
from timekeep.infrastructure.database.schema import projects, time_entries

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class TimeStore:
    """Read and write projects and time entries."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def open(cls, db_path: Path) -> TimeStore:
        """Initialize (if needed) and open the database at *db_path*."""
        return cls(init_database(db_path))

    @property
    def engine(self) -> Engine:
        return self._engine

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Project | None:
        with self._transaction("get_project") as conn:
            row = conn.execute(select(projects).where(projects.c.id == project_id)).first()
        return _project_from_row(row) if row is not None else None

    def list_projects(self, *, include_archived: bool = True) -> list[Project]:
        stmt = select(projects).order_by(projects.c.name, projects.c.id)
        if not include_archived:
            stmt = stmt.where(projects.c.archived == 0)
        with self._transaction("list_projects") as conn:
            rows = conn.execute(stmt).fetchall()
        return [_project_from_row(r) for r in rows]

    def put_project(self, project: Project) -> None:
        """Insert *project*, or overwrite the row with the same ID."""
        values = _project_values(project)
        stmt = sqlite_insert(projects).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[projects.c.id],
            set_={k: v for k, v in values.items() if k != "id"},
        )
        with self._transaction("put_project") as conn:
            conn.execute(stmt)

    def update_project(self, project: Project) -> None:
        """Overwrite an existing project row.

        Raises:
            EntityNotFoundError: If no row has ``project.id``.
        """
        values = _project_values(project)
        with self._transaction("update_project") as conn:
            result = conn.execute(
                update(projects).where(projects.c.id == project.id).values(**values)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError("project", project.id)

    def delete_project(self, project_id: str) -> bool:
        """Delete a project. Returns False if it was already gone.

        Raises:
            StoreError: If time entries still reference the project.
        """
        with self._transaction("delete_project") as conn:
            result = conn.execute(delete(projects).where(projects.c.id == project_id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------

    def get_entry(self, entry_id: str) -> TimeEntry | None:
        with self._transaction("get_entry") as conn:
            row = conn.execute(select(time_entries).where(time_entries.c.id == entry_id)).first()
        return _entry_from_row(row) if row is not None else None

    def list_entries(self, *, project_id: str | None = None) -> list[TimeEntry]:
        stmt = select(time_entries).order_by(time_entries.c.start_time, time_entries.c.id)
        if project_id is not None:
            stmt = stmt.where(time_entries.c.project_id == project_id)
        with self._transaction("list_entries") as conn:
            rows = conn.execute(stmt).fetchall()
        return [_entry_from_row(r) for r in rows]

    def put_entry(self, entry: TimeEntry) -> None:
        """Insert *entry*, or overwrite the row with the same ID."""
        values = _entry_values(entry)
        stmt = sqlite_insert(time_entries).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[time_entries.c.id],
            set_={k: v for k, v in values.items() if k != "id"},
        )
        with self._transaction("put_entry") as conn:
            conn.execute(stmt)

    def update_entry(self, entry: TimeEntry) -> None:
        """Overwrite an existing entry row.

        Raises:
            EntityNotFoundError: If no row has ``entry.id``.
        """
        values = _entry_values(entry)
        with self._transaction("update_entry") as conn:
            result = conn.execute(
                update(time_entries).where(time_entries.c.id == entry.id).values(**values)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError("time_entry", entry.id)

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry. Returns False if it was already gone."""
        with self._transaction("delete_entry") as conn:
            result = conn.execute(delete(time_entries).where(time_entries.c.id == entry_id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, op: str) -> Iterator[Connection]:
        """Run a block in one transaction, translating driver errors to StoreError."""
        try:
            with self._engine.begin() as conn:
                yield conn
        except StoreError:
            raise
        except SQLAlchemyError as exc:
            logger.debug("Store operation %s failed", op, exc_info=True)
            cause = getattr(exc, "orig", None) or exc
            msg = f"{op} failed: {exc.__class__.__name__}: {cause}"
            raise StoreError(msg) from exc


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _project_values(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "color": str(project.color),
        "archived": int(project.archived),
        "client_name": project.client_name,
        "created_at": project.created_at.isoformat(),
        "updated_at": project.updated_at.isoformat(),
    }


def _project_from_row(row: Any) -> Project:
    return Project(
        id=row.id,
        name=row.name,
        color=row.color,
        archived=bool(row.archived),
        client_name=row.client_name,
        created_at=datetime.fromisoformat(row.created_at),
        updated_at=datetime.fromisoformat(row.updated_at),
    )


def _entry_values(entry: TimeEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "project_id": entry.project_id,
        "start_time": entry.start_time.isoformat(),
        "end_time": entry.end_time.isoformat(),
        "description": entry.description,
        "task": entry.task,
    }


def _entry_from_row(row: Any) -> TimeEntry:
    return TimeEntry(
        id=row.id,
        project_id=row.project_id,
        start_time=datetime.fromisoformat(row.start_time),
        end_time=datetime.fromisoformat(row.end_time),
        description=row.description,
        task=row.task,
    )
