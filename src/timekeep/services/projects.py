"""ProjectService — project mutations as undoable commands.

Like the entry effects, project effects run the synchronous store inline
on the event loop thread.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from timekeep.domain.commands import create_command
from timekeep.domain.entities import Project, ProjectColor, utc_now
from timekeep.domain.errors import StoreError
from timekeep.domain.ids import allocate_entity_id
from timekeep.services.base import BaseService
from timekeep.services.result import ServiceResult
from timekeep.services.telemetry import traced

EDITABLE_FIELDS = frozenset({"name", "color", "client_name"})


class ProjectService(BaseService):
    """Producer slice for projects."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._projects: dict[str, Project] = {}

    @property
    def projects(self) -> list[Project]:
        return sorted(self._projects.values(), key=lambda p: (p.name, p.id))

    def get(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    @traced
    def load_projects(self, *, include_archived: bool = True) -> ServiceResult:
        """Replace the cache with the store's rows. Not undoable."""
        try:
            rows = self._store.list_projects(include_archived=include_archived)
        except StoreError as exc:
            return self._failed("load_projects", exc)
        self._projects = {p.id: p for p in rows}
        return ServiceResult(
            ok=True,
            op="load_projects",
            data={"count": len(rows), "projects": [project_summary(p) for p in self.projects]},
        )

    @traced
    async def create_project(
        self,
        name: str,
        *,
        color: ProjectColor | str = ProjectColor.BLUE,
        client_name: str | None = None,
    ) -> ServiceResult:
        op = "create_project"
        try:
            project = Project(
                id=allocate_entity_id("project"),
                name=name,
                color=color,
                client_name=client_name,
            )
        except ValidationError as exc:
            return self._invalid(op, exc)

        def execute() -> None:
            self._store.put_project(project)
            self._projects[project.id] = project

        def undo() -> None:
            # fails with StoreError while entries still reference the project
            self._store.delete_project(project.id)
            self._projects.pop(project.id, None)

        command = create_command("CREATE_PROJECT", execute, undo, metadata=_meta(project.id))
        return await self._submit(op, command, project_summary(project))

    @traced
    async def update_project(self, project_id: str, **changes: Any) -> ServiceResult:
        op = "update_project"
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            msg = f"Cannot edit field(s): {', '.join(sorted(unknown))}"
            return self._invalid(op, ValueError(msg))
        return await self._replace(op, "UPDATE_PROJECT", project_id, changes)

    @traced
    async def archive_project(self, project_id: str, *, archived: bool = True) -> ServiceResult:
        """Archive (or with ``archived=False`` restore) a project."""
        return await self._replace(
            "archive_project", "ARCHIVE_PROJECT", project_id, {"archived": archived}
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _replace(
        self, op: str, kind: str, project_id: str, changes: dict[str, Any]
    ) -> ServiceResult:
        malformed = self._malformed_id(op, "project", project_id)
        if malformed is not None:
            return malformed
        try:
            previous = self._projects.get(project_id) or self._store.get_project(project_id)
        except StoreError as exc:
            return self._failed(op, exc)
        if previous is None:
            return self._not_found(op, "project", project_id)
        try:
            updated = Project.model_validate(
                {**previous.model_dump(), **changes, "updated_at": utc_now()}
            )
        except ValidationError as exc:
            return self._invalid(op, exc)

        def execute() -> None:
            self._store.update_project(updated)
            self._projects[updated.id] = updated

        def undo() -> None:
            self._store.update_project(previous)
            self._projects[previous.id] = previous

        command = create_command(kind, execute, undo, metadata=_meta(project_id))
        data = {**project_summary(updated), "fields_changed": sorted(changes)}
        return await self._submit(op, command, data)


def project_summary(project: Project) -> dict[str, Any]:
    return {
        "id": project.id,
        "name": project.name,
        "color": str(project.color),
        "archived": project.archived,
        "client_name": project.client_name,
    }


def _meta(project_id: str) -> dict[str, str]:
    return {"entity": "project", "entity_id": project_id}
