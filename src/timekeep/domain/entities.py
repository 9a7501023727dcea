"""Entity models — projects and time entries.

Models are frozen pydantic objects. Producer services snapshot them
before a mutation so the inverse effect can restore the exact previous
row; a frozen snapshot cannot drift while it sits in the history.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, field_validator, model_validator


class ProjectColor(StrEnum):
    """Fixed project palette."""

    RED = "#ef4444"
    ORANGE = "#f97316"
    YELLOW = "#eab308"
    GREEN = "#22c55e"
    BLUE = "#3b82f6"
    VIOLET = "#8b5cf6"
    PINK = "#ec4899"
    GRAY = "#6b7280"


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Read a naive *value* as UTC; aware values pass through unchanged."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


class Project(BaseModel):
    """A billable project a time entry is booked against."""

    model_config = {"frozen": True}

    id: str
    name: str = Field(min_length=1)
    color: ProjectColor = ProjectColor.BLUE
    archived: bool = False
    client_name: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TimeEntry(BaseModel):
    """A booked time span on a project.

    ``duration`` (minutes) and ``date`` are derived from the start and end
    times and never stored independently. Naive timestamps are read as UTC,
    so every entry compares and sorts on aware datetimes.
    """

    model_config = {"frozen": True}

    id: str
    project_id: str
    start_time: datetime
    end_time: datetime
    description: str | None = None
    task: str | None = None

    @field_validator("start_time", "end_time", mode="after")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_span(self) -> Self:
        if self.end_time <= self.start_time:
            msg = "end_time must be after start_time"
            raise ValueError(msg)
        return self

    @property
    def duration(self) -> int:
        """Length of the entry in whole minutes."""
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def date(self) -> str:
        """Calendar day of the start time as ``YYYY-MM-DD``."""
        return self.start_time.strftime("%Y-%m-%d")

    def moved_to(self, start_time: datetime) -> TimeEntry:
        """Return a copy shifted to *start_time*, keeping the duration."""
        span = self.end_time - self.start_time
        start_time = as_utc(start_time)
        return self.model_validate(
            {**self.model_dump(), "start_time": start_time, "end_time": start_time + span}
        )

    def to_summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "date": self.date,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "description": self.description,
            "task": self.task,
        }
