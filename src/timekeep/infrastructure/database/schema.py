"""SQLAlchemy Core table definitions for the timekeep database.

Timestamps are stored as ISO 8601 text; project audit stamps are UTC.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()

projects = Table(
    "projects",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("color", Text, nullable=False),
    Column("archived", Integer, default=0, server_default="0"),
    Column("client_name", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

time_entries = Table(
    "time_entries",
    metadata,
    Column("id", Text, primary_key=True),
    Column("project_id", Text, ForeignKey("projects.id"), nullable=False),
    Column("start_time", Text, nullable=False),
    Column("end_time", Text, nullable=False),
    Column("description", Text),
    Column("task", Text),
)

Index("ix_time_entries_project", time_entries.c.project_id)
Index("ix_time_entries_start", time_entries.c.start_time)
