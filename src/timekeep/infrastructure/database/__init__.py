"""SQLite database engine and schema via SQLAlchemy Core."""

from timekeep.infrastructure.database.engine import create_db_engine, init_database
from timekeep.infrastructure.database.schema import metadata, projects, time_entries

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "projects",
    "time_entries",
]
