"""Core application components."""

from reviewgate.core.config import settings
from reviewgate.core.exceptions import ReviewError
from reviewgate.core.storage import Base, Database, create_database, database

__all__ = [
    "Base",
    "Database",
    "ReviewError",
    "create_database",
    "database",
    "settings",
]
