"""Database package."""
from arbor.db.database import Base, create_engine_for, create_schema, get_database_url

__all__ = ["Base", "create_engine_for", "create_schema", "get_database_url"]
