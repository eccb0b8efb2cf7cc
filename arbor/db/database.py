"""
Async SQLAlchemy database setup.

Supports SQLite (default, one file per repository) and any async URL given
through ``ARBOR_DATABASE_URL``.
"""
from __future__ import annotations

import logging
import pathlib

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from arbor.config import settings

logger = logging.getLogger(__name__)

DB_FILENAME = "arbor.db"


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


def get_database_url(repo_root: pathlib.Path | None = None) -> str:
    """Return the configured URL, or the per-repository SQLite file under ``.arbor/``."""
    url = settings.database_url
    if url:
        return url
    if repo_root is None:
        raise RuntimeError(
            "ARBOR_DATABASE_URL is not set and no repository root was given."
        )
    return f"sqlite+aiosqlite:///{(repo_root / '.arbor' / DB_FILENAME).as_posix()}"


def create_engine_for(url: str) -> AsyncEngine:
    """Create an async engine; SQLite connections may cross threads."""
    connect_args: dict[str, object] = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_async_engine(url, echo=False, connect_args=connect_args)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing tables.  Safe to call on every start."""
    # Register ORM models with Base.metadata.
    import arbor.cli.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
