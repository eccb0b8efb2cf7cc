"""Fixtures for CLI tests requiring an in-memory database and a repository on disk."""
from __future__ import annotations

import pathlib
from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from arbor.db.database import Base

# Register Arbor* models with Base.metadata before create_all is called.
import arbor.cli.models  # noqa: F401, E402
from arbor.cli.commands.init import _init_async, write_repo_layout


@pytest_asyncio.fixture
async def arbor_db_session() -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite session with the Arbor tables.

    Isolated per test: tables are created fresh and dropped on teardown.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def repo_root(tmp_path: pathlib.Path, arbor_db_session: AsyncSession) -> pathlib.Path:
    """A freshly initialised repository whose state lives in ``arbor_db_session``."""
    repo_id = write_repo_layout(tmp_path)
    await _init_async(root=tmp_path, session=arbor_db_session, repo_id=repo_id)
    return tmp_path
