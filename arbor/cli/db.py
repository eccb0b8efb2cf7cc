"""Async database helpers: session lifecycle and wholesale graph persistence.

Provides:
- ``open_session()`` — async context manager that opens and commits a
  standalone AsyncSession for one CLI command.
- ``load_graph()`` / ``save_graph()`` — rebuild a :class:`CommitGraph` from
  rows and write it back.  The whole graph is loaded before a command runs
  and saved after it succeeds; nothing is persisted incrementally.
- :class:`SqlPersistenceStore` — the same pair bound to one session and
  repository, satisfying :class:`~arbor.vcs.collaborators.PersistenceStore`.

Commits are immutable, so saving only inserts commit rows that are not yet
stored.  Branch rows are reconciled to match the graph exactly.
"""
from __future__ import annotations

import contextlib
import logging
import pathlib
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.future import select

from arbor.cli.models import ArborBranch, ArborCommit, ArborRepoState
from arbor.db.database import create_engine_for, create_schema, get_database_url
from arbor.vcs.graph import Commit, CommitGraph

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def open_session(
    root: pathlib.Path | None = None, url: str | None = None
) -> AsyncGenerator[AsyncSession, None]:
    """Open a standalone async DB session suitable for CLI commands.

    Commits on clean exit, rolls back on exception.  Disposes the engine
    on exit so the process does not linger with open connections.

    ``url`` defaults to ``ARBOR_DATABASE_URL`` or, when unset, the SQLite
    file inside *root*'s ``.arbor/`` directory.  Pass an explicit URL in tests.
    """
    db_url = url or get_database_url(root)
    engine = create_engine_for(db_url)
    await create_schema(engine)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    try:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await engine.dispose()


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


async def load_graph(session: AsyncSession, repo_id: str) -> CommitGraph | None:
    """Rebuild the repository's :class:`CommitGraph`, or ``None`` if it was never saved."""
    state = await session.get(ArborRepoState, repo_id)
    if state is None:
        logger.debug("⚠️ No stored state for repo %s", repo_id[:8])
        return None

    commit_rows = (
        await session.execute(select(ArborCommit).where(ArborCommit.repo_id == repo_id))
    ).scalars().all()
    branch_rows = (
        await session.execute(select(ArborBranch).where(ArborBranch.repo_id == repo_id))
    ).scalars().all()

    commits = {
        row.commit_id: Commit(
            id=row.commit_id,
            message=row.message,
            timestamp=_aware(row.committed_at),
            parent_id=row.parent_commit_id,
            file_table=dict(row.file_table or {}),
        )
        for row in commit_rows
    }
    graph = CommitGraph(
        commits=commits,
        branches={row.name: row.commit_id for row in branch_rows},
        current_branch=state.current_branch,
        head_id=state.head_commit_id,
        staged=set(state.staged or []),
        marked_for_removal=set(state.marked_for_removal or []),
        id_counter=state.id_counter,
    )
    logger.debug(
        "✅ Loaded graph %s: %d commits, %d branches",
        repo_id[:8],
        len(graph.commits),
        len(graph.branches),
    )
    return graph


async def save_graph(session: AsyncSession, repo_id: str, graph: CommitGraph) -> None:
    """Write *graph* wholesale: new commits, the exact branch set, and repo state."""
    stored_ids = set(
        (
            await session.execute(
                select(ArborCommit.commit_id).where(ArborCommit.repo_id == repo_id)
            )
        ).scalars().all()
    )
    new_commits = [c for c in graph.all_commits() if c.id not in stored_ids]
    for commit in new_commits:
        session.add(
            ArborCommit(
                repo_id=repo_id,
                commit_id=commit.id,
                parent_commit_id=commit.parent_id,
                message=commit.message,
                committed_at=commit.timestamp,
                file_table=dict(commit.file_table),
            )
        )

    stored_branches = {
        row.name: row
        for row in (
            await session.execute(select(ArborBranch).where(ArborBranch.repo_id == repo_id))
        ).scalars().all()
    }
    for name, row in stored_branches.items():
        if name not in graph.branches:
            await session.delete(row)
    for name, commit_id in graph.branches.items():
        row = stored_branches.get(name)
        if row is None:
            session.add(ArborBranch(repo_id=repo_id, name=name, commit_id=commit_id))
        else:
            row.commit_id = commit_id

    state = await session.get(ArborRepoState, repo_id)
    if state is None:
        state = ArborRepoState(repo_id=repo_id)
        session.add(state)
    state.current_branch = graph.current_branch
    state.head_commit_id = graph.head_id
    state.id_counter = graph.id_counter
    state.staged = sorted(graph.staged)
    state.marked_for_removal = sorted(graph.marked_for_removal)

    await session.flush()
    logger.debug(
        "✅ Saved graph %s: %d new commits, %d branches",
        repo_id[:8],
        len(new_commits),
        len(graph.branches),
    )


class SqlPersistenceStore:
    """:class:`~arbor.vcs.collaborators.PersistenceStore` over one open session."""

    def __init__(self, session: AsyncSession, repo_id: str) -> None:
        self.session = session
        self.repo_id = repo_id

    async def load(self) -> CommitGraph | None:
        return await load_graph(self.session, self.repo_id)

    async def save(self, graph: CommitGraph) -> None:
        await save_graph(self.session, self.repo_id, graph)
