"""SQLAlchemy ORM models for persisted Arbor repository state.

Tables:
- arbor_commits: every commit ever created, with its parent id and file table
- arbor_branches: branch name → head commit id
- arbor_repo_state: one row per repository holding the active branch,
  the head, the id counter and the staging sets

All rows are scoped by ``repo_id`` so several repositories may share one
database when ``ARBOR_DATABASE_URL`` points at a server.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from arbor.db.database import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArborCommit(Base):
    """An immutable commit record.  Never updated after insert."""

    __tablename__ = "arbor_commits"

    repo_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    commit_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    parent_commit_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    committed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    file_table: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now
    )

    def __repr__(self) -> str:
        return f"<ArborCommit {self.commit_id} msg={self.message[:30]!r}>"


class ArborBranch(Base):
    """A named pointer to a commit."""

    __tablename__ = "arbor_branches"

    repo_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    commit_id: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<ArborBranch {self.name!r} → {self.commit_id}>"


class ArborRepoState(Base):
    """Active branch, head, id counter and staging sets for one repository."""

    __tablename__ = "arbor_repo_state"

    repo_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    current_branch: Mapped[str] = mapped_column(String(255), nullable=False)
    head_commit_id: Mapped[int] = mapped_column(Integer, nullable=False)
    id_counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    staged: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    marked_for_removal: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utc_now, onupdate=_utc_now
    )

    def __repr__(self) -> str:
        return f"<ArborRepoState {self.repo_id[:8]} branch={self.current_branch!r}>"
