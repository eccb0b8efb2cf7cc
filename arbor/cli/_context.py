"""Shared plumbing for command callbacks.

- :func:`open_repository` — load the graph for *root* inside an open session,
  hand out a :class:`~arbor.vcs.repository.Repository` wired to the
  filesystem collaborators, and save the graph when the block exits cleanly.
- :func:`fail` — render a failed :class:`~arbor.vcs.errors.Outcome` and exit.
- :func:`run_command` — ``asyncio.run`` wrapper with the CLI's error contract.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import pathlib
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import NoReturn

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._repo import read_repo_id
from arbor.cli.db import SqlPersistenceStore
from arbor.cli.errors import ExitCode, exit_code_for
from arbor.cli.object_store import FileContentStore
from arbor.cli.working_tree import FileWorkingTree
from arbor.config import settings
from arbor.vcs.errors import ArborError, Outcome
from arbor.vcs.repository import Repository

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def open_repository(
    root: pathlib.Path, session: AsyncSession
) -> AsyncGenerator[Repository, None]:
    """Yield the repository at *root*; persist its graph if the block succeeds."""
    persistence = SqlPersistenceStore(session, read_repo_id(root))
    graph = await persistence.load()
    if graph is None:
        typer.echo("❌ No repository state found. Run `arbor init`.")
        raise typer.Exit(code=ExitCode.REPO_NOT_FOUND)
    store = FileContentStore(root)
    repo = Repository(
        graph,
        store,
        FileWorkingTree(root, store),
        conflict_suffix=settings.conflict_suffix,
    )
    yield repo
    await persistence.save(graph)


def fail(outcome: Outcome[object]) -> NoReturn:
    """Echo the outcome's detail and exit with the matching code."""
    if outcome.error is None:
        raise ValueError("fail() called with a successful outcome")
    typer.echo(outcome.detail)
    raise typer.Exit(code=exit_code_for(outcome.error))


def run_command(name: str, factory: Callable[[], Awaitable[None]]) -> None:
    """Run an async command body; raised Arbor errors exit by kind, anything else exits 3."""
    try:
        asyncio.run(factory())
    except typer.Exit:
        raise
    except ArborError as exc:
        code = exit_code_for(exc.kind)
        typer.echo(f"❌ arbor {name} failed: {exc}")
        if code is ExitCode.INTERNAL_ERROR:
            logger.error("❌ arbor %s storage error: %s", name, exc, exc_info=True)
        raise typer.Exit(code=code)
    except Exception as exc:
        typer.echo(f"❌ arbor {name} failed: {exc}")
        logger.error("❌ arbor %s error: %s", name, exc, exc_info=True)
        raise typer.Exit(code=ExitCode.INTERNAL_ERROR)


def confirm_dangerous(yes: bool) -> None:
    """Ask before commands that may overwrite working files; exit 0 on refusal."""
    if yes:
        return
    prompt = (
        "The command you entered may alter the files in your working directory. "
        "Uncommitted changes may be lost. Are you sure you want to continue?"
    )
    if not typer.confirm(prompt, default=False):
        typer.echo("Aborted.")
        raise typer.Exit(code=ExitCode.SUCCESS)
