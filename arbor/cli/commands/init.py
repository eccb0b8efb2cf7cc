"""arbor init — initialise a new Arbor repository in the current directory.

Layout::

    .arbor/
        repo.json        repo_id (UUID), schema_version, created_at
        arbor.db         SQLite state (unless ARBOR_DATABASE_URL is set)
        objects/         stored file blobs

The graph starts with a single root commit (id 0, ``"initial commit"``,
no files) on the default branch (``master``).
"""
from __future__ import annotations

import datetime
import json
import logging
import pathlib
import uuid

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import run_command
from arbor.cli._repo import ARBOR_DIR, REPO_FILENAME
from arbor.cli.db import open_session, save_graph
from arbor.cli.errors import ExitCode
from arbor.cli.object_store import objects_dir
from arbor.config import settings
from arbor.vcs.graph import CommitGraph

logger = logging.getLogger(__name__)

app = typer.Typer()

_SCHEMA_VERSION = "1"


def write_repo_layout(root: pathlib.Path) -> str:
    """Create ``.arbor/`` and ``repo.json`` under *root*; return the new repo_id."""
    repo_id = str(uuid.uuid4())
    arbor_dir = root / ARBOR_DIR
    arbor_dir.mkdir(parents=True)
    objects_dir(root).mkdir()
    (arbor_dir / REPO_FILENAME).write_text(
        json.dumps(
            {
                "repo_id": repo_id,
                "schema_version": _SCHEMA_VERSION,
                "created_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            },
            indent=2,
        )
    )
    return repo_id


async def _init_async(*, root: pathlib.Path, session: AsyncSession, repo_id: str) -> CommitGraph:
    """Persist the initial graph for a freshly laid-out repository."""
    graph = CommitGraph.initialize(
        branch=settings.default_branch, message=settings.initial_message
    )
    await save_graph(session, repo_id, graph)
    logger.info("✅ Initialised Arbor repository %s at %s", repo_id[:8], root)
    return graph


@app.callback(invoke_without_command=True)
def init(ctx: typer.Context) -> None:
    """Create an empty Arbor repository in the current directory."""
    root = pathlib.Path.cwd()
    if (root / ARBOR_DIR).exists():
        typer.echo(
            "An Arbor version control system already exists in the current directory."
        )
        raise typer.Exit(code=ExitCode.USER_ERROR)

    repo_id = write_repo_layout(root)

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _init_async(root=root, session=session, repo_id=repo_id)

    run_command("init", _run)
    typer.echo("Successfully initialized.")
