"""Repository detection utilities for the Arbor CLI.

Walking up the directory tree to locate a ``.arbor/`` directory is the
primitive every subcommand starts with.  ``find_repo_root`` returns ``None``
on a miss and never raises; ``require_repo`` turns a miss into exit code 2.
The ``ARBOR_REPO_ROOT`` environment variable overrides discovery (tests set
it instead of calling ``os.chdir``).
"""
from __future__ import annotations

import json
import logging
import os
import pathlib

import typer

from arbor.cli.errors import ExitCode

logger = logging.getLogger(__name__)

ARBOR_DIR = ".arbor"
REPO_FILENAME = "repo.json"


def find_repo_root(start: pathlib.Path | None = None) -> pathlib.Path | None:
    """Walk up from *start* (default ``Path.cwd()``) looking for ``.arbor/``."""
    if env_root := os.environ.get("ARBOR_REPO_ROOT"):
        p = pathlib.Path(env_root).resolve()
        logger.debug("⚠️ ARBOR_REPO_ROOT override active: %s", p)
        return p if (p / ARBOR_DIR).is_dir() else None

    current = (start or pathlib.Path.cwd()).resolve()
    while True:
        if (current / ARBOR_DIR).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def require_repo(start: pathlib.Path | None = None) -> pathlib.Path:
    """Return the repo root or exit 2 with a clear error message."""
    root = find_repo_root(start)
    if root is None:
        typer.echo("Not an Arbor repository. Run `arbor init`.")
        raise typer.Exit(code=ExitCode.REPO_NOT_FOUND)
    return root


def read_repo_id(root: pathlib.Path) -> str:
    """Return the ``repo_id`` recorded in ``.arbor/repo.json``."""
    repo_file = root / ARBOR_DIR / REPO_FILENAME
    try:
        data: dict[str, str] = json.loads(repo_file.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("❌ Cannot read %s: %s", repo_file, exc)
        typer.echo(f"❌ Repository metadata is unreadable: {repo_file}")
        raise typer.Exit(code=ExitCode.REPO_NOT_FOUND)
    return data["repo_id"]
