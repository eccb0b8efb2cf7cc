"""arbor status — branches, staged files and files marked for removal.

Output::

    === Branches ===
    feature
    *master

    === Staged Files ===
    notes.txt

    === Files Marked for Removal ===
    old.txt
"""
from __future__ import annotations

import pathlib

import typer
from sqlalchemy.ext.asyncio import AsyncSession

from arbor.cli._context import open_repository, run_command
from arbor.cli._repo import require_repo
from arbor.cli.db import open_session
from arbor.vcs.graph import StatusReport

app = typer.Typer()


def format_status(report: StatusReport) -> str:
    lines = ["=== Branches ==="]
    lines.extend(f"*{b.name}" if b.is_current else b.name for b in report.branches)
    lines.append("")
    lines.append("=== Staged Files ===")
    lines.extend(report.staged)
    lines.append("")
    lines.append("=== Files Marked for Removal ===")
    lines.extend(report.marked_for_removal)
    return "\n".join(lines)


async def _status_async(*, root: pathlib.Path, session: AsyncSession) -> StatusReport:
    async with open_repository(root, session) as repo:
        report = repo.status().unwrap()
    typer.echo(format_status(report))
    return report


@app.callback(invoke_without_command=True)
def status(ctx: typer.Context) -> None:
    """Show branches and staging state."""
    root = require_repo()

    async def _run() -> None:
        async with open_session(root=root) as session:
            await _status_async(root=root, session=session)

    run_command("status", _run)
