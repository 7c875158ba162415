"""draftreel status — list drafts and any pending redo stack."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from draftreel.cli.common import config_option, open_workspace
from draftreel.utils.progress import drafts_table

console = Console()


@click.command()
@config_option
def status_cmd(config_path: str) -> None:
    """Show the drafts in this workspace."""
    ws = open_workspace(config_path)
    mode = ws.settings.drafts.mode

    async def _gather():
        return await ws.storage.get_all_drafts(mode), await ws.storage.get_redo_entry()

    drafts, redo = asyncio.run(_gather())

    if not drafts:
        click.echo(f"No {mode} drafts.")
    else:
        console.print(drafts_table(drafts, title=f"{mode.capitalize()} drafts"))

    if redo is not None and redo.segments and redo.mode == mode:
        owner = redo.draft_id or "unsaved"
        click.echo(f"Redo pending: {len(redo.segments)} segment(s) from draft {owner}")
