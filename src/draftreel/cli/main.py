"""Root CLI group for draftreel."""

from __future__ import annotations

import click

from draftreel import __version__
from draftreel.utils.progress import set_quiet


@click.group()
@click.version_option(version=__version__, prog_name="draftreel")
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors")
def cli(quiet: bool) -> None:
    """draftreel — segment-based recording drafts with undo, EDLs and retimed transcripts."""
    set_quiet(quiet)


# Import and register subcommands
from draftreel.cli.init_cmd import init_cmd  # noqa: E402
from draftreel.cli.status_cmd import status_cmd  # noqa: E402
from draftreel.cli.draft_cmd import record_cmd, redo_cmd, start_over_cmd, undo_cmd  # noqa: E402
from draftreel.cli.edl_cmd import edl_cmd, retime_cmd  # noqa: E402
from draftreel.cli.export_cmd import export_cmd  # noqa: E402

cli.add_command(init_cmd, "init")
cli.add_command(status_cmd, "status")
cli.add_command(record_cmd, "record")
cli.add_command(undo_cmd, "undo")
cli.add_command(redo_cmd, "redo")
cli.add_command(start_over_cmd, "start-over")
cli.add_command(edl_cmd, "edl")
cli.add_command(retime_cmd, "retime")
cli.add_command(export_cmd, "export")
