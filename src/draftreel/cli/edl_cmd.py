"""draftreel edl / retime — edit decision lists and transcript retiming."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from draftreel.cli.common import config_option, draft_option, open_workspace
from draftreel.editing.edl_builder import build_edl, write_edl_json
from draftreel.editing.retiming import create_retiming_result, retiming_stats
from draftreel.editing.timeline import write_timeline
from draftreel.editing.validate import validate_edl
from draftreel.models.transcript import VideoTranscript
from draftreel.utils.io import read_json, write_json
from draftreel.utils.progress import log_error, log_success

console = Console()


@click.command()
@config_option
@draft_option
@click.option(
    "--output", "-o",
    default="edit-list.json",
    type=click.Path(dir_okay=False),
    help="Where to write the EDL",
)
@click.option(
    "--timeline",
    default=None,
    type=click.Path(dir_okay=False),
    help="Also write an interchange timeline (.otio or CMX 3600 .edl)",
)
@click.option("--strict", is_flag=True, help="Exit non-zero when the EDL is invalid")
def edl_cmd(
    config_path: str,
    draft_id: str | None,
    output: str,
    timeline: str | None,
    strict: bool,
) -> None:
    """Build the edit decision list for a draft."""
    ws = open_workspace(config_path)
    draft = asyncio.run(ws.find_draft(draft_id))
    if draft is None:
        log_error("Draft not found")
        raise SystemExit(1)

    edl = build_edl(draft.segments)
    valid = validate_edl(edl)
    path = write_edl_json(edl, output)

    click.echo(
        f"{len(edl.entries)} entries, {edl.new_duration_ms / 1000:.1f}s kept "
        f"of {edl.original_duration_ms / 1000:.1f}s recorded → {path}"
    )
    if timeline:
        try:
            write_timeline(
                draft.segments,
                timeline,
                fps=ws.settings.export.frame_rate,
                resolve_ref=lambda ref: str(ws.files.resolve(ref)),
            )
        except ValueError as e:
            log_error(str(e))
            raise SystemExit(1)
        click.echo(f"Timeline: {timeline}")
    if not valid:
        click.echo("EDL is invalid")
        if strict:
            raise SystemExit(1)


@click.command()
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False))
@config_option
@draft_option
@click.option(
    "--output", "-o",
    default=None,
    type=click.Path(dir_okay=False),
    help="Where to write the retimed transcript (default: <name>.retimed.json)",
)
def retime_cmd(
    transcript: str,
    config_path: str,
    draft_id: str | None,
    output: str | None,
) -> None:
    """Retime a transcript onto a draft's edited timeline."""
    ws = open_workspace(config_path)
    draft = asyncio.run(ws.find_draft(draft_id))
    if draft is None:
        log_error("Draft not found")
        raise SystemExit(1)

    original = VideoTranscript.model_validate(read_json(transcript))
    result = create_retiming_result(original, draft.segments)
    if not validate_edl(result.edl):
        log_error("EDL is invalid; retimed timestamps may be wrong")

    source = Path(transcript)
    output_path = Path(output) if output else source.with_name(f"{source.stem}.retimed.json")
    write_json(output_path, result.retimed_transcript)

    stats = retiming_stats(result)
    table = Table(title="Retiming", show_header=False)
    table.add_column(style="bold")
    table.add_column(justify="right")
    table.add_row("Words kept", f"{stats.retimed_word_count}/{stats.original_word_count}")
    table.add_row("Retention", f"{stats.retention_percentage:.1f}%")
    table.add_row("Segments kept", f"{stats.segments_retained}/{stats.original_segments}")
    table.add_row("Duration", f"{stats.new_duration_ms / 1000:.1f}s")
    console.print(table)

    log_success(f"Retimed transcript: {output_path}")
