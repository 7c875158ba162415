"""draftreel export — render a draft with its EDL and transcript."""

from __future__ import annotations

import asyncio

import click

from draftreel.cli.common import config_option, draft_option, open_workspace
from draftreel.export.concat import FFmpegConcatenator
from draftreel.export.pipeline import export_draft
from draftreel.export.transcribe import WhisperTranscriber
from draftreel.models.transcript import VideoTranscript
from draftreel.utils.io import read_json
from draftreel.utils.progress import log_error


@click.command()
@config_option
@draft_option
@click.option(
    "--output-dir", "-o",
    default="export",
    type=click.Path(file_okay=False),
    help="Directory for the video and sidecars",
)
@click.option(
    "--transcript", "-t",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Transcript of the recorded segments, retimed into the export",
)
@click.option("--transcribe", is_flag=True, help="Transcribe the export with faster-whisper")
def export_cmd(
    config_path: str,
    draft_id: str | None,
    output_dir: str,
    transcript: str | None,
    transcribe: bool,
) -> None:
    """Concatenate a draft's segments and write edit-list.json."""
    ws = open_workspace(config_path)
    draft = asyncio.run(ws.find_draft(draft_id))
    if draft is None:
        log_error("Draft not found")
        raise SystemExit(1)

    original = VideoTranscript.model_validate(read_json(transcript)) if transcript else None
    transcriber = None
    if transcribe and original is None:
        transcriber = WhisperTranscriber(ws.settings.export.whisper_model)

    result = asyncio.run(export_draft(
        draft.segments,
        output_dir,
        FFmpegConcatenator(output_dir),
        transcript=original,
        transcriber=transcriber,
        config=ws.settings.export,
        resolve_ref=lambda ref: str(ws.files.resolve(ref)),
    ))
    if not result.success:
        log_error(f"Export failed: {result.error}")
        raise SystemExit(1)

    click.echo(f"Video: {result.output_path}")
    click.echo(f"EDL: {result.edl_path}")
    if result.timeline_path:
        click.echo(f"Timeline: {result.timeline_path}")
    if result.transcript_path:
        click.echo(f"Transcript: {result.transcript_path}")
