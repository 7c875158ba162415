"""Export a draft: concatenate, build the EDL, carry the transcript across."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Callable, Protocol

from pydantic import BaseModel

from draftreel.editing.edl_builder import build_edl, write_edl_json
from draftreel.editing.retiming import retime_transcript
from draftreel.editing.timeline import write_timeline
from draftreel.editing.validate import validate_edl
from draftreel.export.concat import ConcatOptions, Concatenator, concatenate_segments
from draftreel.models.config import ExportConfig
from draftreel.models.segment import RecordingSegment
from draftreel.models.transcript import VideoTranscript
from draftreel.utils.io import write_json
from draftreel.utils.progress import log_error, log_success, log_warning

EDL_FILENAME = "edit-list.json"
TIMELINE_FILENAME = "edit-list.otio"
TRANSCRIPT_FILENAME = "transcript.json"


class Transcriber(Protocol):
    """Speech-to-text backend."""

    async def transcribe(self, audio_ref: str, language: str) -> VideoTranscript: ...


class ExportResult(BaseModel):
    success: bool
    output_path: str | None = None
    edl_path: str | None = None
    timeline_path: str | None = None
    transcript_path: str | None = None
    edl_valid: bool = False
    error: str | None = None


async def export_draft(
    segments: list[RecordingSegment],
    output_dir: Path | str,
    concatenator: Concatenator,
    *,
    transcript: VideoTranscript | None = None,
    transcriber: Transcriber | None = None,
    config: ExportConfig | None = None,
    resolve_ref: Callable[[str], str] = str,
) -> ExportResult:
    """Export the segments and their sidecars into ``output_dir``.

    Steps:
    1. Concatenate the segment media
    2. Build (and optionally validate) the EDL, write edit-list.json and,
       when configured, the edit-list.otio timeline
    3. Retime ``transcript`` through the EDL, or transcribe the output
       when only a transcriber is given, and write transcript.json
    """
    config = config or ExportConfig()
    if not segments:
        log_error("Nothing to export")
        return ExportResult(success=False, error="No segments to export")

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    concat = await concatenate_segments(
        [resolve_ref(s.media_ref) for s in segments],
        concatenator,
        ConcatOptions(
            output_path=str(output_dir / config.output_name),
            quality=config.quality,
        ),
    )
    if not concat.success:
        return ExportResult(success=False, error=concat.error)

    output_path = output_dir / config.output_name
    if Path(concat.output_path) != output_path:
        # A single segment comes back as its managed file
        try:
            await asyncio.to_thread(shutil.copy2, concat.output_path, output_path)
        except OSError as e:
            log_error(f"Could not copy export to {output_path}: {e}")
            return ExportResult(success=False, error=str(e))

    edl = build_edl(segments)
    edl_valid = validate_edl(edl) if config.validate_edl else True
    edl_path = write_edl_json(edl, output_dir / EDL_FILENAME)
    timeline_path: Path | None = None
    if config.timeline:
        timeline_path = write_timeline(
            segments,
            output_dir / TIMELINE_FILENAME,
            fps=config.frame_rate,
            resolve_ref=resolve_ref,
        )

    final_transcript: VideoTranscript | None = None
    if transcript is not None:
        if not edl_valid:
            log_warning("EDL failed validation; retimed transcript may be inaccurate")
        final_transcript = retime_transcript(transcript, edl)
    elif transcriber is not None:
        final_transcript = await transcriber.transcribe(str(output_path), config.language)

    transcript_path: Path | None = None
    if final_transcript is not None:
        transcript_path = output_dir / TRANSCRIPT_FILENAME
        write_json(transcript_path, final_transcript)

    log_success(f"Exported {len(segments)} segment(s) → {output_path}")
    return ExportResult(
        success=True,
        output_path=str(output_path),
        edl_path=str(edl_path),
        timeline_path=str(timeline_path) if timeline_path else None,
        transcript_path=str(transcript_path) if transcript_path else None,
        edl_valid=edl_valid,
    )
