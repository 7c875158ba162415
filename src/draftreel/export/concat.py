"""Segment concatenation — the collaborator contract and an FFmpeg backend."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Literal, Protocol

from pydantic import BaseModel

from draftreel.utils.ffmpeg import concat_videos
from draftreel.utils.progress import log, log_error, log_step


class ConcatOptions(BaseModel):
    output_path: str | None = None
    quality: Literal["low", "medium", "high"] = "high"


class ConcatResult(BaseModel):
    success: bool
    output_path: str | None = None
    error: str | None = None


class Concatenator(Protocol):
    """Joins segment files, in order, into one video."""

    name: str

    async def concatenate(self, segment_refs: list[str], options: ConcatOptions) -> ConcatResult: ...


class FFmpegConcatenator:
    """Concatenate with the ffmpeg concat demuxer."""

    name = "ffmpeg"

    def __init__(self, output_dir: Path | str) -> None:
        self.output_dir = Path(output_dir)

    async def concatenate(self, segment_refs: list[str], options: ConcatOptions) -> ConcatResult:
        output = Path(options.output_path) if options.output_path else self.output_dir / "export.mp4"
        await asyncio.to_thread(concat_videos, segment_refs, output, quality=options.quality)
        return ConcatResult(success=True, output_path=str(output))


async def concatenate_segments(
    segment_refs: list[str],
    concatenator: Concatenator,
    options: ConcatOptions | None = None,
) -> ConcatResult:
    """Concatenate segments, short-circuiting the trivial cases.

    No segments is a caller error and is rejected without touching the
    backend; a single segment is returned as-is.
    """
    options = options or ConcatOptions()
    log_step("Concat", f"Concatenating {len(segment_refs)} segments...")

    if not segment_refs:
        return ConcatResult(success=False, error="No segments to concatenate")

    if len(segment_refs) == 1:
        log("Only one segment, returning as-is")
        return ConcatResult(success=True, output_path=segment_refs[0])

    try:
        return await concatenator.concatenate(list(segment_refs), options)
    except Exception as e:
        log_error(f"Concatenation failed ({concatenator.name}): {e}")
        return ConcatResult(success=False, error=str(e))
