"""Interchange timelines for a draft — OpenTimelineIO and CMX 3600."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import opentimelineio as otio

from draftreel.editing.edl_builder import build_edl
from draftreel.models.segment import RecordingSegment
from draftreel.utils.progress import log_step

DEFAULT_FRAME_RATE = 30

# File suffix → OTIO adapter
ADAPTERS = {
    ".otio": "otio_json",
    ".edl": "cmx_3600",
}


def _frames(ms: float, fps: int) -> int:
    return round(ms * fps / 1000)


def build_timeline(
    segments: list[RecordingSegment],
    *,
    fps: int = DEFAULT_FRAME_RATE,
    name: str | None = None,
    resolve_ref: Callable[[str], str] = str,
) -> otio.schema.Timeline:
    """One video track with a clip per kept segment, in play order.

    Source ranges are the EDL's clip-local kept ranges, quantized to
    whole frames.
    """
    edl = build_edl(segments)
    timeline = otio.schema.Timeline(name=name or edl.video_id)
    track = otio.schema.Track(name="V1", kind=otio.schema.TrackKind.Video)

    for segment, entry in zip(segments, edl.keep_entries):
        clip = otio.schema.Clip(
            name=segment.id,
            media_reference=otio.schema.ExternalReference(
                target_url=resolve_ref(segment.media_ref),
                available_range=otio.opentime.TimeRange(
                    start_time=otio.opentime.RationalTime(0, fps),
                    duration=otio.opentime.RationalTime(_frames(segment.full_duration_ms, fps), fps),
                ),
            ),
            source_range=otio.opentime.TimeRange(
                start_time=otio.opentime.RationalTime(_frames(entry.original_start_ms, fps), fps),
                duration=otio.opentime.RationalTime(_frames(entry.original_duration_ms, fps), fps),
            ),
        )
        track.append(clip)

    timeline.tracks.append(track)
    return timeline


def write_timeline(
    segments: list[RecordingSegment],
    path: Path | str,
    *,
    fps: int = DEFAULT_FRAME_RATE,
    resolve_ref: Callable[[str], str] = str,
) -> Path:
    """Write the draft as ``.otio`` or CMX 3600 ``.edl``, chosen by suffix."""
    path = Path(path)
    adapter = ADAPTERS.get(path.suffix.lower())
    if adapter is None:
        raise ValueError(f"Unsupported timeline format: {path.suffix or path.name}")

    timeline = build_timeline(segments, fps=fps, resolve_ref=resolve_ref)
    path.parent.mkdir(parents=True, exist_ok=True)
    otio.adapters.write_to_file(timeline, str(path), adapter_name=adapter)

    log_step("Timeline", f"Wrote {len(segments)} clip(s) at {fps}fps → {path.name}")
    return path
