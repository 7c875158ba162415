"""EDL generation from recorded segments, plus the JSON sidecar."""

from __future__ import annotations

from pathlib import Path

from draftreel.models.edl import EditDecisionList, EditDecisionListEntry
from draftreel.models.segment import RecordingSegment
from draftreel.utils.io import read_json, write_json
from draftreel.utils.progress import log_step

UNKNOWN_VIDEO_ID = "unknown"


def build_edl(segments: list[RecordingSegment]) -> EditDecisionList:
    """Build an EDL from an ordered list of recorded segments.

    Each segment contributes one keep entry. The original range is the
    segment's kept range within its own clip (trim in/out, defaulting to
    the whole clip); the new range is laid end to end on a running cursor.
    Trimmed-off material is never emitted as a cut entry.

    ``original_duration_ms`` sums every segment's untrimmed duration, so it
    is generally larger than the sum of the kept ranges.
    """
    entries: list[EditDecisionListEntry] = []
    cursor = 0.0

    for segment in segments:
        original_start, original_end = segment.kept_range_ms()
        length = original_end - original_start

        entries.append(EditDecisionListEntry(
            original_start_ms=original_start,
            original_end_ms=original_end,
            new_start_ms=cursor,
            new_end_ms=cursor + length,
            operation="keep",
        ))
        cursor += length

    original_duration = sum(s.full_duration_ms for s in segments)

    edl = EditDecisionList(
        entries=entries,
        video_id=segments[0].id if segments else UNKNOWN_VIDEO_ID,
        original_duration_ms=original_duration,
        new_duration_ms=cursor,
    )

    log_step(
        "EDL",
        f"Built EDL: {len(entries)} keep, "
        f"{original_duration / 1000:.1f}s recorded → {cursor / 1000:.1f}s kept",
    )
    return edl


def write_edl_json(edl: EditDecisionList, path: Path | str) -> Path:
    """Write the EDL as a JSON sidecar."""
    path = Path(path)
    write_json(path, edl)
    return path


def read_edl_json(path: Path | str) -> EditDecisionList:
    return EditDecisionList.model_validate(read_json(path))
