"""Transcript retiming — remap word timestamps into the edited timeline."""

from __future__ import annotations

from datetime import datetime, timezone

from draftreel.editing.edl_builder import build_edl
from draftreel.models.edl import EditDecisionList
from draftreel.models.segment import RecordingSegment
from draftreel.models.transcript import (
    RetimingResult,
    RetimingStats,
    TranscriptSegment,
    TranscriptWord,
    VideoTranscript,
)
from draftreel.utils.progress import log_step

RETIMED_SUFFIX = "_retimed"


def map_point(ms: float, edl: EditDecisionList) -> float | None:
    """Map a point in original time to new time, or None if it was cut.

    Entries are scanned in stored order and the first one containing the
    point wins; both range ends are inclusive. A point on the shared
    boundary of two kept ranges therefore lands in whichever entry comes
    first in the list, not the numerically closer one. Do not replace the
    scan with a search over sorted entries.
    """
    for entry in edl.entries:
        if entry.original_start_ms <= ms <= entry.original_end_ms:
            if entry.operation == "cut":
                return None
            return entry.new_start_ms + (ms - entry.original_start_ms)
    return None


def retime_transcript(
    transcript: VideoTranscript,
    edl: EditDecisionList,
) -> VideoTranscript:
    """Return a new transcript with timestamps remapped through the EDL.

    A word survives only if both its start and end map. A segment survives
    if any of its words do, and its bounds are recomputed from the
    surviving words. The input transcript is left untouched. Overlapping
    EDLs are not rejected here; run ``validate_edl`` first.
    """
    retimed_segments: list[TranscriptSegment] = []

    for segment in transcript.segments:
        words: list[TranscriptWord] = []
        for word in segment.words:
            start = map_point(word.start_ms, edl)
            end = map_point(word.end_ms, edl)
            if start is None or end is None:
                continue
            words.append(word.model_copy(update={"start_ms": start, "end_ms": end}))

        if not words:
            continue

        retimed_segments.append(segment.model_copy(update={
            "id": f"{segment.id}{RETIMED_SUFFIX}",
            "start_ms": min(w.start_ms for w in words),
            "end_ms": max(w.end_ms for w in words),
            "words": words,
        }))

    retimed = transcript.model_copy(update={
        "id": f"{transcript.id}{RETIMED_SUFFIX}",
        "segments": retimed_segments,
        "duration_ms": edl.new_duration_ms,
        "created_at": datetime.now(timezone.utc),
    })

    log_step(
        "Retime",
        f"Kept {retimed.word_count}/{transcript.word_count} words "
        f"in {len(retimed_segments)}/{len(transcript.segments)} segments",
    )
    return retimed


def create_retiming_result(
    transcript: VideoTranscript,
    segments: list[RecordingSegment],
) -> RetimingResult:
    """Build the EDL for ``segments`` and retime ``transcript`` through it."""
    edl = build_edl(segments)
    return RetimingResult(
        original_transcript=transcript,
        retimed_transcript=retime_transcript(transcript, edl),
        edl=edl,
    )


def retiming_stats(result: RetimingResult) -> RetimingStats:
    original = result.original_transcript
    retimed = result.retimed_transcript

    original_words = original.word_count
    retimed_words = retimed.word_count

    return RetimingStats(
        original_word_count=original_words,
        retimed_word_count=retimed_words,
        words_removed=original_words - retimed_words,
        retention_percentage=_percent(retimed_words, original_words),
        original_duration_ms=original.duration_ms,
        new_duration_ms=retimed.duration_ms,
        duration_reduction_ms=original.duration_ms - retimed.duration_ms,
        compression_ratio=_percent(retimed.duration_ms, original.duration_ms),
        segments_retained=len(retimed.segments),
        original_segments=len(original.segments),
    )


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0
