"""Pydantic data models for draftreel."""

from draftreel.models.config import Settings
from draftreel.models.draft import Draft, DraftMode, RedoEntry
from draftreel.models.edl import EditDecisionList, EditDecisionListEntry
from draftreel.models.segment import FillerWordSpan, RecordingSegment
from draftreel.models.transcript import (
    RetimingResult,
    RetimingStats,
    TranscriptSegment,
    TranscriptWord,
    VideoTranscript,
)

__all__ = [
    "Settings",
    "Draft",
    "DraftMode",
    "RedoEntry",
    "EditDecisionList",
    "EditDecisionListEntry",
    "FillerWordSpan",
    "RecordingSegment",
    "RetimingResult",
    "RetimingStats",
    "TranscriptSegment",
    "TranscriptWord",
    "VideoTranscript",
]
