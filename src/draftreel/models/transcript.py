"""Transcript data models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from draftreel.models.edl import EditDecisionList


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptWord(BaseModel):
    """A single transcribed word with timing."""

    text: str
    start_ms: float
    end_ms: float
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class TranscriptSegment(BaseModel):
    """An ordered run of words."""

    id: str
    words: list[TranscriptWord] = Field(default_factory=list)
    start_ms: float
    end_ms: float
    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms


class VideoTranscript(BaseModel):
    """Complete transcript of a video."""

    id: str
    video_id: str
    segments: list[TranscriptSegment] = Field(default_factory=list)
    language: str = "en"
    duration_ms: float = 0.0
    created_at: datetime = Field(default_factory=_utcnow)
    model: str = ""
    status: Literal["pending", "processing", "completed", "error"] = "completed"
    error: str | None = None

    @property
    def word_count(self) -> int:
        return sum(len(s.words) for s in self.segments)


class RetimingResult(BaseModel):
    """A transcript before and after retiming, with the EDL that links them."""

    original_transcript: VideoTranscript
    retimed_transcript: VideoTranscript
    edl: EditDecisionList


class RetimingStats(BaseModel):
    """Summary of what a retiming pass kept and dropped."""

    original_word_count: int
    retimed_word_count: int
    words_removed: int
    retention_percentage: float
    original_duration_ms: float
    new_duration_ms: float
    duration_reduction_ms: float
    compression_ratio: float
    segments_retained: int
    original_segments: int
