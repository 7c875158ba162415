"""Recording segment model."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field


def new_segment_id() -> str:
    """Mint an id for a freshly recorded segment."""
    return uuid.uuid4().hex


class FillerWordSpan(BaseModel):
    """A detected filler word inside a segment, carried through untouched."""

    start_ms: float
    end_ms: float
    word: str
    confidence: float | None = None


class RecordingSegment(BaseModel):
    """One physically recorded clip, optionally trimmed."""

    id: str = Field(default_factory=new_segment_id)
    duration_seconds: float = Field(ge=0.0)
    media_ref: str
    trim_in_ms: float | None = Field(default=None, ge=0.0)
    trim_out_ms: float | None = Field(default=None, ge=0.0)
    filler_words: list[FillerWordSpan] | None = None

    @property
    def full_duration_ms(self) -> float:
        return self.duration_seconds * 1000

    def kept_range_ms(self) -> tuple[float, float]:
        """The kept range within this clip's own timeline."""
        start = self.trim_in_ms if self.trim_in_ms is not None else 0
        end = self.trim_out_ms if self.trim_out_ms is not None else self.full_duration_ms
        return start, end

    def kept_duration_ms(self) -> float:
        start, end = self.kept_range_ms()
        return end - start
