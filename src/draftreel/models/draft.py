"""Draft and redo-stack persistence models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from draftreel.models.segment import RecordingSegment

DraftMode = Literal["camera", "upload"]


class Draft(BaseModel):
    """A persisted, resumable in-progress recording."""

    id: str
    mode: DraftMode = "camera"
    segments: list[RecordingSegment] = Field(default_factory=list)
    total_duration_budget: float = 60.0
    created_at: datetime
    last_modified: datetime
    thumbnail_ref: str | None = None


class RedoEntry(BaseModel):
    """Segments popped off a draft by undo, not yet discarded."""

    draft_id: str | None = None
    mode: DraftMode = "camera"
    segments: list[RecordingSegment] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> RedoEntry:
        # Older payloads stored the bare segment list.
        if isinstance(payload, list):
            return cls(segments=payload)
        return cls.model_validate(payload)
