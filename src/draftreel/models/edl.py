"""EDL (Edit Decision List) model."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

EditOperation = Literal["keep", "cut", "move"]


class EditDecisionListEntry(BaseModel):
    """Maps one original-timeline range to a new-timeline range."""

    original_start_ms: float
    original_end_ms: float
    new_start_ms: float
    new_end_ms: float
    operation: EditOperation = "keep"

    @property
    def original_duration_ms(self) -> float:
        return self.original_end_ms - self.original_start_ms

    @property
    def new_duration_ms(self) -> float:
        return self.new_end_ms - self.new_start_ms


class EditDecisionList(BaseModel):
    """Ordered edit decisions, in play order (not sorted by original start)."""

    entries: list[EditDecisionListEntry] = Field(default_factory=list)
    video_id: str = "unknown"
    original_duration_ms: float = 0.0
    new_duration_ms: float = 0.0

    @property
    def keep_entries(self) -> list[EditDecisionListEntry]:
        return [e for e in self.entries if e.operation == "keep"]

    @property
    def cut_entries(self) -> list[EditDecisionListEntry]:
        return [e for e in self.entries if e.operation == "cut"]
