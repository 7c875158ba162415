"""Configuration models, loaded from draftreel.yaml."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from draftreel.models.draft import DraftMode
from draftreel.utils.io import read_yaml, write_yaml

CONFIG_FILENAME = "draftreel.yaml"


class StorageConfig(BaseModel):
    """Where drafts, media and metadata live."""

    root: str = ".draftreel"
    media_dir: str = "media"
    metadata_dir: str = "metadata"

    def media_path(self, base: Path) -> Path:
        return base / self.root / self.media_dir

    def metadata_path(self, base: Path) -> Path:
        return base / self.root / self.metadata_dir


class DraftConfig(BaseModel):
    """Configuration for the draft lifecycle."""

    mode: DraftMode = "camera"
    autosave_delay_ms: int = Field(default=1000, ge=0, le=60000)
    default_duration_budget: float = Field(default=60.0, gt=0.0)


class ExportConfig(BaseModel):
    """Configuration for exporting a draft."""

    quality: Literal["low", "medium", "high"] = "high"
    language: str = "en"
    output_name: str = "export.mp4"
    validate_edl: bool = True
    # Write edit-list.otio next to the video
    timeline: bool = True
    frame_rate: int = Field(default=30, gt=0)
    whisper_model: str = "base"


class Settings(BaseModel):
    """All configuration sections."""

    version: str = "1.0"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    drafts: DraftConfig = Field(default_factory=DraftConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


def load_settings(path: Path | str) -> Settings:
    """Load settings from YAML; a missing file yields defaults."""
    path = Path(path)
    if not path.exists():
        return Settings()
    return Settings(**read_yaml(path))


def write_settings(path: Path | str, settings: Settings) -> None:
    write_yaml(path, settings.model_dump(mode="json"))
