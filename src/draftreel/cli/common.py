"""Shared CLI plumbing: config option and workspace wiring."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click

from draftreel.drafts.blob_store import JsonFileBlobStore
from draftreel.drafts.file_store import LocalFileStore
from draftreel.drafts.session import DraftSession
from draftreel.drafts.storage import DraftStorage
from draftreel.models.config import CONFIG_FILENAME, Settings, load_settings
from draftreel.models.draft import Draft

config_option = click.option(
    "--config", "-c", "config_path",
    default=CONFIG_FILENAME,
    type=click.Path(dir_okay=False),
    help="Path to draftreel.yaml",
)

draft_option = click.option(
    "--draft", "-d", "draft_id",
    default=None,
    help="Draft id (defaults to the most recently modified camera draft)",
)


@dataclass
class Workspace:
    """Storage wired up from a config file."""

    base: Path
    settings: Settings
    storage: DraftStorage
    files: LocalFileStore

    def session(self, draft_id: str | None = None) -> DraftSession:
        drafts = self.settings.drafts
        return DraftSession(
            self.storage,
            self.files,
            mode=drafts.mode,
            draft_id=draft_id,
            duration_budget=drafts.default_duration_budget,
            autosave_delay_ms=drafts.autosave_delay_ms,
        )

    async def find_draft(self, draft_id: str | None) -> Draft | None:
        mode = self.settings.drafts.mode
        if draft_id:
            return await self.storage.load_validated_draft(draft_id, mode)
        draft = await self.storage.get_last_modified_draft(mode)
        if draft is None:
            return None
        return await self.storage.prune_missing_segments(draft)


def open_workspace(config_path: str) -> Workspace:
    path = Path(config_path).resolve()
    settings = load_settings(path)
    base = path.parent
    files = LocalFileStore(settings.storage.media_path(base))
    blobs = JsonFileBlobStore(settings.storage.metadata_path(base))
    return Workspace(
        base=base,
        settings=settings,
        storage=DraftStorage(blobs, files),
        files=files,
    )
