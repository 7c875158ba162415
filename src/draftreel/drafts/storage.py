"""Draft metadata storage on top of a blob store.

Drafts are kept as one JSON list per mode, so camera and upload drafts never
see each other. Media files belong to the file store; this layer only knows
their refs, and deleting a draft comes in two explicit flavours:
``delete_metadata_only`` (files stay for a pending redo) and
``delete_files_and_metadata``.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import get_args

from draftreel.drafts.blob_store import BlobStore
from draftreel.drafts.file_store import FileStore
from draftreel.models.draft import Draft, DraftMode, RedoEntry
from draftreel.models.segment import RecordingSegment
from draftreel.utils.progress import log_error, log_step, log_warning

DRAFTS_KEY_PREFIX = "drafts"
REDO_STACK_KEY = "redo_stack"
ALL_MODES: tuple[str, ...] = get_args(DraftMode)


def drafts_key(mode: DraftMode) -> str:
    return f"{DRAFTS_KEY_PREFIX}:{mode}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DraftStorage:
    """Create, read, update and delete drafts for each mode."""

    def __init__(self, blobs: BlobStore, files: FileStore) -> None:
        self.blobs = blobs
        self.files = files

    async def get_all_drafts(self, mode: DraftMode) -> list[Draft]:
        raw = await self.blobs.get(drafts_key(mode))
        if not raw:
            return []
        try:
            return [Draft.model_validate(d) for d in json.loads(raw)]
        except ValueError as e:
            log_error(f"Error reading {mode} drafts: {e}")
            return []

    async def _write_all(self, mode: DraftMode, drafts: list[Draft]) -> None:
        payload = json.dumps([d.model_dump(mode="json") for d in drafts])
        await self.blobs.set(drafts_key(mode), payload)

    async def get_draft(self, draft_id: str, mode: DraftMode) -> Draft | None:
        for draft in await self.get_all_drafts(mode):
            if draft.id == draft_id:
                return draft
        return None

    async def get_last_modified_draft(self, mode: DraftMode) -> Draft | None:
        drafts = await self.get_all_drafts(mode)
        if not drafts:
            return None
        return max(drafts, key=lambda d: d.last_modified)

    async def mint_draft_id(self) -> str:
        """Timestamp-derived id not used by any draft or pending redo entry."""
        taken: set[str] = set()
        for mode in ALL_MODES:
            taken.update(d.id for d in await self.get_all_drafts(mode))
        redo = await self.get_redo_entry()
        if redo is not None and redo.draft_id:
            taken.add(redo.draft_id)

        candidate = time.time_ns() // 1_000_000
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    async def save_draft(
        self,
        segments: list[RecordingSegment],
        total_duration_budget: float,
        mode: DraftMode,
        preferred_id: str | None = None,
    ) -> str:
        """Save segments as a new draft and return its id.

        A preferred id that already exists is replaced, keeping its
        creation time.
        """
        draft_id = preferred_id or await self.mint_draft_id()
        drafts = await self.get_all_drafts(mode)
        existing = next((d for d in drafts if d.id == draft_id), None)
        now = _now()

        draft = Draft(
            id=draft_id,
            mode=mode,
            segments=list(segments),
            total_duration_budget=total_duration_budget,
            created_at=existing.created_at if existing else now,
            last_modified=now,
            thumbnail_ref=segments[0].media_ref if segments else None,
        )
        drafts = [d for d in drafts if d.id != draft_id] + [draft]
        await self._write_all(mode, drafts)

        log_step("Draft", f"Saved draft {draft_id} ({len(segments)} segments)")
        return draft_id

    async def update_draft(
        self,
        draft_id: str,
        segments: list[RecordingSegment],
        total_duration_budget: float,
        mode: DraftMode,
    ) -> None:
        """Replace a draft's segments, creating the draft if it is gone."""
        drafts = await self.get_all_drafts(mode)
        now = _now()
        updated: list[Draft] = []
        found = False

        for draft in drafts:
            if draft.id == draft_id:
                found = True
                draft = draft.model_copy(update={
                    "segments": list(segments),
                    "total_duration_budget": total_duration_budget,
                    "last_modified": now,
                    "thumbnail_ref": segments[0].media_ref if segments else None,
                })
            updated.append(draft)

        if not found:
            updated.append(Draft(
                id=draft_id,
                mode=mode,
                segments=list(segments),
                total_duration_budget=total_duration_budget,
                created_at=now,
                last_modified=now,
                thumbnail_ref=segments[0].media_ref if segments else None,
            ))

        await self._write_all(mode, updated)

    async def delete_metadata_only(self, draft_id: str, mode: DraftMode) -> None:
        """Forget the draft but leave its files on disk."""
        drafts = await self.get_all_drafts(mode)
        await self._write_all(mode, [d for d in drafts if d.id != draft_id])
        log_step("Draft", f"Deleted metadata for draft {draft_id}")

    async def delete_files_and_metadata(self, draft_id: str, mode: DraftMode) -> None:
        await self.delete_metadata_only(draft_id, mode)
        await self.files.delete_draft_directory(draft_id)

    async def prune_missing_segments(self, draft: Draft) -> Draft | None:
        """Drop segments whose media is gone.

        Rewrites the stored draft when anything was pruned, and deletes its
        metadata when nothing is left. Returns the surviving draft or None.
        """
        kept = [s for s in draft.segments if await self.files.file_exists(s.media_ref)]
        if len(kept) == len(draft.segments):
            return draft

        missing = len(draft.segments) - len(kept)
        log_warning(f"Draft {draft.id}: {missing} segment file(s) missing, pruned")

        if not kept:
            await self.delete_metadata_only(draft.id, draft.mode)
            return None

        await self.update_draft(draft.id, kept, draft.total_duration_budget, draft.mode)
        return draft.model_copy(update={
            "segments": kept,
            "thumbnail_ref": kept[0].media_ref,
        })

    async def load_validated_draft(self, draft_id: str, mode: DraftMode) -> Draft | None:
        draft = await self.get_draft(draft_id, mode)
        if draft is None:
            return None
        return await self.prune_missing_segments(draft)

    # Redo stack: a single pending entry, process-wide.

    async def get_redo_entry(self) -> RedoEntry | None:
        raw = await self.blobs.get(REDO_STACK_KEY)
        if not raw:
            return None
        try:
            return RedoEntry.from_payload(json.loads(raw))
        except ValueError as e:
            log_error(f"Error reading redo stack: {e}")
            return None

    async def save_redo_entry(self, entry: RedoEntry) -> None:
        await self.blobs.set(REDO_STACK_KEY, entry.model_dump_json())

    async def clear_redo_entry(self) -> None:
        await self.blobs.remove(REDO_STACK_KEY)
