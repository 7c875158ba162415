"""Tests for draft metadata storage."""

from __future__ import annotations

import asyncio
import json

from draftreel.drafts import storage as storage_module
from draftreel.drafts.storage import REDO_STACK_KEY, DraftStorage, drafts_key
from draftreel.models.draft import RedoEntry
from draftreel.models.segment import RecordingSegment


def _managed(files, draft_id: str, seg_id: str) -> RecordingSegment:
    path = files.segments_dir(draft_id) / f"{seg_id}.mp4"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\x00")
    return RecordingSegment(id=seg_id, duration_seconds=1.0, media_ref=files.to_ref(path))


def test_save_and_get_draft(storage: DraftStorage, files):
    seg = _managed(files, "d1", "a")

    async def scenario():
        draft_id = await storage.save_draft([seg], 60, "camera", preferred_id="d1")
        return draft_id, await storage.get_draft("d1", "camera")

    draft_id, draft = asyncio.run(scenario())

    assert draft_id == "d1"
    assert draft.segments == [seg]
    assert draft.thumbnail_ref == seg.media_ref
    assert draft.total_duration_budget == 60


def test_modes_are_separate(storage: DraftStorage, blobs):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")

    async def scenario():
        await storage.save_draft([seg], 60, "upload", preferred_id="u1")
        return await storage.get_all_drafts("camera"), await storage.get_all_drafts("upload")

    camera, upload = asyncio.run(scenario())

    assert camera == []
    assert [d.id for d in upload] == ["u1"]
    assert drafts_key("upload") in blobs.data


def test_last_modified_draft(storage: DraftStorage):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")

    async def scenario():
        await storage.save_draft([seg], 60, "camera", preferred_id="old")
        await storage.save_draft([seg], 60, "camera", preferred_id="new")
        await storage.update_draft("old", [seg, seg.model_copy(update={"id": "b"})], 60, "camera")
        return await storage.get_last_modified_draft("camera")

    assert asyncio.run(scenario()).id == "old"


def test_update_keeps_created_at_and_creates_missing(storage: DraftStorage):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")

    async def scenario():
        await storage.save_draft([seg], 60, "camera", preferred_id="d1")
        before = await storage.get_draft("d1", "camera")
        await storage.update_draft("d1", [], 30, "camera")
        await storage.update_draft("d2", [seg], 60, "camera")
        return before, await storage.get_draft("d1", "camera"), await storage.get_draft("d2", "camera")

    before, after, created = asyncio.run(scenario())

    assert after.created_at == before.created_at
    assert after.segments == []
    assert after.thumbnail_ref is None
    assert after.total_duration_budget == 30
    assert created is not None


def test_delete_metadata_only_keeps_files(storage: DraftStorage, files):
    seg = _managed(files, "d1", "a")

    async def scenario():
        await storage.save_draft([seg], 60, "camera", preferred_id="d1")
        await storage.delete_metadata_only("d1", "camera")
        return await storage.get_draft("d1", "camera")

    assert asyncio.run(scenario()) is None
    assert files.resolve(seg.media_ref).exists()


def test_delete_files_and_metadata(storage: DraftStorage, files):
    seg = _managed(files, "d1", "a")

    async def scenario():
        await storage.save_draft([seg], 60, "camera", preferred_id="d1")
        await storage.delete_files_and_metadata("d1", "camera")
        return await storage.get_draft("d1", "camera")

    assert asyncio.run(scenario()) is None
    assert not files.draft_dir("d1").exists()


def test_prune_missing_segments(storage: DraftStorage, files):
    a = _managed(files, "d1", "a")
    b = _managed(files, "d1", "b")
    files.resolve(a.media_ref).unlink()

    async def scenario():
        await storage.save_draft([a, b], 60, "camera", preferred_id="d1")
        pruned = await storage.load_validated_draft("d1", "camera")
        return pruned, await storage.get_draft("d1", "camera")

    pruned, stored = asyncio.run(scenario())

    assert [s.id for s in pruned.segments] == ["b"]
    assert [s.id for s in stored.segments] == ["b"]
    assert stored.thumbnail_ref == b.media_ref


def test_prune_everything_missing_deletes_metadata(storage: DraftStorage):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="drafts/d1/segments/a.mp4")

    async def scenario():
        await storage.save_draft([seg], 60, "camera", preferred_id="d1")
        pruned = await storage.load_validated_draft("d1", "camera")
        return pruned, await storage.get_all_drafts("camera")

    assert asyncio.run(scenario()) == (None, [])


def test_corrupt_metadata_reads_as_empty(storage: DraftStorage, blobs):
    blobs.data[drafts_key("camera")] = "{not json"
    blobs.data[REDO_STACK_KEY] = "[{"

    async def scenario():
        return await storage.get_all_drafts("camera"), await storage.get_redo_entry()

    assert asyncio.run(scenario()) == ([], None)


def test_redo_entry_accepts_bare_list(storage: DraftStorage, blobs):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")
    blobs.data[REDO_STACK_KEY] = json.dumps([seg.model_dump(mode="json")])

    entry = asyncio.run(storage.get_redo_entry())

    assert entry.segments == [seg]
    assert entry.draft_id is None
    assert entry.mode == "camera"


def test_redo_entry_save_and_clear(storage: DraftStorage):
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")

    async def scenario():
        await storage.save_redo_entry(RedoEntry(draft_id="d1", mode="upload", segments=[seg]))
        saved = await storage.get_redo_entry()
        await storage.clear_redo_entry()
        return saved, await storage.get_redo_entry()

    saved, cleared = asyncio.run(scenario())

    assert saved.draft_id == "d1"
    assert saved.mode == "upload"
    assert cleared is None


def test_minted_ids_skip_taken_ones(storage: DraftStorage, monkeypatch):
    monkeypatch.setattr(storage_module.time, "time_ns", lambda: 1_700_000_000_000 * 1_000_000)
    seg = RecordingSegment(id="a", duration_seconds=1.0, media_ref="x.mp4")

    async def scenario():
        await storage.save_draft([seg], 60, "upload", preferred_id="1700000000000")
        await storage.save_redo_entry(RedoEntry(draft_id="1700000000001", segments=[seg]))
        return await storage.mint_draft_id()

    assert asyncio.run(scenario()) == "1700000000002"
