"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from draftreel.drafts.blob_store import MemoryBlobStore
from draftreel.drafts.file_store import LocalFileStore
from draftreel.drafts.session import DraftSession
from draftreel.drafts.storage import DraftStorage
from draftreel.models.segment import RecordingSegment
from draftreel.models.transcript import TranscriptSegment, TranscriptWord, VideoTranscript


class RecordingBlobStore(MemoryBlobStore):
    """Memory store that logs writes and can be told to fail them."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[str] = []
        self.fail = False

    async def set(self, key: str, value: str) -> None:
        if self.fail:
            raise OSError("disk full")
        self.writes.append(key)
        await super().set(key, value)


@pytest.fixture(name="blobs")
def blobs_fixture() -> RecordingBlobStore:
    return RecordingBlobStore()


@pytest.fixture(name="files")
def files_fixture(tmp_path: Path) -> LocalFileStore:
    return LocalFileStore(tmp_path / "media")


@pytest.fixture(name="storage")
def storage_fixture(blobs: RecordingBlobStore, files: LocalFileStore) -> DraftStorage:
    return DraftStorage(blobs, files)


@pytest.fixture(name="make_session")
def make_session_fixture(storage: DraftStorage, files: LocalFileStore):
    """Build sessions sharing one storage backend."""

    def _make(**kwargs) -> DraftSession:
        return DraftSession(storage, files, **kwargs)

    return _make


@pytest.fixture(name="make_clip")
def make_clip_fixture(tmp_path: Path):
    """Write a fake camera recording and return an unimported segment for it."""
    camera_dir = tmp_path / "camera"

    def _make(name: str, duration: float = 2.0, **kwargs) -> RecordingSegment:
        camera_dir.mkdir(exist_ok=True)
        source = camera_dir / f"{name}.mp4"
        source.write_bytes(b"\x00\x00\x00\x18ftypmp42")
        return RecordingSegment(
            id=name,
            duration_seconds=duration,
            media_ref=str(source),
            **kwargs,
        )

    return _make


@pytest.fixture(name="transcript")
def transcript_fixture() -> VideoTranscript:
    return VideoTranscript(
        id="1",
        video_id="test-video",
        language="en",
        duration_ms=5000,
        model="whisper-base",
        segments=[
            TranscriptSegment(
                id="1",
                start_ms=0,
                end_ms=2000,
                text="Hello world",
                confidence=0.95,
                words=[
                    TranscriptWord(text="Hello", start_ms=0, end_ms=1000, confidence=0.95),
                    TranscriptWord(text="world", start_ms=1000, end_ms=2000, confidence=0.95),
                ],
            ),
            TranscriptSegment(
                id="2",
                start_ms=3500,
                end_ms=5000,
                text="Testing transcription",
                confidence=0.90,
                words=[
                    TranscriptWord(text="Testing", start_ms=3500, end_ms=4200, confidence=0.90),
                    TranscriptWord(text="transcription", start_ms=4200, end_ms=5000, confidence=0.90),
                ],
            ),
        ],
    )
