"""Tests for the faster-whisper transcriber, with the model faked out."""

from __future__ import annotations

import asyncio
import sys
import types
from dataclasses import dataclass, field

import pytest

from draftreel.export.transcribe import WhisperTranscriber


@dataclass
class FakeWord:
    word: str
    start: float
    end: float
    probability: float


@dataclass
class FakeSegment:
    start: float
    end: float
    text: str
    words: list[FakeWord] = field(default_factory=list)


class FakeWhisperModel:
    loads = 0

    def __init__(self, model_size, device, compute_type):
        FakeWhisperModel.loads += 1
        self.model_size = model_size
        self.compute_type = compute_type

    def transcribe(self, path, **kwargs):
        segments = [
            FakeSegment(0.0, 1.0, " Hello world", [
                FakeWord(" Hello", 0.0, 0.5, 0.9),
                FakeWord(" world", 0.5, 1.0, 0.7),
            ]),
            FakeSegment(1.2, 1.5, " um", []),
        ]
        return iter(segments), types.SimpleNamespace(language="en", duration=1.5)


def test_transcribe_converts_to_milliseconds(tmp_path, monkeypatch):
    FakeWhisperModel.loads = 0
    monkeypatch.setitem(sys.modules, "faster_whisper", types.SimpleNamespace(WhisperModel=FakeWhisperModel))
    transcriber = WhisperTranscriber("tiny")

    async def scenario():
        first = await transcriber.transcribe(str(tmp_path / "export.mp4"), "en")
        await transcriber.transcribe(str(tmp_path / "export.mp4"), "en")
        return first

    transcript = asyncio.run(scenario())

    assert FakeWhisperModel.loads == 1
    assert transcript.id == "export"
    assert transcript.model == "faster-whisper-tiny"
    assert transcript.duration_ms == 1500
    assert transcript.word_count == 2

    first = transcript.segments[0]
    assert first.text == "Hello world"
    assert [(w.text, w.start_ms, w.end_ms) for w in first.words] == [
        ("Hello", 0, 500),
        ("world", 500, 1000),
    ]
    assert first.confidence == pytest.approx(0.8)
    assert transcript.segments[1].confidence == 0.0
