"""Whisper transcription of an exported video — faster-whisper CPU mode."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

from draftreel.models.transcript import TranscriptSegment, TranscriptWord, VideoTranscript
from draftreel.utils.progress import log_step


class WhisperTranscriber:
    """``Transcriber`` backed by faster-whisper.

    The model is loaded on first use and reused for later calls.
    """

    def __init__(
        self,
        model_size: str = "base",
        *,
        device: str = "cpu",
        vad_enabled: bool = True,
    ) -> None:
        self.model_size = model_size
        self.device = device
        self.vad_enabled = vad_enabled
        self._model = None

    def _load_model(self):
        if self._model is None:
            try:
                from faster_whisper import WhisperModel
            except ImportError:
                raise ImportError(
                    "faster-whisper is required for transcription. "
                    "Install with: pip install draftreel[transcribe]"
                )

            compute_type = "int8" if self.device == "cpu" else "float16"
            log_step("Transcribe", f"Loading model: {self.model_size} ({self.device}, {compute_type})")
            self._model = WhisperModel(self.model_size, device=self.device, compute_type=compute_type)
        return self._model

    async def transcribe(self, audio_ref: str, language: str) -> VideoTranscript:
        return await asyncio.to_thread(self._transcribe, audio_ref, language)

    def _transcribe(self, audio_ref: str, language: str) -> VideoTranscript:
        model = self._load_model()
        path = Path(audio_ref)
        log_step("Transcribe", f"Transcribing {path.name}...")
        started = time.time()

        segments_gen, info = model.transcribe(
            str(path),
            beam_size=5,
            word_timestamps=True,
            vad_filter=self.vad_enabled,
            language=language or None,
        )

        segments: list[TranscriptSegment] = []
        for index, seg in enumerate(segments_gen, start=1):
            words = [
                TranscriptWord(
                    text=w.word.strip(),
                    start_ms=w.start * 1000,
                    end_ms=w.end * 1000,
                    confidence=w.probability,
                )
                for w in (seg.words or [])
            ]
            confidence = sum(w.confidence for w in words) / len(words) if words else 0.0
            segments.append(TranscriptSegment(
                id=str(index),
                words=words,
                start_ms=seg.start * 1000,
                end_ms=seg.end * 1000,
                text=seg.text.strip(),
                confidence=confidence,
            ))

        transcript = VideoTranscript(
            id=path.stem,
            video_id=path.stem,
            segments=segments,
            language=getattr(info, "language", None) or language,
            duration_ms=getattr(info, "duration", 0.0) * 1000,
            model=f"faster-whisper-{self.model_size}",
        )
        log_step(
            "Transcribe",
            f"{len(segments)} segments, {transcript.word_count} words "
            f"in {time.time() - started:.1f}s",
        )
        return transcript
