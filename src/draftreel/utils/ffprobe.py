"""FFprobe wrapper for media file metadata extraction."""

from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path


@dataclass
class MediaInfo:
    """Media file metadata extracted via FFprobe."""

    path: str
    duration_seconds: float
    has_video: bool
    has_audio: bool
    format_name: str


def probe_media(path: Path | str) -> MediaInfo:
    """Probe a media file with FFprobe and return metadata."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Media file not found: {path}")

    result = subprocess.run(
        [
            "ffprobe",
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(path),
        ],
        capture_output=True,
        text=True,
        check=True,
    )

    data = json.loads(result.stdout)
    streams = data.get("streams", [])
    fmt = data.get("format", {})

    duration = fmt.get("duration")
    if duration is None:
        durations = [float(s["duration"]) for s in streams if s.get("duration")]
        duration = max(durations) if durations else 0

    return MediaInfo(
        path=str(path),
        duration_seconds=float(duration),
        has_video=any(s.get("codec_type") == "video" for s in streams),
        has_audio=any(s.get("codec_type") == "audio" for s in streams),
        format_name=fmt.get("format_name", ""),
    )
