"""FFmpeg command builder and runner."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path

# Constant rate factor per export quality (lower is better)
QUALITY_CRF = {
    "low": 32,
    "medium": 26,
    "high": 20,
}


class FFmpegError(Exception):
    """Raised when an FFmpeg command fails."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"FFmpeg failed (rc={returncode}): {stderr[:500]}")


def run_ffmpeg(args: list[str], *, check: bool = True) -> subprocess.CompletedProcess:
    """Run an FFmpeg command with standard options."""
    cmd = ["ffmpeg", "-y", "-hide_banner", "-loglevel", "error"] + args
    result = subprocess.run(cmd, capture_output=True, text=True)
    if check and result.returncode != 0:
        raise FFmpegError(cmd, result.returncode, result.stderr)
    return result


def concat_list(inputs: list[Path | str]) -> str:
    """Build a concat demuxer list file body."""
    lines = []
    for path in inputs:
        escaped = str(Path(path).resolve()).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    return "\n".join(lines) + "\n"


def concat_videos(
    inputs: list[Path | str],
    output_path: Path | str,
    *,
    quality: str = "high",
) -> None:
    """Concatenate video files in order, re-encoding to H.264/AAC."""
    crf = QUALITY_CRF.get(quality, QUALITY_CRF["high"])
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".txt", dir=output_path.parent, delete=False
    ) as list_file:
        list_file.write(concat_list(inputs))
        list_path = Path(list_file.name)

    try:
        run_ffmpeg([
            "-f", "concat",
            "-safe", "0",
            "-i", str(list_path),
            "-c:v", "libx264",
            "-crf", str(crf),
            "-preset", "veryfast",
            "-c:a", "aac",
            "-movflags", "+faststart",
            str(output_path),
        ])
    finally:
        list_path.unlink(missing_ok=True)
