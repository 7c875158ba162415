"""Tests for I/O, retry and ffprobe helpers."""

from __future__ import annotations

import json
import subprocess

import pytest

from draftreel.models.edl import EditDecisionList
from draftreel.utils import ffprobe
from draftreel.utils.ffprobe import probe_media
from draftreel.utils.io import read_json, read_yaml, write_atomic, write_json, write_yaml
from draftreel.utils.retry import retry_io


def test_write_atomic_replaces_and_leaves_no_temp_files(tmp_path):
    path = tmp_path / "nested" / "drafts_camera.json"

    write_atomic(path, "[]")
    write_atomic(path, '[{"id": "1"}]')

    assert path.read_text() == '[{"id": "1"}]'
    assert [p.name for p in path.parent.iterdir()] == ["drafts_camera.json"]


def test_write_json_dumps_models(tmp_path):
    path = tmp_path / "edl.json"

    write_json(path, EditDecisionList(video_id="v1", new_duration_ms=1200))

    assert read_json(path)["video_id"] == "v1"
    assert read_json(path)["new_duration_ms"] == 1200


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "draftreel.yaml"

    write_yaml(path, {"drafts": {"mode": "upload"}})

    assert read_yaml(path)["drafts"]["mode"] == "upload"


def test_retry_io_retries_transient_errors():
    attempts: list[int] = []

    @retry_io(max_attempts=3)
    def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise OSError("resource busy")
        return "ok"

    assert flaky() == "ok"
    assert len(attempts) == 3


def test_retry_io_does_not_retry_missing_files():
    attempts: list[int] = []

    @retry_io()
    def missing() -> None:
        attempts.append(1)
        raise FileNotFoundError("gone")

    with pytest.raises(FileNotFoundError):
        missing()
    assert len(attempts) == 1


def test_probe_media(tmp_path, monkeypatch):
    media = tmp_path / "take.mov"
    media.write_bytes(b"\x00")
    payload = {
        "format": {"format_name": "mov,mp4,m4a"},
        "streams": [
            {"codec_type": "video", "duration": "4.200000"},
            {"codec_type": "audio", "duration": "4.180000"},
        ],
    }

    def fake_run(cmd, **kwargs):
        assert cmd[0] == "ffprobe"
        return subprocess.CompletedProcess(cmd, 0, stdout=json.dumps(payload), stderr="")

    monkeypatch.setattr(ffprobe.subprocess, "run", fake_run)

    info = probe_media(media)

    assert info.duration_seconds == 4.2
    assert info.has_video and info.has_audio
    assert info.format_name == "mov,mp4,m4a"


def test_probe_media_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        probe_media(tmp_path / "nope.mp4")
