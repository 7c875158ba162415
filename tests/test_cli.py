"""End-to-end tests for the draftreel CLI."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from draftreel.cli.main import cli
from draftreel.models.transcript import TranscriptSegment, TranscriptWord, VideoTranscript


@pytest.fixture(name="workspace")
def workspace_fixture(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["init", "-o", str(tmp_path)])
    assert result.exit_code == 0, result.output
    return tmp_path


def _invoke(workspace, *args):
    return CliRunner().invoke(cli, [*args, "-c", str(workspace / "draftreel.yaml")])


def _clip(workspace, name: str):
    path = workspace / f"{name}.mp4"
    path.write_bytes(b"\x00")
    return str(path)


def test_init_refuses_to_overwrite(workspace):
    result = CliRunner().invoke(cli, ["init", "-o", str(workspace)])

    assert result.exit_code == 1
    assert (workspace / ".draftreel" / "media").is_dir()


def test_record_undo_redo(workspace):
    clip = _clip(workspace, "take1")

    result = _invoke(workspace, "record", clip, "--duration", "2")
    assert result.exit_code == 0, result.output
    assert "1 segment(s), 2.0s, 0 to redo" in result.output
    assert not (workspace / "take1.mp4").exists()

    result = _invoke(workspace, "undo")
    assert result.exit_code == 0, result.output
    assert "0 segment(s)" in result.output

    result = _invoke(workspace, "redo")
    assert result.exit_code == 0, result.output
    assert "1 segment(s), 2.0s, 0 to redo" in result.output

    result = _invoke(workspace, "redo")
    assert result.exit_code == 1
    assert "Nothing to redo" in result.output


def test_status_lists_pending_redo(workspace):
    _invoke(workspace, "record", _clip(workspace, "take1"), "--duration", "1")
    _invoke(workspace, "record", _clip(workspace, "take2"), "--duration", "1")
    _invoke(workspace, "undo")

    result = _invoke(workspace, "status")

    assert result.exit_code == 0, result.output
    assert "Redo pending: 1 segment(s)" in result.output


def test_edl_and_retime(workspace):
    _invoke(workspace, "record", _clip(workspace, "take1"), "--duration", "3")
    _invoke(workspace, "record", _clip(workspace, "take2"), "--duration", "2", "--trim-in", "500", "--trim-out", "1500")

    edl_path = workspace / "edit-list.json"
    result = _invoke(workspace, "edl", "-o", str(edl_path))
    assert result.exit_code == 0, result.output
    edl = json.loads(edl_path.read_text())
    assert edl["new_duration_ms"] == 4000

    transcript = VideoTranscript(
        id="t1",
        video_id="v",
        duration_ms=5000,
        segments=[TranscriptSegment(
            id="s1",
            start_ms=0,
            end_ms=1000,
            text="hello",
            words=[TranscriptWord(text="hello", start_ms=0, end_ms=1000)],
        )],
    )
    transcript_path = workspace / "transcript.json"
    transcript_path.write_text(transcript.model_dump_json())

    result = _invoke(workspace, "retime", str(transcript_path))
    assert result.exit_code == 0, result.output
    retimed = json.loads((workspace / "transcript.retimed.json").read_text())
    assert retimed["id"] == "t1_retimed"
    assert retimed["duration_ms"] == 4000


def test_start_over_discards_draft(workspace):
    _invoke(workspace, "record", _clip(workspace, "take1"), "--duration", "1")

    result = _invoke(workspace, "start-over")
    assert result.exit_code == 0, result.output

    result = _invoke(workspace, "status")
    assert "No camera drafts." in result.output

    assert _invoke(workspace, "start-over").exit_code == 1
    assert _invoke(workspace, "undo").exit_code == 1


def test_quiet_hides_step_logs(workspace):
    config = str(workspace / "draftreel.yaml")
    clip = _clip(workspace, "take1")

    result = CliRunner().invoke(cli, ["-q", "record", clip, "--duration", "1", "-c", config])

    assert result.exit_code == 0, result.output
    assert "Imported segment" not in result.output
    assert "1 segment(s)" in result.output


def test_edl_with_timeline(workspace):
    _invoke(workspace, "record", _clip(workspace, "take1"), "--duration", "2")
    timeline = workspace / "cut.otio"

    result = _invoke(workspace, "edl", "-o", str(workspace / "edl.json"), "--timeline", str(timeline))

    assert result.exit_code == 0, result.output
    assert timeline.exists()

    result = _invoke(workspace, "edl", "-o", str(workspace / "edl.json"), "--timeline", str(workspace / "cut.xml"))
    assert result.exit_code == 1
