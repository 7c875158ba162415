"""draftreel record / undo / redo / start-over — drive a draft session."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from draftreel.cli.common import config_option, draft_option, open_workspace
from draftreel.drafts.session import DraftSession
from draftreel.models.segment import RecordingSegment
from draftreel.utils.ffprobe import probe_media
from draftreel.utils.progress import log_error, log_success, log_warning


def _report(session: DraftSession) -> None:
    draft = session.current_draft_id or "none"
    click.echo(
        f"Draft {draft}: {len(session.segments)} segment(s), "
        f"{session.kept_duration_seconds:.1f}s, {len(session.redo_stack)} to redo"
    )


@click.command()
@click.argument("media", type=click.Path(exists=True, dir_okay=False))
@config_option
@draft_option
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Clip duration in seconds (probed with ffprobe when omitted)",
)
@click.option("--trim-in", type=float, default=None, help="Trim in point (ms)")
@click.option("--trim-out", type=float, default=None, help="Trim out point (ms)")
def record_cmd(
    media: str,
    config_path: str,
    draft_id: str | None,
    duration: float | None,
    trim_in: float | None,
    trim_out: float | None,
) -> None:
    """Append a recorded clip to a draft.

    The file is moved into managed storage.
    """
    ws = open_workspace(config_path)
    if duration is None:
        duration = probe_media(media).duration_seconds

    segment = RecordingSegment(
        duration_seconds=duration,
        media_ref=str(Path(media).resolve()),
        trim_in_ms=trim_in,
        trim_out_ms=trim_out,
    )

    async def _run() -> tuple[bool, DraftSession]:
        session = ws.session(draft_id)
        await session.load()
        return await session.append_segment(segment), session

    ok, session = asyncio.run(_run())
    if not ok:
        log_error("Recording was not saved")
        raise SystemExit(1)
    log_success(f"Added segment {segment.id}")
    _report(session)


@click.command()
@config_option
@draft_option
def undo_cmd(config_path: str, draft_id: str | None) -> None:
    """Undo the last segment of a draft."""
    ws = open_workspace(config_path)

    async def _run() -> tuple[bool | None, DraftSession]:
        session = ws.session(draft_id)
        await session.load()
        if not session.can_undo:
            return None, session
        return await session.undo(), session

    ok, session = asyncio.run(_run())
    if ok is None:
        log_warning("Nothing to undo")
        raise SystemExit(1)
    if not ok:
        log_error("Undo failed")
        raise SystemExit(1)
    _report(session)


@click.command()
@config_option
@draft_option
def redo_cmd(config_path: str, draft_id: str | None) -> None:
    """Restore the most recently undone segment."""
    ws = open_workspace(config_path)

    async def _run() -> tuple[bool | None, DraftSession]:
        session = ws.session(draft_id)
        await session.load()
        if not session.can_redo:
            return None, session
        return await session.redo(), session

    ok, session = asyncio.run(_run())
    if ok is None:
        log_warning("Nothing to redo")
        raise SystemExit(1)
    if not ok:
        log_error("Redo failed")
        raise SystemExit(1)
    _report(session)


@click.command()
@config_option
@draft_option
def start_over_cmd(config_path: str, draft_id: str | None) -> None:
    """Discard a draft and everything recorded in it."""
    ws = open_workspace(config_path)

    async def _run() -> str | None:
        session = ws.session(draft_id)
        await session.load()
        discarded = session.original_draft_id
        session.start_over()
        await session.close()
        return discarded

    discarded = asyncio.run(_run())
    if discarded is None:
        log_error("No draft to discard")
        raise SystemExit(1)
    log_success(f"Discarded draft {discarded}")
