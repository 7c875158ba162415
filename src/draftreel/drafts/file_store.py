"""Managed media storage, laid out per draft."""

from __future__ import annotations

import asyncio
import os
import re
import shutil
import time
from pathlib import Path
from typing import Iterable, Protocol

from draftreel.utils.progress import log_step, log_warning
from draftreel.utils.retry import retry_io

DEFAULT_EXTENSION = "mp4"


class FileStore(Protocol):
    """Async file operations the draft lifecycle relies on."""

    async def ensure_dirs(self, draft_id: str) -> None: ...
    async def import_media(self, draft_id: str, source_ref: str, name: str) -> str: ...
    async def delete_refs(self, refs: Iterable[str]) -> None: ...
    async def delete_draft_directory(self, draft_id: str) -> None: ...
    async def file_exists(self, ref: str) -> bool: ...
    async def copy_into_draft(self, draft_id: str, ref: str, name: str) -> str: ...


def extension_of(source: str) -> str:
    """File extension of a path or URI, ignoring any query string."""
    suffix = Path(source.split("?")[0]).suffix.lstrip(".").lower()
    if suffix and re.fullmatch(r"[a-z0-9]+", suffix):
        return suffix
    return DEFAULT_EXTENSION


class LocalFileStore:
    """File store rooted at a local directory.

    Layout::

        <root>/drafts/<draft_id>/segments/<segment_id>.<ext>

    Refs handed out are paths relative to the root, so metadata stays
    valid if the root moves.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def draft_dir(self, draft_id: str) -> Path:
        return self.root / "drafts" / draft_id

    def segments_dir(self, draft_id: str) -> Path:
        return self.draft_dir(draft_id) / "segments"

    def resolve(self, ref: str) -> Path:
        """Absolute path for a ref."""
        path = Path(ref)
        return path if path.is_absolute() else self.root / path

    def to_ref(self, path: Path) -> str:
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return str(path)

    async def ensure_dirs(self, draft_id: str) -> None:
        await asyncio.to_thread(self._ensure_dirs, draft_id)

    def _ensure_dirs(self, draft_id: str) -> None:
        self.segments_dir(draft_id).mkdir(parents=True, exist_ok=True)

    @retry_io()
    async def import_media(self, draft_id: str, source_ref: str, name: str) -> str:
        """Move a recording into the draft's segment directory."""
        return await asyncio.to_thread(self._import_media, draft_id, source_ref, name)

    def _import_media(self, draft_id: str, source_ref: str, name: str) -> str:
        source = Path(source_ref)
        if not source.exists():
            raise FileNotFoundError(f"Media not found: {source}")

        ext = extension_of(source_ref)
        target_dir = self.segments_dir(draft_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        destination = target_dir / f"{name}.{ext}"
        if destination.exists():
            destination = target_dir / f"{name}_{time.time_ns() // 1_000_000}.{ext}"

        try:
            os.replace(source, destination)
        except OSError:
            # Cross-device: copy, then drop the source if we can
            shutil.copy2(source, destination)
            try:
                source.unlink(missing_ok=True)
            except OSError as e:
                log_warning(f"Could not remove imported source {source}: {e}")

        log_step("FileStore", f"Imported segment: {name}")
        return self.to_ref(destination)

    async def delete_refs(self, refs: Iterable[str]) -> None:
        """Delete files by ref. Already-absent files are skipped."""
        await asyncio.to_thread(self._delete_refs, list(refs))

    def _delete_refs(self, refs: list[str]) -> None:
        for ref in refs:
            try:
                self.resolve(ref).unlink(missing_ok=True)
            except OSError as e:
                log_warning(f"Could not delete {ref}: {e}")

    async def delete_draft_directory(self, draft_id: str) -> None:
        directory = self.draft_dir(draft_id)
        if directory.exists():
            log_step("FileStore", f"Deleting draft: {draft_id}")
            await asyncio.to_thread(shutil.rmtree, directory, ignore_errors=True)

    async def file_exists(self, ref: str) -> bool:
        return self.resolve(ref).is_file()

    @retry_io()
    async def copy_into_draft(self, draft_id: str, ref: str, name: str) -> str:
        """Copy a managed file into another draft's segment directory.

        Refs already inside that directory are returned unchanged.
        """
        return await asyncio.to_thread(self._copy_into_draft, draft_id, ref, name)

    def _copy_into_draft(self, draft_id: str, ref: str, name: str) -> str:
        source = self.resolve(ref)
        target_dir = self.segments_dir(draft_id)
        if source.parent == target_dir:
            return ref
        if not source.exists():
            raise FileNotFoundError(f"Media not found: {source}")

        target_dir.mkdir(parents=True, exist_ok=True)
        destination = target_dir / f"{name}{source.suffix}"
        if destination.exists():
            destination = target_dir / f"{name}_{time.time_ns() // 1_000_000}{source.suffix}"
        shutil.copy2(source, destination)
        return self.to_ref(destination)
