"""Key-value blob stores for draft metadata."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Protocol

from draftreel.utils.io import write_atomic
from draftreel.utils.retry import retry_io


class BlobStore(Protocol):
    """Async string store. Last write wins, no transactions."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def remove(self, key: str) -> None: ...


class MemoryBlobStore:
    """Blob store held in a dict, for tests and throwaway sessions."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileBlobStore:
    """One file per key under a directory, written atomically."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    async def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_text)

    @retry_io()
    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(write_atomic, self.path_for(key), value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)
