"""Document level state tracking for the CQL language server."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, Tuple


@dataclass
class Document:
    """An open text document; the text is always replaced wholesale."""

    uri: str
    text: str
    lines: List[str] = field(init=False)

    def __post_init__(self) -> None:
        self.lines = split_lines(self.text)

    def replace(self, text: str) -> None:
        self.text = text
        self.lines = split_lines(text)


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` keeping a trailing empty line, dropping ``\\r``."""
    return [line.rstrip("\r") for line in text.split("\n")]


class DocumentLock:
    """Shared-read / exclusive-write lock for a single document.

    Writers are preferred: once a writer is waiting, new readers queue behind
    it so a stream of completion requests cannot starve change notifications.
    """

    def __init__(self) -> None:
        self._condition = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._condition:
            await self._condition.wait_for(lambda: not self._writer and not self._waiting_writers)
            self._readers += 1
        try:
            yield
        finally:
            async with self._condition:
                self._readers -= 1
                if not self._readers:
                    self._condition.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._condition:
            self._waiting_writers += 1
            try:
                await self._condition.wait_for(lambda: not self._writer and not self._readers)
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            async with self._condition:
                self._writer = False
                self._condition.notify_all()


@dataclass
class _Entry:
    document: Document
    lock: DocumentLock = field(default_factory=DocumentLock)


class DocumentRegistry:
    """Open documents keyed by URI plus a non-owning "active" pointer.

    Each document carries its own lock. The active URI is guarded by a
    separate lock and is only ever written on open and change.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _Entry] = {}
        self._active_uri: Optional[str] = None
        self._active_lock = asyncio.Lock()

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def open(self, uri: str, text: str) -> None:
        entry = self._entries.get(uri)
        if entry is None:
            self._entries[uri] = _Entry(Document(uri=uri, text=text))
        else:
            async with entry.lock.write():
                entry.document.replace(text)
        await self.set_active(uri)

    async def change(self, uri: str, text: str) -> bool:
        """Replace the text of a known document; returns False if unknown."""
        entry = self._entries.get(uri)
        if entry is None:
            return False
        async with entry.lock.write():
            entry.document.replace(text)
        await self.set_active(uri)
        return True

    async def close(self, uri: str) -> None:
        entry = self._entries.pop(uri, None)
        if entry is None:
            return
        async with self._active_lock:
            if self._active_uri == uri:
                self._active_uri = None

    async def set_active(self, uri: str) -> None:
        async with self._active_lock:
            self._active_uri = uri

    async def active_uri(self) -> Optional[str]:
        async with self._active_lock:
            return self._active_uri

    async def snapshot(self, uri: str) -> Optional[Tuple[str, List[str]]]:
        """Copy of ``(text, lines)`` taken under the document's read lock."""
        entry = self._entries.get(uri)
        if entry is None:
            return None
        async with entry.lock.read():
            return entry.document.text, list(entry.document.lines)

    async def active_snapshot(self) -> Optional[Tuple[str, List[str]]]:
        uri = await self.active_uri()
        if uri is None:
            return None
        return await self.snapshot(uri)


__all__ = ["Document", "DocumentLock", "DocumentRegistry", "split_lines"]
