"""Per-owner document history stored through fsspec.

Each owner's history is one JSON array, newest first, stored under a single
namespaced key (`<namespace>/<owner>.json`) inside the configured storage
URL. Local paths, file://, memory:// and cloud protocols are all handled by
fsspec's protocol detection.

History is append-only from the generator's point of view; it is cleared
only when the owner asks for it. There is no schema versioning and no
durability guarantee beyond what the backing filesystem offers.
"""

from __future__ import annotations

import asyncio
import posixpath
import re
from urllib.parse import urlparse

import fsspec
import orjson

from src.core.logging import get_logger
from src.documents.models import DocumentRecord

logger = get_logger(__name__)


def get_filesystem(url: str) -> fsspec.AbstractFileSystem:
    """Get filesystem for a storage URL, auto-detecting protocol.

    Examples:
        get_filesystem("/var/lib/buelldocs") -> LocalFileSystem
        get_filesystem("memory://history") -> MemoryFileSystem
    """
    parsed = urlparse(url)
    if not parsed.scheme or parsed.scheme == "file":
        return fsspec.filesystem("file")
    return fsspec.filesystem(parsed.scheme)


def storage_root(url: str) -> str:
    """Filesystem path of the storage URL's root."""
    parsed = urlparse(url)
    if not parsed.scheme or parsed.scheme == "file":
        return parsed.path if parsed.path else url
    return f"{parsed.netloc}{parsed.path}" if parsed.netloc else parsed.path


def _safe_owner(owner: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_.@-]", "_", owner.strip())
    if not cleaned:
        raise ValueError("History owner must not be empty")
    return cleaned


class HistoryStore:
    """Ordered list of DocumentRecord per owner."""

    def __init__(self, storage_url: str, namespace: str = "buelldocs_documents") -> None:
        self.storage_url = storage_url
        self.namespace = namespace
        self._fs = get_filesystem(storage_url)
        self._root = storage_root(storage_url)

    def key_for(self, owner: str) -> str:
        """Namespaced key holding an owner's history."""
        return f"{self.namespace}/{_safe_owner(owner)}.json"

    def _path(self, owner: str) -> str:
        return posixpath.join(self._root, self.key_for(owner))

    def _read_sync(self, path: str) -> list[DocumentRecord]:
        if not self._fs.exists(path):
            return []
        with self._fs.open(path, "rb") as f:
            raw = f.read()
        if not raw:
            return []
        return [DocumentRecord.model_validate(item) for item in orjson.loads(raw)]

    def _write_sync(self, path: str, records: list[DocumentRecord]) -> None:
        self._fs.makedirs(posixpath.dirname(path), exist_ok=True)
        payload = orjson.dumps(
            [record.model_dump(mode="json", by_alias=True) for record in records]
        )
        with self._fs.open(path, "wb") as f:
            f.write(payload)

    async def list(self, owner: str) -> list[DocumentRecord]:
        """Owner's records, newest first."""
        return await asyncio.to_thread(self._read_sync, self._path(owner))

    async def add(self, owner: str, record: DocumentRecord) -> list[DocumentRecord]:
        """Prepend a record and persist the list.

        Returns:
            The updated list, newest first.
        """
        path = self._path(owner)
        records = await asyncio.to_thread(self._read_sync, path)
        records.insert(0, record)
        await asyncio.to_thread(self._write_sync, path, records)
        logger.info("history_record_added", document_id=record.id, entries=len(records))
        return records

    async def clear(self, owner: str) -> int:
        """Remove every record for an owner.

        Returns:
            Number of records removed.
        """
        path = self._path(owner)
        records = await asyncio.to_thread(self._read_sync, path)
        if records:
            await asyncio.to_thread(self._write_sync, path, [])
        logger.info("history_cleared", removed=len(records))
        return len(records)

    async def check(self) -> bool:
        """True when the storage root can be created and listed."""
        def _probe() -> bool:
            self._fs.makedirs(self._root, exist_ok=True)
            return self._fs.exists(self._root)

        try:
            return await asyncio.to_thread(_probe)
        except OSError as exc:
            logger.warning("history_storage_unavailable", error=str(exc))
            return False
