"""Cache-aside persistence of aggregate records in a key-value store."""

import asyncio
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol
from urllib.parse import quote, unquote

from ghstars.errors import CacheError
from ghstars.models import AggregateRecord, Period, PeriodKind
from ghstars.shaper import dumps_compact

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-keyed byte store with no TTL and no transactions."""

    async def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when the key is absent."""
        ...

    async def put(self, key: str, value: bytes) -> None:
        """Store a value, replacing any previous one."""
        ...


class MemoryStore:
    """Dictionary-backed store for tests and ephemeral runs."""

    def __init__(self, entries: dict[str, bytes] | None = None):
        self.entries: dict[str, bytes] = dict(entries or {})

    async def get(self, key: str) -> bytes | None:
        return self.entries.get(key)

    async def put(self, key: str, value: bytes) -> None:
        self.entries[key] = value


class FileStore:
    """File-based store keeping one file per key.

    Disk I/O runs in a worker thread. Writes go to a temporary file
    renamed into place, so readers never see a partial entry.

    Attributes:
        root: Directory holding the entries.
    """

    SUFFIX = ".json"

    def __init__(self, root: Path):
        """Initialize store with its directory.

        Args:
            root: Directory for entry files (created on first write).
        """
        self.root = root

    def _path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{self.SUFFIX}"

    async def get(self, key: str) -> bytes | None:
        return await asyncio.to_thread(self._read, key)

    async def put(self, key: str, value: bytes) -> None:
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def _write(self, key: str, value: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        if not self.root.exists():
            return []
        return sorted(
            unquote(path.name.removesuffix(self.SUFFIX))
            for path in self.root.glob(f"*{self.SUFFIX}")
        )


@dataclass
class CachedRecord:
    """A record read back from the store, with the bytes it came from."""

    record: AggregateRecord
    raw: bytes


def cache_key(period: Period) -> str:
    """Versioned store key of a period.

    Day and month keys carry a version prefix, week keys are the bare
    identifier; existing entries rely on this layout.
    """
    if period.kind is PeriodKind.DAY:
        return f"v2-{period.identifier}"
    if period.kind is PeriodKind.WEEK:
        return period.identifier
    return f"month-v1-{period.identifier}"


class CacheGateway:
    """Reads and writes aggregate records through a key-value store.

    Entries are written unconditionally and never expire. Two concurrent
    misses for one period may both write; the last write wins.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def read(self, period: Period) -> CachedRecord | None:
        """Look up the stored record of a period.

        Args:
            period: The resolved period.

        Returns:
            The cached record, or None on a miss.

        Raises:
            CacheError: When the store fails or the entry cannot be decoded.
        """
        key = cache_key(period)
        try:
            raw = await self.store.get(key)
        except OSError as e:
            raise CacheError(f"Cache read failed for {key}: {e}") from e

        if raw is None:
            logger.debug("Cache miss for %s", key)
            return None

        try:
            record = AggregateRecord.from_document(period, json.loads(raw))
        except (TypeError, ValueError) as e:
            raise CacheError(f"Corrupt cache entry {key}: {e}") from e

        logger.debug("Cache hit for %s", key)
        return CachedRecord(record=record, raw=raw)

    async def write(self, record: AggregateRecord) -> bytes:
        """Store the full, unlimited record of a period.

        Args:
            record: Freshly computed record.

        Returns:
            The bytes written.

        Raises:
            CacheError: When the store rejects the write.
        """
        key = cache_key(record.period)
        raw = dumps_compact(record.to_document())
        try:
            await self.store.put(key, raw)
        except OSError as e:
            raise CacheError(f"Cache write failed for {key}: {e}") from e

        logger.info("Stored %d repositories under %s", len(record.repositories), key)
        return raw
