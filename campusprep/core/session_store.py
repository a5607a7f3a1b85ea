"""
Session persistence for CampusPrep

A small async key-value boundary (in-memory or one JSON file per key) and
SessionPersistence, which saves and restores SessionSnapshots with a
time-to-live.
"""

import asyncio
import logging
import re
import time
from pathlib import Path
from typing import Callable, Protocol

from pydantic import ValidationError

from campusprep.models.interview import SessionKind, SessionSnapshot

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self):
        self._lock = asyncio.Lock()
        self._values: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._values[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._values)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileKeyValueStore:
    """One JSON document per key under ``root``."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self._lock = asyncio.Lock()

    def _path(self, key: str) -> Path:
        return self.root / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    async def get(self, key: str) -> str | None:
        path = self._path(key)
        async with self._lock:
            return await asyncio.to_thread(self._read, path)

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        async with self._lock:
            await asyncio.to_thread(self._write, path, value)

    @staticmethod
    def _write(path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    async def delete(self, key: str) -> None:
        path = self._path(key)
        async with self._lock:
            await asyncio.to_thread(path.unlink, missing_ok=True)


def session_key(prefix: str, user_id: str, kind: SessionKind) -> str:
    """Storage key for one user's session of one kind."""
    return f"{prefix}:{user_id}:{kind.value}"


def epoch_ms() -> int:
    return int(time.time() * 1000)


class SessionPersistence:
    """
    Saves and restores one session snapshot under a fixed key.

    A record older than ``ttl_ms`` at load time, or one that cannot be
    parsed, is deleted and reported as absent.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str,
        ttl_ms: int = 24 * 60 * 60 * 1000,
        clock: Callable[[], int] = epoch_ms,
    ):
        self.store = store
        self.key = key
        self.ttl_ms = ttl_ms
        self._clock = clock

    async def save(self, snapshot: SessionSnapshot) -> bool:
        """
        Persist a snapshot stamped with the current time.

        Returns:
            False when the store rejected the write; the caller carries on
        """
        stamped = snapshot.model_copy(update={"saved_at_epoch_ms": self._clock()})
        try:
            await self.store.set(self.key, stamped.model_dump_json())
        except Exception as e:
            logger.error(f"Failed to save session {self.key}: {e}")
            return False
        return True

    async def load(self) -> SessionSnapshot | None:
        try:
            raw = await self.store.get(self.key)
        except Exception as e:
            logger.warning(f"Discarding unreadable session {self.key}: {e}")
            await self.clear()
            return None
        if raw is None:
            return None

        try:
            snapshot = SessionSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt session {self.key}: {e.error_count()} errors")
            await self.clear()
            return None

        age_ms = self._clock() - snapshot.saved_at_epoch_ms
        if age_ms > self.ttl_ms:
            logger.info(f"Discarding expired session {self.key} (age {age_ms} ms)")
            await self.clear()
            return None

        return snapshot

    async def clear(self) -> None:
        try:
            await self.store.delete(self.key)
        except Exception as e:
            logger.error(f"Failed to delete session {self.key}: {e}")
