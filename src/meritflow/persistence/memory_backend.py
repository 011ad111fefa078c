"""In-memory backends: the default for single-process runs and unit tests."""

from __future__ import annotations

import time
from collections.abc import Callable


class MemoryCacheBackend:
    """Dict-backed ICacheBackend that honours per-key TTLs."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[str, float]] = {}
        self._clock = clock

    def _expired(self, key: str) -> bool:
        entry = self._store.get(key)
        if entry is None:
            return True
        if entry[1] <= self._clock():
            del self._store[key]
            return True
        return False

    def get(self, key: str) -> str | None:
        if self._expired(key):
            return None
        return self._store[key][0]

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def delete_prefix(self, prefix: str) -> int:
        doomed = [k for k in self._store if k.startswith(prefix)]
        for key in doomed:
            del self._store[key]
        return len(doomed)

    def keys(self) -> list[str]:
        return [k for k in list(self._store) if not self._expired(k)]


class MemoryFileStore:
    """Dict-backed IFileStore."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        return self._files[path]

    def write(self, path: str, data: bytes, content_type: str | None = None) -> str:
        self._files[path] = data
        return path

    def move(self, src: str, dst: str) -> None:
        self._files[dst] = self._files.pop(src)

    def list_files(self, prefix: str) -> list[str]:
        return sorted(k for k in self._files if k.startswith(prefix))
