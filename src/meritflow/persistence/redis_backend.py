"""Redis cache backend implementing ICacheBackend.

Holds exchange rates, parsed files and session documents. Every key is
stored under ``namespace`` so several deployments can share one Redis.
"""

from __future__ import annotations

import logging

import redis

from meritflow.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class RedisCacheBackend:
    """ICacheBackend over redis-py with string values."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 password: str | None = None, socket_timeout: float | None = 5.0,
                 namespace: str = "") -> None:
        self._namespace = namespace
        self._client = redis.Redis(
            host=host, port=port, db=db, password=password,
            socket_timeout=socket_timeout, decode_responses=True,
        )
        logger.debug("Redis cache at %s:%d/%d namespace=%r", host, port, db, namespace)

    def _key(self, key: str) -> str:
        return self._namespace + key

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis GET failed for key={key!r}: {exc}") from exc

    def setex(self, key: str, ttl: int, value: str) -> None:
        try:
            self._client.setex(self._key(key), max(int(ttl), 1), value)
        except redis.RedisError as exc:
            raise CacheError(f"Redis SETEX failed for key={key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis DELETE failed for key={key!r}: {exc}") from exc

    def delete_prefix(self, prefix: str) -> int:
        """Drop every key under ``prefix``, scanning in batches."""
        removed = 0
        try:
            keys = list(self._client.scan_iter(match=f"{self._key(prefix)}*", count=500))
            for start in range(0, len(keys), 500):
                removed += int(self._client.delete(*keys[start:start + 500]))
        except redis.RedisError as exc:
            raise CacheError(f"Redis prefix delete failed for {prefix!r}: {exc}") from exc
        return removed
