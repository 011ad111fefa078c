"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from meritflow.core.config import AppSettings
from meritflow.persistence.file_cache import ParsedFileCache
from meritflow.persistence.memory_backend import MemoryCacheBackend, MemoryFileStore
from meritflow.persistence.redis_backend import RedisCacheBackend
from meritflow.persistence.s3_backend import S3FileStore
from meritflow.persistence.session_store import CacheSessionStore


def create_persistence(settings: AppSettings | None = None):
    """Create wired-up persistence backends from application settings.

    The memory backend keeps files in-process too; the redis backend pairs
    Redis with S3 for uploaded exports.

    Returns:
        Tuple of (cache, session_store, file_cache, file_store).
    """
    if settings is None:
        settings = AppSettings()

    if settings.storage.backend == "redis":
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            socket_timeout=settings.redis.socket_timeout,
            namespace=settings.redis.namespace,
        )
        file_store = S3FileStore(
            bucket=settings.s3.bucket,
            region=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
            key_prefix=settings.s3.key_prefix,
        )
    else:
        cache = MemoryCacheBackend()
        file_store = MemoryFileStore()

    session_store = CacheSessionStore(cache, ttl=settings.storage.session_ttl_seconds)
    file_cache = ParsedFileCache(cache, ttl=settings.storage.file_cache_ttl_seconds)

    return cache, session_store, file_cache, file_store
