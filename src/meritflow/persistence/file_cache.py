"""Parsed-file cache keyed by the SHA-256 of the raw upload."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from meritflow.core.exceptions import CacheError
from meritflow.core.protocols import ICacheBackend
from meritflow.models.results import ParseResult

logger = logging.getLogger(__name__)


class ParsedFileCache:
    """Skips re-parsing bytes already seen. Cache failures are logged, never raised."""

    PREFIX = "parsed:"
    DEFAULT_TTL = 24 * 3600

    def __init__(self, cache: ICacheBackend, ttl: int | None = None) -> None:
        self._cache = cache
        self._ttl = ttl or self.DEFAULT_TTL

    def get(self, content_hash: str, expected_type: str = "auto") -> ParseResult | None:
        try:
            raw = self._cache.get(f"{self.PREFIX}{expected_type}:{content_hash}")
        except CacheError as exc:
            logger.warning("Parsed-file cache read failed: %s", exc)
            return None
        if raw is None:
            return None
        try:
            return ParseResult.model_validate_json(raw)
        except ValidationError:
            logger.warning("Discarding unreadable cached parse for %s", content_hash[:12])
            return None

    def put(self, result: ParseResult, expected_type: str = "auto") -> None:
        if not result.content_hash or not result.accepted:
            return
        try:
            self._cache.setex(
                f"{self.PREFIX}{expected_type}:{result.content_hash}",
                self._ttl,
                result.model_dump_json(),
            )
        except CacheError as exc:
            logger.warning("Parsed-file cache write failed: %s", exc)

    def clear(self) -> int:
        try:
            return self._cache.delete_prefix(self.PREFIX)
        except CacheError as exc:
            logger.warning("Parsed-file cache clear failed: %s", exc)
            return 0
