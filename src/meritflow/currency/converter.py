"""Currency conversion with a TTL cache and a static fallback table.

Lookup order for a rate is: same currency, cache, live provider, static
table. Network trouble never escapes :meth:`CurrencyConverter.convert`; a
currency nobody knows is flagged on the result instead of being treated as
a 1:1 rate.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from meritflow.core.exceptions import (
    CacheError,
    ConversionBatchError,
    CurrencyError,
    UnsupportedCurrencyError,
)
from meritflow.core.protocols import ICacheBackend, IRateProvider
from meritflow.currency import rates
from meritflow.models.currency import ConversionResult, ExchangeRate, RateSource
from meritflow.models.money import Money

logger = logging.getLogger(__name__)

CACHE_PREFIX = "fx:"


def _cache_key(from_currency: str, to_currency: str) -> str:
    return f"{CACHE_PREFIX}{from_currency}:{to_currency}"


class CurrencyConverter:
    """Converts Money between currencies, tagging every result with its rate source."""

    CACHE_TTL = 3600  # 1 hour

    def __init__(self, *, provider: IRateProvider, cache: ICacheBackend | None = None,
                 cache_ttl: int | None = None) -> None:
        self._provider = provider
        self._cache = cache
        self._ttl = cache_ttl or self.CACHE_TTL
        self._using_fallback = False

    @property
    def using_fallback(self) -> bool:
        """True once any lookup had to fall back to the static table."""
        return self._using_fallback

    def is_supported(self, currency: str) -> bool:
        return rates.is_supported(currency)

    def supported_currencies(self) -> list[str]:
        return rates.supported_currencies()

    # ---- cache ----

    def _cached(self, src: str, dst: str) -> ExchangeRate | None:
        if self._cache is None:
            return None
        try:
            raw = self._cache.get(_cache_key(src, dst))
        except CacheError as exc:
            logger.warning("Rate cache read failed: %s", exc)
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return ExchangeRate(
                from_currency=src,
                to_currency=dst,
                rate=Decimal(data["rate"]),
                timestamp=datetime.fromisoformat(data["timestamp"]),
                source=RateSource.CACHE,
            )
        except (ValueError, KeyError, TypeError, ArithmeticError) as exc:
            logger.warning("Ignoring unreadable cached rate %s->%s: %s", src, dst, exc)
            return None

    def _store(self, rate: ExchangeRate) -> None:
        if self._cache is None:
            return
        payload = json.dumps({"rate": str(rate.rate), "timestamp": rate.timestamp.isoformat()})
        try:
            self._cache.setex(_cache_key(rate.from_currency, rate.to_currency), self._ttl, payload)
        except CacheError as exc:
            logger.warning("Rate cache write failed: %s", exc)

    def invalidate(self, from_currency: str | None = None, to_currency: str | None = None) -> int:
        """Drop cached rates: one pair, every pair from a currency, or all."""
        if self._cache is None:
            return 0
        if from_currency and to_currency:
            self._cache.delete(_cache_key(from_currency.upper(), to_currency.upper()))
            return 1
        prefix = f"{CACHE_PREFIX}{from_currency.upper()}:" if from_currency else CACHE_PREFIX
        return self._cache.delete_prefix(prefix)

    # ---- lookups ----

    async def get_rate(self, from_currency: str, to_currency: str = "USD") -> ExchangeRate:
        """Rate for a pair. Raises UnsupportedCurrencyError only when no tier knows it."""
        src, dst = from_currency.strip().upper(), to_currency.strip().upper()
        if src == dst:
            return ExchangeRate(from_currency=src, to_currency=dst, rate=Decimal("1"),
                                source=RateSource.IDENTITY)

        cached = self._cached(src, dst)
        if cached is not None:
            return cached

        try:
            live = await self._provider.fetch_rate(src, dst)
        except CurrencyError as exc:
            logger.warning("Live rate unavailable for %s->%s, using fallback: %s", src, dst, exc)
        except Exception:
            logger.exception("Rate provider failed for %s->%s, using fallback", src, dst)
        else:
            self._store(live)
            return live

        rate = rates.fallback_rate(src, dst)  # raises UnsupportedCurrencyError
        self._using_fallback = True
        return ExchangeRate(from_currency=src, to_currency=dst, rate=rate, source=RateSource.FALLBACK)

    async def force_refresh(self, from_currency: str, to_currency: str = "USD") -> ExchangeRate:
        self.invalidate(from_currency, to_currency)
        return await self.get_rate(from_currency, to_currency)

    async def convert(self, amount: Money, to_currency: str = "USD") -> ConversionResult:
        """Convert one amount. Never raises for unknown currencies or outages."""
        dst = to_currency.strip().upper()
        try:
            rate = await self.get_rate(amount.currency, dst)
        except UnsupportedCurrencyError as exc:
            logger.warning("Cannot convert %s: %s", amount, exc)
            return ConversionResult(
                original=amount,
                converted=amount,
                rate=Decimal("0"),
                source=RateSource.UNSUPPORTED,
                warning=f"No exchange rate for {exc.currency}; amount left in {amount.currency}",
            )
        warning = None
        if rate.source is RateSource.FALLBACK:
            warning = f"Static fallback rate used for {amount.currency}->{dst}"
        return ConversionResult(
            original=amount,
            converted=amount.convert(rate.rate, dst).rounded(2),
            rate=rate.rate,
            source=rate.source,
            warning=warning,
        )

    def _fallback_result(self, amount: Money, to_currency: str, failure: Exception) -> ConversionResult:
        """Static-table conversion after an unexpected failure; unknown currencies stay unconverted."""
        dst = to_currency.strip().upper()
        try:
            rate = rates.fallback_rate(amount.currency, dst)
        except UnsupportedCurrencyError:
            return ConversionResult(
                original=amount,
                converted=amount,
                rate=Decimal("0"),
                source=RateSource.UNSUPPORTED,
                warning=f"Conversion failed: {failure}",
            )
        self._using_fallback = True
        return ConversionResult(
            original=amount,
            converted=amount.convert(rate, dst).rounded(2),
            rate=rate,
            source=RateSource.FALLBACK,
            warning=f"Conversion failed: {failure}; static fallback rate used for {amount.currency}->{dst}",
        )

    async def convert_batch(self, amounts: Sequence[Money], to_currency: str = "USD") -> list[ConversionResult]:
        """One result per input, in order, or ConversionBatchError."""
        outcomes = await asyncio.gather(
            *(self.convert(a, to_currency) for a in amounts), return_exceptions=True
        )
        results: list[ConversionResult] = []
        for amount, outcome in zip(amounts, outcomes):
            if isinstance(outcome, ConversionResult):
                results.append(outcome)
                continue
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            logger.error("Conversion of %s failed unexpectedly: %s", amount, outcome)
            results.append(self._fallback_result(amount, to_currency, outcome))
        if len(results) != len(amounts):
            raise ConversionBatchError(f"Expected {len(amounts)} conversions, produced {len(results)}")
        fallbacks = sum(1 for r in results if r.source is RateSource.FALLBACK)
        if fallbacks:
            logger.info("%d of %d conversions used fallback rates", fallbacks, len(results))
        return results
