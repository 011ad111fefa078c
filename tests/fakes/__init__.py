"""Shared test doubles: memory backends plus a canned rate provider."""

from __future__ import annotations

from decimal import Decimal

from meritflow.core.exceptions import ExchangeRateUnavailableError
from meritflow.models.currency import ExchangeRate, RateSource
from meritflow.persistence.memory_backend import MemoryCacheBackend, MemoryFileStore


class FakeRateProvider:
    """IRateProvider answering from a dict of (from, to) -> rate."""

    def __init__(self, rates: dict[tuple[str, str], str] | None = None, fail: bool = False) -> None:
        self.rates = {k: Decimal(v) for k, v in (rates or {}).items()}
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def fetch_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        self.calls.append((from_currency, to_currency))
        rate = self.rates.get((from_currency, to_currency))
        if self.fail or rate is None:
            raise ExchangeRateUnavailableError(f"no rate for {from_currency}->{to_currency}")
        return ExchangeRate(from_currency=from_currency, to_currency=to_currency,
                            rate=rate, source=RateSource.API)


class ManualClock:
    """Monotonic clock stand-in for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


__all__ = ["FakeRateProvider", "ManualClock", "MemoryCacheBackend", "MemoryFileStore"]
