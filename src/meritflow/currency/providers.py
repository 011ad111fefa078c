"""Live exchange-rate providers."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

import httpx

from meritflow.core.config import CurrencyConfig
from meritflow.core.exceptions import ExchangeRateUnavailableError
from meritflow.models.currency import ExchangeRate, RateSource

logger = logging.getLogger(__name__)


class ExchangeRateApiProvider:
    """IRateProvider backed by an exchangerate-api style ``/latest/{BASE}`` endpoint."""

    def __init__(self, config: CurrencyConfig | None = None,
                 client: httpx.AsyncClient | None = None) -> None:
        self._config = config or CurrencyConfig()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
        return self._client

    async def fetch_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        url = f"{self._config.api_url.rstrip('/')}/{from_currency.upper()}"
        try:
            response = await self._get_client().get(url)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExchangeRateUnavailableError(
                f"Rate request for {from_currency}->{to_currency} failed: {exc}"
            ) from exc

        table = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(table, dict):
            raise ExchangeRateUnavailableError(
                f"Malformed rate response for base {from_currency}: no rates table"
            )
        raw = table.get(to_currency.upper())
        try:
            rate = Decimal(str(raw))
        except (InvalidOperation, TypeError) as exc:
            raise ExchangeRateUnavailableError(
                f"No {to_currency} rate in response for base {from_currency}"
            ) from exc
        if raw is None or not rate.is_finite() or rate <= 0:
            raise ExchangeRateUnavailableError(
                f"No {to_currency} rate in response for base {from_currency}"
            )
        logger.debug("API rate %s->%s = %s", from_currency, to_currency, rate)
        return ExchangeRate(
            from_currency=from_currency.upper(),
            to_currency=to_currency.upper(),
            rate=rate,
            source=RateSource.API,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None


class StaticRateProvider:
    """IRateProvider that always fails, forcing the static fallback table.

    Used for offline runs so no network call is attempted.
    """

    async def fetch_rate(self, from_currency: str, to_currency: str) -> ExchangeRate:
        raise ExchangeRateUnavailableError("Offline mode: live rates disabled")
