"""Tests for live rate providers, using httpx.MockTransport."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import httpx
import pytest

from meritflow.core.config import CurrencyConfig
from meritflow.core.exceptions import ExchangeRateUnavailableError
from meritflow.currency.providers import ExchangeRateApiProvider, StaticRateProvider
from meritflow.models.currency import RateSource

CONFIG = CurrencyConfig(api_url="https://rates.test/v4/latest/")


def provider_for(handler) -> ExchangeRateApiProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExchangeRateApiProvider(CONFIG, client=client)


class TestExchangeRateApiProvider:
    def test_reads_rate_for_base(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json={"base": "INR", "rates": {"USD": 0.012, "EUR": 0.0105}})

        rate = asyncio.run(provider_for(handler).fetch_rate("inr", "usd"))
        assert seen == ["/v4/latest/INR"]
        assert rate.rate == Decimal("0.012")
        assert (rate.from_currency, rate.to_currency) == ("INR", "USD")
        assert rate.source is RateSource.API

    def test_missing_target_currency(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"rates": {"EUR": 0.9}}))
        with pytest.raises(ExchangeRateUnavailableError, match="No USD rate"):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    def test_non_positive_rate(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"rates": {"USD": 0}}))
        with pytest.raises(ExchangeRateUnavailableError):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    @pytest.mark.parametrize("body", [[1, 2], {"rates": [0.9]}, {"rates": "USD=1"}, "text"])
    def test_malformed_payload(self, body):
        provider = provider_for(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ExchangeRateUnavailableError, match="Malformed rate response"):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    def test_non_numeric_rate(self):
        provider = provider_for(lambda request: httpx.Response(200, json={"rates": {"USD": [1.2]}}))
        with pytest.raises(ExchangeRateUnavailableError, match="No USD rate"):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    def test_http_error(self):
        provider = provider_for(lambda request: httpx.Response(503))
        with pytest.raises(ExchangeRateUnavailableError, match="GBP->USD failed"):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    def test_bad_json(self):
        provider = provider_for(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(ExchangeRateUnavailableError):
            asyncio.run(provider.fetch_rate("GBP", "USD"))

    def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExchangeRateUnavailableError, match="connection refused"):
            asyncio.run(provider_for(handler).fetch_rate("GBP", "USD"))

    def test_aclose_leaves_injected_client_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        provider = ExchangeRateApiProvider(CONFIG, client=client)
        asyncio.run(provider.aclose())
        assert not client.is_closed


def test_static_provider_always_fails():
    with pytest.raises(ExchangeRateUnavailableError, match="Offline"):
        asyncio.run(StaticRateProvider().fetch_rate("INR", "USD"))
