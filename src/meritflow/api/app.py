"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from meritflow.api.routes import currency, health, ingest, policy
from meritflow.core.config import AppSettings
from meritflow.core.logging import configure_logging
from meritflow.currency.converter import CurrencyConverter
from meritflow.currency.providers import ExchangeRateApiProvider, StaticRateProvider
from meritflow.persistence import create_persistence


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = getattr(app.state, "settings", None) or AppSettings()
    configure_logging(settings.log_level)
    cache, session_store, file_cache, file_store = create_persistence(settings)
    provider = (
        StaticRateProvider() if settings.currency.offline
        else ExchangeRateApiProvider(settings.currency)
    )
    app.state.settings = settings
    app.state.cache = cache
    app.state.session_store = session_store
    app.state.file_cache = file_cache
    app.state.file_store = file_store
    app.state.converter = CurrencyConverter(
        provider=provider, cache=cache, cache_ttl=settings.currency.cache_ttl_seconds,
    )
    yield
    if isinstance(provider, ExchangeRateApiProvider):
        await provider.aclose()


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="MeritFlow Compensation Planning",
        version="0.1.0",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.include_router(health.router)
    app.include_router(ingest.router, prefix="/ingest")
    app.include_router(policy.router, prefix="/policy")
    app.include_router(currency.router, prefix="/currency")
    return app
