"""Exchange-rate and conversion result models."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from meritflow.models.money import Money


class RateSource(StrEnum):
    API = "api"
    CACHE = "cache"
    FALLBACK = "fallback"
    IDENTITY = "identity"  # same-currency, rate 1 by definition
    UNSUPPORTED = "unsupported"  # no rate known; amount left unconverted


class ExchangeRate(BaseModel):
    """Units of ``to_currency`` per one unit of ``from_currency``."""

    from_currency: str
    to_currency: str
    rate: Decimal
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: RateSource = RateSource.API


class ConversionResult(BaseModel):
    """Outcome of converting one amount; never silently lossy."""

    original: Money
    converted: Money
    rate: Decimal
    source: RateSource
    warning: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when the figure did not come from a live or cached API rate."""
        return self.source in (RateSource.FALLBACK, RateSource.UNSUPPORTED)
