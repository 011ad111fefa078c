"""Currency-tagged monetary amounts.

Every salary, raise and budget figure that crosses a module boundary is a
``Money`` so that adding a USD raise to an INR salary fails loudly instead of
producing a plausible-looking wrong number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, field_validator

from meritflow.core.exceptions import CurrencyMismatchError

CENTS = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce int/float/str/Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {value!r}") from exc


def round_half_up(value: Any, places: int = 0) -> Decimal:
    """Round the way spreadsheets do (0.5 goes away from zero)."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


class Money(BaseModel):
    """An amount in a single ISO-4217 currency."""

    model_config = {"frozen": True}

    amount: Decimal
    currency: str = "USD"

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("currency code must not be empty")
        return code

    @classmethod
    def of(cls, amount: Any, currency: str = "USD") -> Money:
        return cls(amount=to_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    def _require_same(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        self._require_same(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        self._require_same(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __lt__(self, other: Money) -> bool:
        self._require_same(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._require_same(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._require_same(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._require_same(other)
        return self.amount >= other.amount

    def scale(self, factor: Any) -> Money:
        """Multiply by a dimensionless factor (percent / 100, ratios)."""
        return Money(amount=self.amount * to_decimal(factor), currency=self.currency)

    def ratio_to(self, other: Money) -> Decimal:
        """Dimensionless ratio of two same-currency amounts."""
        self._require_same(other)
        if other.amount == 0:
            raise ZeroDivisionError("ratio against a zero amount")
        return self.amount / other.amount

    def convert(self, rate: Any, to_currency: str) -> Money:
        """Express this amount in ``to_currency`` given units-of-target per unit."""
        return Money(amount=self.amount * to_decimal(rate), currency=to_currency)

    def rounded(self, places: int = 2) -> Money:
        return Money(amount=round_half_up(self.amount, places), currency=self.currency)

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"
