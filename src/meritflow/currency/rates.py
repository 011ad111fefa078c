"""Static exchange-rate table used when the live API is unreachable.

Rates are units of each currency per one US dollar.
"""

from __future__ import annotations

from decimal import Decimal

from meritflow.core.exceptions import UnsupportedCurrencyError

FALLBACK_RATES: dict[str, Decimal] = {
    code: Decimal(rate)
    for code, rate in {
        "USD": "1.0", "EUR": "0.858", "GBP": "0.742", "JPY": "147.64",
        "CAD": "1.38", "AUD": "1.54", "CHF": "0.805", "CNY": "7.16",
        "INR": "87.61", "BRL": "5.43", "MXN": "18.66", "SGD": "1.28",
        "HKD": "7.81", "SEK": "9.57", "NOK": "10.12", "DKK": "6.41",
        "PLN": "3.66", "CZK": "21.06", "HUF": "340.73", "RUB": "80.71",
        "ZAR": "17.6", "KRW": "1389.25", "THB": "32.44", "MYR": "4.21",
        "PHP": "56.73", "IDR": "16265.13", "VND": "26206.36", "ILS": "3.38",
        "AED": "3.67", "SAR": "3.75", "EGP": "48.5", "TRY": "41.02",
        "PKR": "283.64", "LKR": "301.9", "TWD": "30.44", "NZD": "1.71",
    }.items()
}


def is_supported(currency: str) -> bool:
    return currency.strip().upper() in FALLBACK_RATES


def supported_currencies() -> list[str]:
    return sorted(FALLBACK_RATES)


def fallback_rate(from_currency: str, to_currency: str) -> Decimal:
    """Cross rate through USD: units of ``to_currency`` per ``from_currency``."""
    src, dst = from_currency.strip().upper(), to_currency.strip().upper()
    for code in (src, dst):
        if code not in FALLBACK_RATES:
            raise UnsupportedCurrencyError(code)
    return FALLBACK_RATES[dst] / FALLBACK_RATES[src]
