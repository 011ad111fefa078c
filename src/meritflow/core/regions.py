"""Country and region helpers shared by metrics and policy checks."""

from __future__ import annotations

from typing import Optional

_INDIA = {"india", "in", "ind"}
_US = {"us", "usa", "united states", "united states of america"}

# Local currency assumed when a row names a country but no currency.
COUNTRY_CURRENCIES: dict[str, str] = {
    "in": "INR", "ind": "INR", "india": "INR",
    "gb": "GBP", "uk": "GBP", "united kingdom": "GBP",
    "ca": "CAD", "canada": "CAD",
    "de": "EUR", "germany": "EUR", "fr": "EUR", "france": "EUR",
    "nl": "EUR", "netherlands": "EUR", "ie": "EUR", "ireland": "EUR",
    "sg": "SGD", "singapore": "SGD",
    "au": "AUD", "australia": "AUD",
    "mx": "MXN", "mexico": "MXN",
    "br": "BRL", "brazil": "BRL",
    "jp": "JPY", "japan": "JPY",
}


def _key(country: Optional[str]) -> str:
    return (country or "").strip().lower()


def is_india(country: Optional[str]) -> bool:
    return _key(country) in _INDIA


def is_us(country: Optional[str]) -> bool:
    return _key(country) in _US


def default_currency(country: Optional[str]) -> str:
    return COUNTRY_CURRENCIES.get(_key(country), "USD")
