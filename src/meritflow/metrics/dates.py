"""Permissive date parsing for HR exports.

Dates arrive as ISO strings, US or European slash dates, textual months, or
spreadsheet serial day numbers (days since 1899-12-30).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

EXCEL_EPOCH = date(1899, 12, 30)
DAYS_PER_MONTH = 30.44
# serials at or below this collide with small numbers and the 1900 leap bug
MIN_SERIAL = 59
# 9999-12-31, the last day a spreadsheet can hold
MAX_SERIAL = 2958465
# two-digit years up to this read as 20xx, above it as 19xx (as strptime %y)
TWO_DIGIT_PIVOT = 68

_TEXT_FORMATS = (
    "%d-%b-%Y", "%d-%b-%y", "%d %b %Y", "%d %B %Y",
    "%b %d, %Y", "%B %d, %Y", "%b %d %Y", "%B %d %Y",
    "%Y/%m/%d", "%Y.%m.%d",
)
_NUMERIC_DATE = re.compile(r"^(\d{1,4})[/\-.](\d{1,2})[/\-.](\d{2,4})$")
_SERIAL = re.compile(r"^\d+(\.\d+)?$")


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Day number to date, or None when outside the range a sheet can hold."""
    if not MIN_SERIAL < serial <= MAX_SERIAL:
        return None
    return EXCEL_EPOCH + timedelta(days=int(math.floor(serial)))


def expand_year(year: int) -> int:
    if year >= 100:
        return year
    return year + 2000 if year <= TWO_DIGIT_PIVOT else year + 1900


def _from_slashes(text: str) -> Optional[date]:
    match = _NUMERIC_DATE.match(text)
    if not match:
        return None
    a, b, c = (int(g) for g in match.groups())
    if len(match.group(1)) == 4:
        year, month, day = a, b, c
    else:
        # month-first unless the first number cannot be a month
        if a > 12:
            day, month = a, b
        else:
            month, day = a, b
        year = expand_year(c)
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    """Best-effort conversion of any export date representation."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return excel_serial_to_date(value)

    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _TEXT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    if _SERIAL.match(text):
        return excel_serial_to_date(float(text))
    return _from_slashes(text)


def months_between(start: date, end: date) -> int:
    """Whole months using the average month length; never negative."""
    days = (end - start).days
    return max(0, int(math.floor(days / DAYS_PER_MONTH)))


def months_since(value: Any, today: Optional[date] = None) -> Optional[int]:
    parsed = parse_date(value)
    if parsed is None:
        return None
    return months_between(parsed, today or date.today())
