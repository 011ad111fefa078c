"""Cell-level type coercion for mapped columns.

Numeric cells from HR exports arrive as "$85,000.00", "₹ 12,50,000",
"(1,200)" or "1200-"; percentages as "85%"; flags as "Yes"/"Y"/"TRUE".
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from meritflow.metrics.dates import parse_date
from meritflow.models.rating import CategoricalRating, NumericRating
from meritflow.models.schema_mapping import FieldKind

CURRENCY_SYMBOLS = "$£€¥₹"
_NUMERIC_CHARS = re.compile(r"[^\d.\-]")
_TRUE = {"yes", "y", "true", "1", "x"}
_FALSE = {"no", "n", "false", "0"}
RISK_FLAG_YES = 75.0
RISK_FLAG_NO = 25.0


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().strip('"').strip("'").strip()
    return text or None


def parse_number(value: Any) -> Optional[Decimal]:
    """Parse a loosely formatted number; None when nothing numeric remains."""
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return Decimal(str(value))
    text = clean_text(value)
    if text is None:
        return None
    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative, text = True, text[1:-1]
    if text.endswith("-") and not text.startswith("-"):
        negative, text = True, text[:-1]
    for symbol in CURRENCY_SYMBOLS:
        text = text.replace(symbol, "")
    digits = _NUMERIC_CHARS.sub("", text)
    if not digits or digits in {"-", ".", "-."}:
        return None
    try:
        number = Decimal(digits)
    except InvalidOperation:
        return None
    return -number if negative else number


def parse_percent(value: Any) -> Optional[float]:
    """Percent as a plain number: "12%" and "12" both give 12.0."""
    number = parse_number(value)
    return float(number) if number is not None else None


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    text = clean_text(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in _TRUE or lowered in {"promoted", "promotion"}:
        return True
    if lowered in _FALSE:
        return False
    return None


def parse_rating(value: Any) -> Optional[NumericRating | CategoricalRating]:
    """Numbers become numeric ratings, "80%" a fraction on a 0-1 scale,
    anything else is kept verbatim as a category label."""
    text = clean_text(value)
    if text is None:
        return None
    if text.endswith("%"):
        number = parse_number(text[:-1])
        if number is not None:
            return NumericRating(value=float(number) / 100, scale=1.0)
    try:
        return NumericRating(value=float(text))
    except ValueError:
        return CategoricalRating(label=text)


def parse_risk(value: Any) -> Optional[float]:
    """Retention risk as 0-100; yes/no flags map to high/low."""
    text = clean_text(value)
    if text is None:
        return None
    flag = text.lower()
    if flag in {"yes", "y", "true", "high"}:
        return RISK_FLAG_YES
    if flag in {"no", "n", "false", "low"}:
        return RISK_FLAG_NO
    number = parse_number(text.rstrip("%"))
    return float(number) if number is not None else None


def parse_comparatio(value: Any) -> Optional[float]:
    """Comparatio as a percent; fractions such as 0.95 are scaled up."""
    text = clean_text(value)
    if text is None:
        return None
    number = parse_number(text.rstrip("%"))
    if number is None:
        return None
    result = float(number)
    if not text.endswith("%") and 0 < result <= 3:
        result *= 100
    return result


def normalize_identifier(value: Any) -> Optional[str]:
    """Spreadsheet IDs often come through as "1001.0"."""
    text = clean_text(value)
    if text is None:
        return None
    if re.fullmatch(r"\d+\.0+", text):
        text = text.split(".")[0]
    return text


def normalize_date_text(value: Any) -> Optional[str]:
    """ISO date when parseable; otherwise the original text for later review."""
    text = clean_text(value)
    if text is None:
        return None
    parsed = parse_date(text)
    return parsed.isoformat() if parsed else text


def coerce(kind: FieldKind, value: Any) -> Any:
    """Convert one raw cell according to its field kind."""
    if kind is FieldKind.MONEY:
        return parse_number(value)
    if kind is FieldKind.NUMBER:
        number = parse_number(value)
        return float(number) if number is not None else None
    if kind is FieldKind.PERCENT:
        return parse_percent(value)
    if kind is FieldKind.BOOLEAN:
        return parse_bool(value)
    if kind is FieldKind.DATE:
        return normalize_date_text(value)
    if kind is FieldKind.RATING:
        return parse_rating(value)
    if kind is FieldKind.RISK:
        return parse_risk(value)
    if kind is FieldKind.COMPARATIO:
        return parse_comparatio(value)
    if kind is FieldKind.IDENTIFIER:
        return normalize_identifier(value)
    if kind is FieldKind.EMAIL:
        text = clean_text(value)
        return text.lower() if text else None
    if kind is FieldKind.CURRENCY_CODE:
        text = clean_text(value)
        return text.upper() if text else None
    return clean_text(value)
