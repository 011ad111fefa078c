"""Header-row detection for exports padded with report metadata.

HRIS exports often start with a title block ("Report Generated: ...",
"Filters Applied: ...", page markers, blank lines). Those rows are dropped
by looking at their first cell only, and only before the header is found.
"""

from __future__ import annotations

import logging
import re

from pydantic import BaseModel, Field

from meritflow.core.exceptions import HeaderNotFoundError
from meritflow.core.types import RawRow

logger = logging.getLogger(__name__)

METADATA_PATTERNS: list[re.Pattern[str]] = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^report\s*generated",
        r"^run\s*date",
        r"^filters?\s*applied",
        r"^parameters?\s*:?",
        r"^total\s*count",
        r"^page\s*\d+",
        r"^workday\b",
        r"^report\s*name",
        r"^company\s*:",
        r"^export\s*date",
    )
]

HEADER_KEYWORDS = (
    "employee", "associate", "name", "worker", "id", "salary", "performance",
    "rating", "talent", "calibrated", "movement", "readiness", "manager",
    "department", "comparatio", "grade", "email", "job",
)


class Table(BaseModel):
    """Header plus data rows cut out of a raw cell grid."""

    headers: list[str]
    rows: list[RawRow] = Field(default_factory=list)
    row_numbers: list[int] = Field(default_factory=list)  # 1-based source lines
    header_row_index: int = 0
    removed_rows: int = 0


def non_empty_count(row: RawRow) -> int:
    return sum(1 for cell in row if cell and cell.strip())


def is_blank_row(row: RawRow) -> bool:
    return non_empty_count(row) == 0


def is_metadata_row(row: RawRow) -> bool:
    first = next((c.strip() for c in row if c and c.strip()), "")
    return bool(first) and any(p.search(first) for p in METADATA_PATTERNS)


def normalize_header(cell: str) -> str:
    return re.sub(r"\s+", " ", cell.replace("\ufeff", "").strip().lower())


def has_header_keyword(row: RawRow) -> bool:
    return any(kw in normalize_header(cell) for cell in row for kw in HEADER_KEYWORDS)


def detect_header(rows: list[RawRow], scan_rows: int = 20, min_cells: int = 3) -> int:
    """Index of the header row in ``rows``.

    The first row among the first ``scan_rows`` that has ``min_cells``
    filled cells and a domain keyword wins; otherwise the first row that
    merely has enough filled cells.
    """
    fallback: int | None = None
    for index, row in enumerate(rows[:scan_rows]):
        if non_empty_count(row) < min_cells or is_metadata_row(row):
            continue
        if has_header_keyword(row):
            return index
        if fallback is None:
            fallback = index
    if fallback is not None:
        logger.info("No keyword header found; using row %d", fallback + 1)
        return fallback
    raise HeaderNotFoundError(
        f"No row in the first {scan_rows} has at least {min_cells} filled cells"
    )


def min_data_cells(header_count: int) -> int:
    """Rows with fewer filled cells than this are noise."""
    return max(1, min(2, int(header_count * 0.2)))


def extract_table(rows: list[RawRow], scan_rows: int = 20, min_cells: int = 3) -> Table:
    """Drop pre-header noise, find the header, keep plausible data rows."""
    header_index = detect_header(rows, scan_rows=scan_rows, min_cells=min_cells)
    removed = header_index  # everything above the header is title block
    headers = [normalize_header(c) for c in rows[header_index]]
    threshold = min_data_cells(non_empty_count(rows[header_index]))

    data: list[RawRow] = []
    numbers: list[int] = []
    for offset, row in enumerate(rows[header_index + 1:], start=header_index + 2):
        if non_empty_count(row) < threshold:
            removed += 1
            continue
        padded = row + [""] * (len(headers) - len(row))
        data.append(padded[: len(headers)] if len(padded) > len(headers) else padded)
        numbers.append(offset)

    if removed:
        logger.info("Removed %d metadata or blank rows", removed)
    return Table(
        headers=headers,
        rows=data,
        row_numbers=numbers,
        header_row_index=header_index,
        removed_rows=removed,
    )
