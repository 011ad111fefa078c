"""Turn uploaded bytes into a grid of string cells.

Delimited text goes through charset detection and delimiter sniffing before
the stdlib csv reader; workbooks are read with openpyxl (first sheet, cached
formula values). Every cell comes back as a trimmed string.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime, time
from pathlib import PurePath
from typing import Any

from charset_normalizer import from_bytes
from openpyxl import load_workbook

from meritflow.core.exceptions import EmptyFileError, IngestionError, UnsupportedFileError
from meritflow.core.types import RawRow

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".csv", ".txt", ".tsv"}
WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}
SNIFF_DELIMITERS = [",", ";", "\t", "|"]


def extension_of(file_name: str) -> str:
    return PurePath(file_name).suffix.lower()


def decode_text(data: bytes) -> str:
    """Decode text bytes, preferring UTF-8 and falling back to detection."""
    if data.startswith(b"\xef\xbb\xbf"):
        return data.decode("utf-8-sig")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        pass
    match = from_bytes(data).best()
    encoding = match.encoding if match is not None else "latin-1"
    logger.debug("Decoding with detected encoding %s", encoding)
    return data.decode(encoding, errors="replace")


def _sniff_delimiter(text: str) -> str:
    try:
        return csv.Sniffer().sniff(text[:4096], delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def read_delimited(data: bytes) -> list[RawRow]:
    text = decode_text(data).replace("\r\n", "\n").replace("\r", "\n")
    if not text.strip():
        raise EmptyFileError("File contains no text")
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=_sniff_delimiter(text))
    return [[cell.strip().strip('"').strip() for cell in row] for row in reader]


def cell_to_text(value: Any) -> str:
    """Render a workbook cell the way it would appear in a CSV export."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value).strip()


def read_workbook(data: bytes) -> list[RawRow]:
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as exc:
        raise IngestionError(f"Could not open workbook: {exc}") from exc
    try:
        sheet = workbook.worksheets[0] if workbook.worksheets else None
        if sheet is None:
            raise EmptyFileError("Workbook has no worksheets")
        rows = [
            [cell_to_text(v) for v in row]
            for row in sheet.iter_rows(values_only=True)
        ]
    finally:
        workbook.close()
    # read-only sheets pad trailing empty cells inconsistently
    return [_trim_trailing(row) for row in rows]


def _trim_trailing(row: RawRow) -> RawRow:
    end = len(row)
    while end > 0 and not row[end - 1]:
        end -= 1
    return row[:end]


def read_cells(file_name: str, data: bytes) -> list[RawRow]:
    """Dispatch on extension and return every row of the first table."""
    ext = extension_of(file_name)
    if ext in TEXT_EXTENSIONS:
        rows = read_delimited(data)
    elif ext in WORKBOOK_EXTENSIONS:
        rows = read_workbook(data)
    else:
        raise UnsupportedFileError(file_name, ext)
    if not rows:
        raise EmptyFileError(f"{file_name} contains no rows")
    logger.debug("Read %d raw rows from %s", len(rows), file_name)
    return rows
