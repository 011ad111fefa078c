"""File ingestion: raw bytes to validated SalaryRow / PerformanceRow lists.

``parse_file`` never raises for bad input. Anything wrong with the file
comes back as structured issues on the :class:`ParseResult`; unexpected
exceptions are logged and turned into a single fatal CORRUPTED_FILE issue so
one malformed upload cannot take down a multi-file batch.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from typing import Any

from meritflow.core.config import IngestionConfig
from meritflow.core.exceptions import EmptyFileError, HeaderNotFoundError, IngestionError, UnsupportedFileError
from meritflow.ingestion.coerce import coerce
from meritflow.ingestion.headers import Table, extract_table
from meritflow.ingestion.readers import read_cells
from meritflow.ingestion.schema import (
    EMBEDDED_PERFORMANCE_FIELDS,
    PERFORMANCE_FIELDS,
    SALARY_FIELDS,
    analyze_workday_format,
    has_performance_headers,
    resolve_columns,
)
from meritflow.ingestion.validation import (
    assess_quality,
    check_performance_columns,
    check_salary_columns,
    duplicate_warnings,
    validate_performance_row,
    validate_salary_row,
    validate_upload,
)
from meritflow.models.results import FileType, IssueType, ParseResult, Severity, ValidationIssue
from meritflow.models.rows import PerformanceRow, SalaryRow
from meritflow.models.schema_mapping import SchemaMapping

logger = logging.getLogger(__name__)


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def map_row(cells: list[str], mapping: SchemaMapping) -> dict[str, Any]:
    """Fixed-shape dict of coerced values for one data row."""
    record: dict[str, Any] = {}
    for column in mapping.column_mappings:
        value = None
        for position in column.positions:
            if position < len(cells) and cells[position]:
                value = coerce(column.data_type, cells[position])
                if value is not None:
                    break
        record[column.target_field] = value
    return record


def _mapping_for(table: Table, file_type: FileType) -> tuple[SchemaMapping, bool]:
    if file_type is FileType.PERFORMANCE:
        return resolve_columns(table.headers, PERFORMANCE_FIELDS, "performance"), False
    combined = has_performance_headers(table.headers)
    fields = SALARY_FIELDS + EMBEDDED_PERFORMANCE_FIELDS if combined else SALARY_FIELDS
    return resolve_columns(table.headers, fields, "salary"), combined


def _build_rows(table: Table, file_type: FileType, file_name: str,
                config: IngestionConfig, declared: bool) -> ParseResult:
    """Map, coerce and validate every data row as ``file_type``."""
    mapping, combined = _mapping_for(table, file_type)
    result = ParseResult(
        file_name=file_name,
        file_type=file_type,
        row_count=len(table.rows),
        header_row_index=table.header_row_index,
        removed_rows=table.removed_rows,
        headers=table.headers,
    )

    column_issues = (
        check_performance_columns(mapping)
        if file_type is FileType.PERFORMANCE
        else check_salary_columns(mapping)
    )
    if column_issues:
        result.errors.extend(column_issues)
        return result

    model = PerformanceRow if file_type is FileType.PERFORMANCE else SalaryRow
    validate = validate_performance_row if file_type is FileType.PERFORMANCE else validate_salary_row
    for cells, line in zip(table.rows, table.row_numbers):
        row = model(row_number=line, **map_row(cells, mapping))
        row_errors, row_warnings = validate(row)
        result.warnings.extend(row_warnings)
        if row_errors:
            result.errors.extend(row_errors)
            continue
        result.data.append(row)
    result.valid_rows = len(result.data)

    if combined:
        result.warnings.append(ValidationIssue(
            type=IssueType.INCONSISTENT_DATA,
            severity=Severity.INFO,
            message="Combined salary and performance export; performance fields merged onto salary rows",
        ))

    if result.row_count and result.valid_rows == 0:
        what = "salary" if file_type is FileType.SALARY else "performance"
        result.errors.append(ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA,
            message=f"No rows contain valid {what} data",
            suggestion="Check that the ID, name and salary columns are filled in",
            fatal=True,
        ))
    elif file_type is FileType.SALARY and not declared and result.validity_rate <= config.salary_validity_threshold:
        result.errors.append(ValidationIssue(
            type=IssueType.LOW_VALIDITY,
            message=f"Only {result.valid_rows} of {result.row_count} rows contain valid salary data",
            fatal=True,
        ))
    elif result.row_count and result.validity_rate < config.low_validity_warning_ratio:
        result.warnings.append(ValidationIssue(
            type=IssueType.LOW_VALIDITY,
            severity=Severity.WARNING,
            message=f"Only {result.valid_rows} of {result.row_count} rows are valid",
            suggestion="Review the row errors; the file may be the wrong export",
        ))

    result.quality = assess_quality(result.data, mapping.fields)
    result.warnings.extend(duplicate_warnings(result.quality))
    for hint in analyze_workday_format(table.headers) if mapping.unmapped_headers else []:
        result.warnings.append(ValidationIssue(
            type=IssueType.INVALID_FORMAT, severity=Severity.INFO, message=hint,
        ))
    return result


def _fatal(file_name: str, issue_type: IssueType, message: str,
           suggestion: str | None = None) -> ParseResult:
    return ParseResult(
        file_name=file_name,
        errors=[ValidationIssue(type=issue_type, message=message, suggestion=suggestion, fatal=True)],
    )


def parse_table(table: Table, file_name: str, expected_type: FileType | str = FileType.UNKNOWN,
                config: IngestionConfig | None = None) -> ParseResult:
    """Type selection over an already-extracted table."""
    config = config or IngestionConfig()
    expected = FileType(expected_type)

    if expected is FileType.SALARY:
        return _build_rows(table, FileType.SALARY, file_name, config, declared=True)
    if expected is FileType.PERFORMANCE:
        return _build_rows(table, FileType.PERFORMANCE, file_name, config, declared=True)

    as_salary = _build_rows(table, FileType.SALARY, file_name, config, declared=False)
    if as_salary.accepted and as_salary.validity_rate > config.salary_validity_threshold:
        return as_salary
    as_performance = _build_rows(table, FileType.PERFORMANCE, file_name, config, declared=True)
    if as_performance.accepted and as_performance.validity_rate > as_salary.validity_rate:
        logger.info("%s parsed as performance data (%.0f%% valid)",
                    file_name, as_performance.validity_rate * 100)
        return as_performance
    return as_salary


def parse_file(file_name: str, data: bytes, expected_type: FileType | str = FileType.UNKNOWN,
               config: IngestionConfig | None = None) -> ParseResult:
    """Parse one uploaded file into typed rows plus structured issues."""
    config = config or IngestionConfig()
    upfront = validate_upload(file_name, len(data), config)
    if upfront:
        logger.warning("Rejected %s before parsing: %s", file_name, upfront[0].message)
        return ParseResult(file_name=file_name, errors=upfront)

    try:
        cells = read_cells(file_name, data)
        table = extract_table(cells, scan_rows=config.header_scan_rows,
                              min_cells=config.min_header_cells)
        result = parse_table(table, file_name, expected_type, config)
    except UnsupportedFileError as exc:
        return _fatal(file_name, IssueType.UNSUPPORTED_FILE_TYPE, str(exc))
    except (EmptyFileError, HeaderNotFoundError) as exc:
        return _fatal(file_name, IssueType.CORRUPTED_FILE, str(exc),
                      "Check the file has a header row and data")
    except IngestionError as exc:
        logger.warning("Could not read %s: %s", file_name, exc)
        return _fatal(file_name, IssueType.CORRUPTED_FILE, str(exc))
    except Exception as exc:
        logger.exception("Unexpected failure parsing %s", file_name)
        return _fatal(file_name, IssueType.CORRUPTED_FILE,
                      f"Critical parsing error: {exc}",
                      "The file may be damaged; try re-exporting it")

    result.content_hash = content_hash(data)
    logger.info(
        "Parsed %s as %s: %d/%d valid rows, %d errors, %d warnings",
        file_name, result.file_type, result.valid_rows, result.row_count,
        len(result.errors), len(result.warnings),
    )
    return result


def ingest_files(files: Iterable[tuple[str, bytes]],
                 expected_type: FileType | str = FileType.UNKNOWN,
                 config: IngestionConfig | None = None) -> list[ParseResult]:
    """Parse several files; a failure in one never stops the others."""
    return [parse_file(name, data, expected_type, config) for name, data in files]
