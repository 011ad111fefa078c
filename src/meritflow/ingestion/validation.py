"""File-level and row-level validation for ingested sheets."""

from __future__ import annotations

from collections import Counter

from meritflow.core.config import IngestionConfig
from meritflow.ingestion.readers import extension_of
from meritflow.models.rating import NumericRating
from meritflow.models.results import DataQuality, IssueType, Severity, ValidationIssue
from meritflow.models.rows import PerformanceRow, SalaryRow
from meritflow.models.schema_mapping import SchemaMapping

LEGACY_EXCEL = ".xls"


def validate_upload(file_name: str, size: int, config: IngestionConfig | None = None,
                    max_size_mb: int | None = None,
                    allowed_extensions: list[str] | None = None) -> list[ValidationIssue]:
    """Reject files we should not even try to read. Returns fatal issues."""
    config = config or IngestionConfig()
    limit_mb = max_size_mb if max_size_mb is not None else config.max_file_size_mb
    allowed = allowed_extensions if allowed_extensions is not None else config.allowed_extensions
    issues: list[ValidationIssue] = []

    ext = extension_of(file_name)
    if ext not in allowed:
        hint = (
            "Legacy .xls workbooks are not supported; save the sheet as .xlsx or .csv"
            if ext == LEGACY_EXCEL
            else f"Upload one of: {', '.join(allowed)}"
        )
        issues.append(ValidationIssue(
            type=IssueType.UNSUPPORTED_FILE_TYPE,
            message=f"Unsupported file type {ext or '(none)'} for {file_name}",
            suggestion=hint,
            fatal=True,
        ))

    limit_bytes = limit_mb * 1024 * 1024
    if size > limit_bytes:
        issues.append(ValidationIssue(
            type=IssueType.FILE_TOO_LARGE,
            message=f"File is {size / 1024 / 1024:.1f}MB; maximum is {limit_mb}MB",
            suggestion="Split the export or remove unused columns",
            fatal=True,
        ))
    if size == 0:
        issues.append(ValidationIssue(
            type=IssueType.CORRUPTED_FILE,
            message=f"{file_name} is empty",
            suggestion="Re-export the file from the source system",
            fatal=True,
        ))
    return issues


def check_salary_columns(mapping: SchemaMapping) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not mapping.has("employee_id"):
        issues.append(_missing_column("employee_id", "Employee ID / Employee Number"))
    if not mapping.has("name", "first_name", "last_name"):
        issues.append(_missing_column("name", "Name / Employee Full Name"))
    if not mapping.has("base_salary"):
        issues.append(_missing_column("base_salary", "Base Salary / Base Pay All Countries"))
    return issues


def check_performance_columns(mapping: SchemaMapping) -> list[ValidationIssue]:
    if mapping.has("employee_id", "email"):
        return []
    return [_missing_column("employee_id", "Employee ID / Associate ID / Email")]


def _missing_column(field: str, expected: str) -> ValidationIssue:
    return ValidationIssue(
        type=IssueType.MISSING_COLUMN,
        message=f"Required column for {field} not found",
        field=field,
        suggestion=f"Add a column named like: {expected}",
        fatal=True,
    )


def _row_error(row: int, field: str, message: str, ref: str | None) -> ValidationIssue:
    return ValidationIssue(
        type=IssueType.MISSING_REQUIRED_DATA,
        message=f"Row {row}: {message}",
        field=field,
        row=row,
        employee_id=ref,
    )


def _row_warning(row: int, field: str, message: str, ref: str | None,
                 issue_type: IssueType = IssueType.MISSING_REQUIRED_DATA) -> ValidationIssue:
    return ValidationIssue(
        type=issue_type,
        severity=Severity.WARNING,
        message=f"Row {row}: {message}",
        field=field,
        row=row,
        employee_id=ref,
    )


def validate_salary_row(row: SalaryRow) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    """Return (errors, warnings); any error excludes the row."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    n, ref = row.row_number, row.employee_id

    if not row.employee_id:
        errors.append(_row_error(n, "employee_id", "missing employee ID", ref))
    if not row.has_name:
        errors.append(_row_error(n, "name", "missing employee name", ref))
    if row.base_salary is None:
        errors.append(_row_error(n, "base_salary", "missing base salary", ref))
    elif row.base_salary <= 0:
        errors.append(ValidationIssue(
            type=IssueType.INVALID_DATA_TYPE,
            message=f"Row {n}: base salary must be positive (got {row.base_salary})",
            field="base_salary", row=n, employee_id=ref,
        ))

    if not row.country:
        warnings.append(_row_warning(n, "country", "no country specified", ref))
    if not row.currency:
        warnings.append(_row_warning(n, "currency", "no currency specified, will be inferred", ref))
    if row.time_in_role is not None and row.time_in_role < 0:
        warnings.append(_row_warning(n, "time_in_role", "time in role is negative",
                                     ref, IssueType.INVALID_DATA_TYPE))
    if (row.salary_grade_min is not None and row.salary_grade_max is not None
            and row.salary_grade_min > row.salary_grade_max):
        warnings.append(_row_warning(n, "salary_grade_min", "grade minimum exceeds maximum",
                                     ref, IssueType.INCONSISTENT_DATA))
    return errors, warnings


def validate_performance_row(row: PerformanceRow) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    n, ref = row.row_number, row.employee_id or row.email

    if not row.employee_id and not row.email:
        errors.append(_row_error(n, "employee_id", "missing employee ID or email", ref))

    rating = row.performance_rating
    if isinstance(rating, NumericRating) and rating.scale != 1 and not 0 <= rating.value <= 5:
        warnings.append(_row_warning(n, "performance_rating",
                                     f"rating {rating.value:g} is outside 0-5",
                                     ref, IssueType.INVALID_DATA_TYPE))
    if row.retention_risk is not None and not 0 <= row.retention_risk <= 100:
        warnings.append(_row_warning(n, "retention_risk",
                                     f"retention risk {row.retention_risk:g} is outside 0-100",
                                     ref, IssueType.INVALID_DATA_TYPE))
    return errors, warnings


def assess_quality(rows: list[SalaryRow | PerformanceRow], mapped_fields: set[str]) -> DataQuality:
    """Completeness over mapped fields plus duplicate employee IDs."""
    ids = [r.employee_id.lower() for r in rows if r.employee_id]
    counts = Counter(ids)
    duplicates = sorted(i for i, c in counts.items() if c > 1)

    filled = total = 0
    for row in rows:
        values = row.model_dump(include=mapped_fields)
        total += len(values)
        filled += sum(1 for v in values.values() if v not in (None, ""))
    completeness = round(filled / total * 100, 1) if total else 0.0
    return DataQuality(
        completeness_score=completeness,
        duplicate_count=sum(counts[i] - 1 for i in duplicates),
        duplicate_ids=duplicates,
    )


def duplicate_warnings(quality: DataQuality) -> list[ValidationIssue]:
    if not quality.duplicate_ids:
        return []
    shown = ", ".join(quality.duplicate_ids[:10])
    return [ValidationIssue(
        type=IssueType.DUPLICATE_DATA,
        severity=Severity.WARNING,
        message=f"{quality.duplicate_count} duplicate employee ID(s): {shown}",
        field="employee_id",
        suggestion="Later rows will not be matched separately; remove duplicates at the source",
    )]
