"""Compensation-review sheet import: recommendations, notes and USD raises."""

from __future__ import annotations

import logging
from collections import Counter
from decimal import Decimal

from meritflow.core.config import IngestionConfig
from meritflow.imports.proposals import read_upload
from meritflow.ingestion.parser import map_row
from meritflow.ingestion.schema import COMP_REVIEW_FIELDS, resolve_columns
from meritflow.joining.similarity import normalize_employee_id
from meritflow.metrics.compensation import recalculate_compensation
from meritflow.models.employee import Employee
from meritflow.models.money import round_half_up
from meritflow.models.proposals import CompReviewRow, ImportSummary, ProposalImportResult
from meritflow.models.results import IssueType, Severity, ValidationIssue

logger = logging.getLogger(__name__)


def parse_comp_review_file(file_name: str, data: bytes,
                           config: IngestionConfig | None = None) -> tuple[list[CompReviewRow], list[ValidationIssue]]:
    config = config or IngestionConfig()
    table, issues = read_upload(file_name, data, config, config.allowed_extensions,
                                config.max_file_size_mb)
    if table is None:
        return [], issues
    mapping = resolve_columns(table.headers, COMP_REVIEW_FIELDS, "comp_review")
    if not mapping.has("employee_id"):
        return [], [ValidationIssue(
            type=IssueType.MISSING_COLUMN,
            message="Compensation review sheet has no Employee ID column",
            field="employee_id",
            fatal=True,
        )]
    rows = [
        CompReviewRow(row_number=line, **map_row(cells, mapping))
        for cells, line in zip(table.rows, table.row_numbers)
    ]
    return rows, issues


def validate_for_merge(rows: list[CompReviewRow]) -> list[ValidationIssue]:
    """Pre-merge checks. Only an empty sheet is an error."""
    if not rows:
        return [ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA,
            message="No compensation review data provided",
        )]
    issues: list[ValidationIssue] = []

    counts = Counter(normalize_employee_id(r.employee_id) for r in rows if r.employee_id)
    duplicates = sorted(i for i, n in counts.items() if n > 1)
    if duplicates:
        issues.append(ValidationIssue(
            type=IssueType.DUPLICATE_DATA,
            severity=Severity.WARNING,
            message=f"Duplicate employee IDs found: {', '.join(duplicates)}",
        ))

    missing = sum(1 for r in rows if not r.employee_id)
    if missing:
        issues.append(ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA,
            severity=Severity.WARNING,
            message=f"{missing} records missing employee IDs will be skipped",
        ))

    negative = sum(1 for r in rows if r.proposed_raise is not None and r.proposed_raise < 0)
    if negative:
        issues.append(ValidationIssue(
            type=IssueType.INVALID_DATA_TYPE,
            severity=Severity.WARNING,
            message=f"{negative} records have invalid proposed raise amounts",
            field="proposed_raise",
        ))
    return issues


def merge_comp_review(employees: list[Employee], rows: list[CompReviewRow]) -> ProposalImportResult:
    """Overlay review rows by case-insensitive employee ID; later rows win."""
    reviews: dict[str, CompReviewRow] = {}
    for row in rows:
        if row.employee_id:
            reviews[normalize_employee_id(row.employee_id)] = row

    result = ProposalImportResult(summary=ImportSummary(total_proposals=len(reviews)))
    total = Decimal("0")
    for employee in employees:
        review = reviews.pop(normalize_employee_id(employee.employee_id), None)
        if review is None:
            result.updated_employees.append(employee)
            continue

        updated = employee.model_copy(deep=True)
        if review.merit_recommendation is not None:
            updated.merit_recommendation = review.merit_recommendation
        if review.salary_adjustment_notes is not None:
            updated.salary_adjustment_notes = review.salary_adjustment_notes
        if review.proposed_raise is not None:
            if review.proposed_raise < 0:
                result.warnings.append(ValidationIssue(
                    type=IssueType.INVALID_DATA_TYPE,
                    severity=Severity.WARNING,
                    message=f"Employee ID {employee.employee_id}: negative raise ignored",
                    row=review.row_number,
                    employee_id=employee.employee_id,
                ))
            else:
                updated.proposed_raise = round_half_up(review.proposed_raise, 2)
                recalculate_compensation(updated)
        total += updated.proposed_raise
        result.updated_employees.append(updated)
        result.matched_employee_ids.append(updated.employee_id)
        result.summary.successful_matches += 1

    for row in reviews.values():
        result.unmatched_proposals.append(row.employee_id or "")
        result.warnings.append(ValidationIssue(
            type=IssueType.UNMATCHED_RECORD,
            severity=Severity.WARNING,
            message=f"Employee ID {row.employee_id} not found in existing data",
            row=row.row_number,
            employee_id=row.employee_id,
        ))
    result.summary.failed_matches = len(result.unmatched_proposals)
    result.summary.total_raise_amount = total
    result.success = result.summary.successful_matches > 0
    if result.unmatched_proposals:
        logger.warning("%d review rows did not match any employee", len(result.unmatched_proposals))
    return result
