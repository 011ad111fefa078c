"""Manager proposal import: overrides raises and promotions on joined employees.

Proposals are matched by employee ID only. A raise may arrive as a USD
amount, a percent of the USD salary, or a proposed local salary; all three
are turned into a USD raise and the record is recomputed, so ``new_salary``
stays in local currency.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Optional

from meritflow.core.config import IngestionConfig
from meritflow.core.exceptions import IngestionError
from meritflow.ingestion.headers import Table, extract_table
from meritflow.ingestion.parser import map_row
from meritflow.ingestion.readers import read_cells
from meritflow.ingestion.schema import PROPOSAL_FIELDS, resolve_columns
from meritflow.ingestion.validation import validate_upload
from meritflow.joining.similarity import normalize_employee_id
from meritflow.metrics.compensation import recalculate_compensation
from meritflow.models.employee import Employee
from meritflow.models.money import round_half_up, to_decimal
from meritflow.models.policy import PromotionType
from meritflow.models.proposals import ImportSummary, ProposalImportResult, ProposalRow
from meritflow.models.results import IssueType, Severity, ValidationIssue

logger = logging.getLogger(__name__)

PROPOSAL_EXTENSIONS = [".csv"]


def read_upload(file_name: str, data: bytes, config: IngestionConfig,
                allowed_extensions: list[str], max_size_mb: int) -> tuple[Optional[Table], list[ValidationIssue]]:
    """Upfront checks plus header detection, shared by the override imports."""
    issues = validate_upload(file_name, len(data), config,
                             max_size_mb=max_size_mb, allowed_extensions=allowed_extensions)
    if issues:
        return None, issues
    try:
        cells = read_cells(file_name, data)
        table = extract_table(cells, scan_rows=config.header_scan_rows, min_cells=1)
    except IngestionError as exc:
        return None, [ValidationIssue(type=IssueType.CORRUPTED_FILE, message=str(exc), fatal=True)]
    if not table.rows:
        return None, [ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA,
            message=f"{file_name} has a header but no data rows",
            fatal=True,
        )]
    return table, []


def normalize_promotion_type(value: Optional[str]) -> Optional[str]:
    """Free-text promotion type to VERTICAL / LATERAL / INTERNAL / DEMOTION.

    Anything unrecognised is kept, upper-cased.
    """
    if not value or not value.strip():
        return None
    lowered = value.strip().lower()
    if "vertical" in lowered or re.search(r"\bup\b", lowered):
        return PromotionType.VERTICAL.value
    if "lateral" in lowered or "same level" in lowered:
        return PromotionType.LATERAL.value
    if "internal" in lowered or "within" in lowered:
        return PromotionType.INTERNAL.value
    if "demotion" in lowered or re.search(r"\bdown\b", lowered):
        return PromotionType.DEMOTION.value
    return value.strip().upper()


def parse_proposal_file(file_name: str, data: bytes,
                        config: IngestionConfig | None = None) -> tuple[list[ProposalRow], list[ValidationIssue]]:
    """Read a manager proposal CSV. Returns (rows, issues); fatal issues mean no rows."""
    config = config or IngestionConfig()
    table, issues = read_upload(file_name, data, config, PROPOSAL_EXTENSIONS,
                                config.proposal_max_file_size_mb)
    if table is None:
        return [], issues

    mapping = resolve_columns(table.headers, PROPOSAL_FIELDS, "proposal")
    if not mapping.has("employee_id"):
        return [], [ValidationIssue(
            type=IssueType.MISSING_COLUMN,
            message="Proposal file has no Employee ID column",
            field="employee_id",
            suggestion="Add an 'Employee Number' or 'Employee ID' column",
            fatal=True,
        )]

    rows: list[ProposalRow] = []
    for cells, line in zip(table.rows, table.row_numbers):
        record = map_row(cells, mapping)
        if not record.get("employee_id"):
            issues.append(ValidationIssue(
                type=IssueType.MISSING_REQUIRED_DATA,
                severity=Severity.WARNING,
                message=f"Row {line}: skipping proposal with missing Employee ID",
                row=line,
            ))
            continue
        record["promotion_type"] = normalize_promotion_type(record.get("promotion_type"))
        rows.append(ProposalRow(row_number=line, **record))

    if not rows:
        issues.append(ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA,
            message="No valid proposal data found",
            fatal=True,
        ))
    logger.info("Read %d proposals from %s", len(rows), file_name)
    return rows, issues


def _raise_usd(employee: Employee, proposal: ProposalRow) -> tuple[Optional[Decimal], Optional[str]]:
    """USD raise implied by a proposal, or (None, reason) when it cannot be placed."""
    ratio = employee.local_per_usd
    if proposal.proposed_raise is not None:
        amount = proposal.proposed_raise
        local = employee.currency
        if proposal.currency and proposal.currency == local and local != "USD":
            if ratio is None:
                return None, f"No USD salary for {employee.employee_id}; local raise not converted"
            amount = amount / ratio
        return amount, None
    if proposal.proposed_raise_percent is not None:
        base_usd = employee.base_salary_usd_money
        if base_usd.amount <= 0:
            return None, f"No USD salary for {employee.employee_id}; raise percent not applied"
        return base_usd.scale(to_decimal(proposal.proposed_raise_percent) / 100).amount, None
    if proposal.proposed_salary is not None:
        if ratio is None:
            return None, f"No USD salary for {employee.employee_id}; proposed salary not converted"
        return (proposal.proposed_salary - employee.base_salary) / ratio, None
    return None, None


def _apply_promotion(employee: Employee, proposal: ProposalRow) -> None:
    if proposal.has_promotion is not None:
        employee.has_promotion = proposal.has_promotion
    if proposal.new_job_title:
        employee.new_job_title = proposal.new_job_title
        employee.has_promotion = True
    if proposal.new_salary_grade:
        employee.new_salary_grade = proposal.new_salary_grade
        employee.has_promotion = True
    for field in (
        "promotion_type", "promotion_justification", "promotion_effective_date",
        "new_salary_grade_min", "new_salary_grade_mid", "new_salary_grade_max",
    ):
        value = getattr(proposal, field)
        if value is not None:
            setattr(employee, field, value)


def merge_proposal(employee: Employee, proposal: ProposalRow) -> tuple[Employee, list[str]]:
    """Copy of ``employee`` with one proposal applied, plus any warnings."""
    updated = employee.model_copy(deep=True)
    notes: list[str] = []

    amount, problem = _raise_usd(updated, proposal)
    if problem:
        notes.append(problem)
    if amount is not None:
        if amount < 0:
            notes.append(f"Employee ID {proposal.employee_id}: negative raise ignored")
        else:
            updated.proposed_raise = round_half_up(amount, 2)

    if proposal.salary_recommendation:
        updated.merit_recommendation = proposal.salary_recommendation
    if proposal.adjustment_notes:
        updated.salary_adjustment_notes = proposal.adjustment_notes
    _apply_promotion(updated, proposal)
    return recalculate_compensation(updated), notes


def merge_proposals(employees: list[Employee], proposals: list[ProposalRow]) -> ProposalImportResult:
    """Apply proposals by employee ID; the input list is not modified."""
    updated = list(employees)
    index = {normalize_employee_id(e.employee_id): i for i, e in enumerate(employees)}
    result = ProposalImportResult(summary=ImportSummary(total_proposals=len(proposals)))

    for proposal in proposals:
        position = index.get(normalize_employee_id(proposal.employee_id))
        if position is None:
            result.warnings.append(ValidationIssue(
                type=IssueType.UNMATCHED_RECORD,
                severity=Severity.WARNING,
                message=f"Employee ID {proposal.employee_id} not found in existing data",
                row=proposal.row_number,
                employee_id=proposal.employee_id,
            ))
            result.unmatched_proposals.append(proposal.employee_id)
            result.summary.failed_matches += 1
            continue

        merged, notes = merge_proposal(updated[position], proposal)
        updated[position] = merged
        for note in notes:
            result.warnings.append(ValidationIssue(
                type=IssueType.INCONSISTENT_DATA,
                severity=Severity.WARNING,
                message=note,
                row=proposal.row_number,
                employee_id=proposal.employee_id,
            ))
        result.matched_employee_ids.append(merged.employee_id)
        result.summary.successful_matches += 1

    matched = {normalize_employee_id(i) for i in result.matched_employee_ids}
    result.summary.total_raise_amount = sum(
        (e.proposed_raise for e in updated if normalize_employee_id(e.employee_id) in matched),
        Decimal("0"),
    )
    result.updated_employees = updated
    result.success = result.summary.successful_matches > 0
    logger.info(
        "Proposal merge: %d matched, %d unmatched, %s USD in raises",
        result.summary.successful_matches, result.summary.failed_matches,
        result.summary.total_raise_amount,
    )
    return result


def import_proposals(file_name: str, data: bytes, employees: list[Employee],
                     config: IngestionConfig | None = None) -> ProposalImportResult:
    """Parse and merge in one step, for callers holding raw bytes."""
    rows, issues = parse_proposal_file(file_name, data, config)
    fatal = [i for i in issues if i.fatal]
    if fatal:
        return ProposalImportResult(success=False, updated_employees=list(employees), errors=fatal)
    result = merge_proposals(employees, rows)
    result.warnings[:0] = issues
    return result
