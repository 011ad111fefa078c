"""Join salary rows to performance rows and build Employee records.

Each salary row looks for its performance row by employee ID, by email and
finally by fuzzy name, in the order set by :class:`JoinOptions`. A matched
performance row leaves the candidate pool so it can never be used twice.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from meritflow.core.config import JoinConfig
from meritflow.core.regions import default_currency
from meritflow.joining.similarity import (
    name_similarity,
    normalize_email,
    normalize_employee_id,
    normalize_name_key,
)
from meritflow.metrics.compensation import compute_comparatio
from meritflow.models.employee import DEFAULT_RETENTION_RISK, Employee
from meritflow.models.results import (
    EmployeeValidation,
    IssueType,
    JoinResult,
    JoinSummary,
    MatchRecord,
    MatchType,
    Severity,
    ValidationIssue,
)
from meritflow.models.rows import PerformanceFields, PerformanceRow, PersonFields, SalaryRow
from meritflow.names.normalizer import normalize_name

logger = logging.getLogger(__name__)

COMPARATIO_PLAUSIBLE = (50.0, 200.0)


class JoinOptions(BaseModel):
    prefer_email_match: bool = True
    require_exact_name_match: bool = False
    name_similarity_threshold: float = 0.8

    @classmethod
    def from_config(cls, config: JoinConfig | None = None) -> JoinOptions:
        config = config or JoinConfig()
        return cls(
            prefer_email_match=config.prefer_email_match,
            require_exact_name_match=config.require_exact_name_match,
            name_similarity_threshold=config.name_similarity_threshold,
        )


def _name_key(row: PersonFields) -> str:
    return normalize_name_key(row.display_source_name)


class _CandidatePool:
    """Unmatched performance rows with lookup indexes."""

    def __init__(self, rows: Sequence[PerformanceRow]) -> None:
        self.rows = list(rows)
        self.used: set[int] = set()
        self._by_id: dict[str, list[int]] = {}
        self._by_email: dict[str, list[int]] = {}
        self._name_keys = [_name_key(r) for r in self.rows]
        for index, row in enumerate(self.rows):
            if key := normalize_employee_id(row.employee_id):
                self._by_id.setdefault(key, []).append(index)
            if key := normalize_email(row.email):
                self._by_email.setdefault(key, []).append(index)

    def _first_free(self, candidates: list[int]) -> Optional[int]:
        return next((i for i in candidates if i not in self.used), None)

    def by_id(self, employee_id: Optional[str]) -> Optional[int]:
        key = normalize_employee_id(employee_id)
        return self._first_free(self._by_id.get(key, [])) if key else None

    def by_email(self, email: Optional[str]) -> Optional[int]:
        key = normalize_email(email)
        return self._first_free(self._by_email.get(key, [])) if key else None

    def by_name(self, name_key: str, threshold: float) -> tuple[Optional[int], float]:
        """Best-scoring free row strictly above ``threshold``; earliest wins ties."""
        if not name_key:
            return None, 0.0
        best, best_score = None, threshold
        for index, candidate in enumerate(self._name_keys):
            if index in self.used or not candidate:
                continue
            score = name_similarity(name_key, candidate)
            if score > best_score:
                best, best_score = index, score
        return best, (best_score if best is not None else 0.0)

    def take(self, index: int) -> PerformanceRow:
        self.used.add(index)
        return self.rows[index]

    def remaining(self) -> list[PerformanceRow]:
        return [r for i, r in enumerate(self.rows) if i not in self.used]


def _find_match(row: SalaryRow, pool: _CandidatePool,
                options: JoinOptions) -> tuple[Optional[int], MatchType, Optional[float]]:
    if not options.prefer_email_match and (found := pool.by_id(row.employee_id)) is not None:
        return found, MatchType.ID, None
    if (found := pool.by_email(row.email)) is not None:
        return found, MatchType.EMAIL, None
    if options.prefer_email_match and (found := pool.by_id(row.employee_id)) is not None:
        return found, MatchType.ID, None
    if not options.require_exact_name_match:
        found, score = pool.by_name(_name_key(row), options.name_similarity_threshold)
        if found is not None:
            return found, MatchType.NAME, score
    return None, MatchType.UNMATCHED, None


def _performance_value(field: str, performance: Optional[PerformanceFields], salary: SalaryRow):
    if performance is not None:
        value = getattr(performance, field)
        if value is not None:
            return value
    return getattr(salary, field)


def merge_rows(salary: SalaryRow, performance: Optional[PerformanceRow] = None) -> Employee:
    """Build one Employee from a salary row and its matched performance row.

    Without a performance row, performance fields fall back to anything a
    combined export carried on the salary row, then to neutral defaults.
    """
    parsed = normalize_name({
        "name": salary.name,
        "first_name": salary.first_name,
        "last_name": salary.last_name,
    })
    base = salary.base_salary if salary.base_salary is not None else Decimal("0")
    currency = salary.currency or default_currency(salary.country)
    risk = _performance_value("retention_risk", performance, salary)

    return Employee(
        employee_id=salary.employee_id or "",
        email=salary.email or (performance.email if performance else None),
        name=salary.display_source_name or parsed.display_name,
        first_name=parsed.first_name,
        last_name=parsed.last_name,
        middle_name=parsed.middle_name,
        display_name=parsed.display_name,
        country=salary.country,
        department_code=salary.department_code,
        job_title=salary.job_title,
        grade_level=salary.grade_level,
        manager_id=salary.manager_id,
        manager_name=salary.manager_name,
        management_level=salary.management_level,
        is_manager=salary.is_manager,
        is_team_lead=salary.is_team_lead,
        currency=currency,
        base_salary=base,
        base_salary_usd=base if currency == "USD" else None,
        salary_grade_min=salary.salary_grade_min,
        salary_grade_mid=salary.salary_grade_mid,
        salary_grade_max=salary.salary_grade_max,
        comparatio=compute_comparatio(base, salary.salary_grade_mid) or salary.comparatio,
        salary_range_segment=salary.salary_range_segment,
        below_range_minimum=salary.below_range_minimum,
        hire_date=salary.hire_date,
        role_start_date=salary.role_start_date,
        last_raise_date=salary.last_raise_date,
        time_in_role=salary.time_in_role,
        performance_rating=_performance_value("performance_rating", performance, salary),
        business_impact_score=_performance_value("business_impact_score", performance, salary),
        retention_risk=risk if risk is not None else DEFAULT_RETENTION_RISK,
        retention_risk_supplied=risk is not None,
        future_talent=_performance_value("future_talent", performance, salary),
        movement_readiness=_performance_value("movement_readiness", performance, salary),
        proposed_talent_actions=_performance_value("proposed_talent_actions", performance, salary),
        proposed_raise=Decimal("0"),
        new_salary=base,
    )


def validate_employee_record(employee: Employee) -> EmployeeValidation:
    """Errors exclude the record from the join; warnings only annotate it."""
    ref = employee.employee_id or None
    result = EmployeeValidation(employee_id=ref)

    def error(field: str, message: str) -> None:
        result.errors.append(ValidationIssue(
            type=IssueType.MISSING_REQUIRED_DATA, message=message, field=field, employee_id=ref,
        ))

    def warn(field: str, message: str, issue_type: IssueType = IssueType.MISSING_REQUIRED_DATA) -> None:
        result.warnings.append(ValidationIssue(
            type=issue_type, severity=Severity.WARNING, message=message, field=field, employee_id=ref,
        ))

    if not employee.employee_id:
        error("employee_id", "Employee ID is required")
    if not (employee.name or employee.display_name):
        error("name", f"Employee {ref or '?'}: name is required")
    if employee.base_salary <= 0:
        error("base_salary", f"Employee {ref or '?'}: base salary must be greater than 0")

    if employee.performance_rating is None:
        warn("performance_rating", f"Employee {ref}: no performance rating")
    if not employee.country:
        warn("country", f"Employee {ref}: no country specified")
    low, high = COMPARATIO_PLAUSIBLE
    if employee.comparatio is not None and not low <= employee.comparatio <= high:
        warn("comparatio", f"Employee {ref}: comparatio {employee.comparatio:g}% is outside {low:g}-{high:g}%",
             IssueType.INCONSISTENT_DATA)
    return result


def join_records(salary_rows: Sequence[SalaryRow], performance_rows: Sequence[PerformanceRow],
                 options: JoinOptions | None = None) -> JoinResult:
    """Match every salary row against the performance pool and merge."""
    options = options or JoinOptions()
    pool = _CandidatePool(performance_rows)
    summary = JoinSummary(
        total_salary_rows=len(salary_rows),
        total_performance_rows=len(performance_rows),
    )
    result = JoinResult(summary=summary)

    for position, row in enumerate(salary_rows):
        index, match_type, score = _find_match(row, pool, options)
        performance = pool.take(index) if index is not None else None
        if match_type is MatchType.ID:
            summary.id_matches += 1
        elif match_type is MatchType.EMAIL:
            summary.email_matches += 1
        elif match_type is MatchType.NAME:
            summary.name_matches += 1
        else:
            summary.unmatched_salary += 1
            result.unmatched_salary_rows.append(row)

        result.matches.append(MatchRecord(
            salary_row=row.row_number or position + 1,
            employee_id=row.employee_id,
            match_type=match_type,
            performance_row=performance.row_number if performance else None,
            similarity=score,
        ))

        employee = merge_rows(row, performance)
        validation = validate_employee_record(employee)
        result.validation_results.append(validation)
        if validation.is_valid:
            result.joined_employees.append(employee)
        else:
            logger.info("Excluded employee %s: %s", row.reference,
                        "; ".join(e.message for e in validation.errors))

    summary.successful_joins = summary.id_matches + summary.email_matches + summary.name_matches
    result.unmatched_performance_rows = pool.remaining()
    summary.unmatched_performance = len(result.unmatched_performance_rows)
    logger.info(
        "Joined %d salary rows: %d by id, %d by email, %d by name, %d unmatched; %d performance rows left",
        summary.total_salary_rows, summary.id_matches, summary.email_matches,
        summary.name_matches, summary.unmatched_salary, summary.unmatched_performance,
    )
    return result
