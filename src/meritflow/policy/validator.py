"""Raise-policy validation.

Every check is recomputed from the current Employee state and settings on
each call. Nothing here mutates its inputs or keeps state between calls.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from meritflow.core.regions import is_india
from meritflow.metrics.compensation import compute_comparatio, raise_in_local_currency
from meritflow.metrics.dates import months_between, parse_date
from meritflow.models.employee import Employee
from meritflow.models.money import round_half_up
from meritflow.models.policy import (
    BudgetContext,
    PolicySettings,
    PolicyViolation,
    PromotionType,
    ViolationSeverity,
    ViolationType,
)

_GRADE_NUMBER = re.compile(r"(\d+)")


class ViolationLevel(StrEnum):
    NONE = "none"
    WARNING = "warning"
    ERROR = "error"


def raise_cap(employee: Employee, policies: PolicySettings) -> float:
    india = is_india(employee.country)
    if employee.has_promotion:
        return policies.max_promotion_raise_percent_india if india else policies.max_promotion_raise_percent_us
    return policies.max_raise_percent_india if india else policies.max_raise_percent_us


def raise_percent(employee: Employee) -> Optional[float]:
    """Raise as a percent of USD base; None when the USD base is unknown."""
    base_usd = employee.base_salary_usd_money
    if base_usd.amount <= 0:
        return None
    return float(employee.proposed_raise_money.ratio_to(base_usd) * 100)


def grade_number(grade: Optional[str]) -> Optional[int]:
    if not grade:
        return None
    match = _GRADE_NUMBER.search(grade)
    return int(match.group(1)) if match else None


def _violation(employee: Employee, vtype: ViolationType, severity: ViolationSeverity, message: str,
               current: Optional[float] = None, threshold: Optional[float] = None) -> PolicyViolation:
    return PolicyViolation(
        type=vtype,
        severity=severity,
        message=message,
        employee_id=employee.employee_id,
        employee_name=employee.label,
        current_value=current,
        threshold=threshold,
    )


def _check_comparatio(employee: Employee, policies: PolicySettings) -> list[PolicyViolation]:
    floor = policies.comparatio_floor
    mid = employee.effective_grade_mid
    if employee.proposed_raise > 0 and mid:
        projected_salary = employee.base_salary_money + raise_in_local_currency(employee)
        projected = compute_comparatio(projected_salary.amount, mid)
        if projected is not None and projected < floor:
            return [_violation(
                employee, ViolationType.COMPARATIO_TOO_LOW, ViolationSeverity.WARNING,
                f"Projected comparatio {projected:g}% after the proposed raise is below the minimum of {floor:g}%",
                projected, floor,
            )]
        return []
    current = employee.comparatio
    if current and current < floor:
        return [_violation(
            employee, ViolationType.COMPARATIO_TOO_LOW, ViolationSeverity.WARNING,
            f"Comparatio {current:g}% is below the minimum of {floor:g}%",
            current, floor,
        )]
    return []


def _check_raise_ceiling(employee: Employee, policies: PolicySettings) -> list[PolicyViolation]:
    if employee.proposed_raise <= 0:
        return []
    percent = raise_percent(employee)
    cap = raise_cap(employee, policies)
    if percent is None:
        return [_violation(
            employee, ViolationType.RAISE_NOT_VERIFIABLE, ViolationSeverity.ERROR,
            f"Raise of {employee.proposed_raise:,.2f} USD cannot be checked against the {cap:g}% cap: "
            f"no USD salary for {employee.currency}",
            None, cap,
        )]
    if percent <= cap:
        return []
    region = "India" if is_india(employee.country) else "US/other regions"
    kind = "promotion" if employee.has_promotion else "merit"
    shown = float(round_half_up(percent, 1))
    return [_violation(
        employee, ViolationType.RAISE_TOO_HIGH, ViolationSeverity.ERROR,
        f"Raise of {shown:g}% exceeds the {kind} maximum of {cap:g}% for {region}",
        shown, cap,
    )]


def _check_stale(employee: Employee, policies: PolicySettings) -> list[PolicyViolation]:
    months = employee.time_in_role
    threshold = policies.no_raise_threshold_months
    if months is None or months < threshold or employee.proposed_raise > 0:
        return []
    return [_violation(
        employee, ViolationType.NO_RAISE_TOO_LONG, ViolationSeverity.WARNING,
        f"{months:g} months in role with no raise proposed (threshold {threshold} months)",
        months, threshold,
    )]


def _check_promotion(employee: Employee, policies: PolicySettings, today: date) -> list[PolicyViolation]:
    if not employee.has_promotion:
        return []
    found: list[PolicyViolation] = []
    warn = ViolationSeverity.WARNING
    ptype = (employee.promotion_type or "").strip().upper()
    valid_types = {t.value for t in PromotionType}

    if ptype and ptype not in valid_types:
        found.append(_violation(
            employee, ViolationType.INVALID_PROMOTION_TYPE, warn,
            f"Promotion type {employee.promotion_type!r} is not one of {', '.join(sorted(valid_types))}",
        ))

    previous = parse_date(employee.last_promotion_date) or parse_date(employee.role_start_date)
    effective = parse_date(employee.promotion_effective_date) or today
    if previous is not None and previous <= effective:
        months = months_between(previous, effective)
        if months < policies.min_months_between_promotions:
            found.append(_violation(
                employee, ViolationType.PROMOTION_TOO_SOON, warn,
                f"Only {months} months since the last role change; "
                f"minimum is {policies.min_months_between_promotions}",
                months, policies.min_months_between_promotions,
            ))

    old_grade, new_grade = grade_number(employee.grade_level), grade_number(employee.new_salary_grade)
    if old_grade is not None and new_grade is not None:
        jump = new_grade - old_grade
        if jump > policies.max_grade_jump:
            found.append(_violation(
                employee, ViolationType.GRADE_JUMP_TOO_LARGE, warn,
                f"Promotion jumps {jump} grades ({employee.grade_level} to {employee.new_salary_grade}); "
                f"maximum is {policies.max_grade_jump}",
                jump, policies.max_grade_jump,
            ))

    if not (employee.promotion_justification or "").strip():
        found.append(_violation(
            employee, ViolationType.MISSING_PROMOTION_JUSTIFICATION, warn,
            "Promotion has no justification",
        ))
    if ptype != PromotionType.DEMOTION and not (employee.new_job_title or "").strip():
        found.append(_violation(
            employee, ViolationType.MISSING_NEW_TITLE, warn,
            "Promotion has no new job title",
        ))
    if ptype == PromotionType.DEMOTION and employee.proposed_raise > 0:
        found.append(_violation(
            employee, ViolationType.DEMOTION_WITH_RAISE, warn,
            "Demotion is paired with a positive raise",
            float(employee.proposed_raise), 0,
        ))
    return found


def validate_employee(employee: Employee, policies: PolicySettings | None = None,
                      today: Optional[date] = None) -> list[PolicyViolation]:
    """All rule violations for one employee; rules fire independently."""
    policies = policies or PolicySettings()
    today = today or date.today()
    return (
        _check_comparatio(employee, policies)
        + _check_raise_ceiling(employee, policies)
        + _check_stale(employee, policies)
        + _check_promotion(employee, policies, today)
    )


def validate_budget(context: BudgetContext, proposed_amount: Decimal = Decimal("0")) -> list[PolicyViolation]:
    """Flag when current usage plus ``proposed_amount`` overruns the budget (USD)."""
    new_total = context.current_usage + Decimal(str(proposed_amount))
    if new_total <= context.total_budget:
        return []
    overage = new_total - context.total_budget
    utilization: Optional[float] = None
    if context.total_budget > 0:
        utilization = float(new_total / context.total_budget * 100)
    return [PolicyViolation(
        type=ViolationType.BUDGET_EXCEEDED,
        severity=ViolationSeverity.ERROR,
        message=f"Budget exceeded by {overage:,.2f} USD",
        current_value=utilization,
        threshold=100,
    )]


def budget_context(employees: Iterable[Employee], total_budget: Decimal) -> BudgetContext:
    staff = list(employees)
    usage = sum((e.proposed_raise for e in staff), Decimal("0"))
    return BudgetContext(total_budget=total_budget, current_usage=usage, employee_count=len(staff))


def validate_all(employees: Iterable[Employee], policies: PolicySettings | None = None,
                 budget: BudgetContext | None = None, today: Optional[date] = None) -> list[PolicyViolation]:
    policies = policies or PolicySettings()
    violations: list[PolicyViolation] = []
    for employee in employees:
        violations.extend(validate_employee(employee, policies, today))
    if budget is not None:
        violations.extend(validate_budget(budget))
    return violations


def violation_level(violations: Iterable[PolicyViolation]) -> ViolationLevel:
    level = ViolationLevel.NONE
    for violation in violations:
        if violation.severity is ViolationSeverity.ERROR:
            return ViolationLevel.ERROR
        level = ViolationLevel.WARNING
    return level


def format_violation(violation: PolicyViolation) -> str:
    who = violation.employee_name or violation.employee_id
    prefix = f"{violation.severity}: "
    return f"{prefix}{who}: {violation.message}" if who else f"{prefix}{violation.message}"
