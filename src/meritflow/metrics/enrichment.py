"""Enrichment pass run over joined employees, plus per-employee insights."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from meritflow.core.regions import default_currency
from meritflow.metrics.compensation import compute_comparatio, recalculate_compensation
from meritflow.metrics.raises import recommend_raise
from meritflow.metrics.risk import assess_retention_risk, estimate_retention_risk, risk_level
from meritflow.metrics.salary import analyze_salary
from meritflow.metrics.span import calculate_span_of_control, span_of_control_map
from meritflow.metrics.tenure import calculate_tenure
from meritflow.models.employee import Employee
from meritflow.models.insights import BudgetConstraints, EmployeeInsights, WorkforceStatistics
from meritflow.models.money import round_half_up
from meritflow.names.normalizer import normalize_name

logger = logging.getLogger(__name__)


def enrich_employee(employee: Employee, today: Optional[date] = None) -> Employee:
    """Fill derivable fields in place and recompute compensation figures."""
    if not employee.currency:
        employee.currency = default_currency(employee.country)

    if not employee.display_name:
        parsed = normalize_name({
            "name": employee.name,
            "first_name": employee.first_name,
            "last_name": employee.last_name,
        })
        employee.first_name = employee.first_name or parsed.first_name
        employee.last_name = employee.last_name or parsed.last_name
        employee.display_name = parsed.display_name

    computed = compute_comparatio(employee.base_salary, employee.salary_grade_mid)
    if computed is not None:
        employee.comparatio = computed

    if employee.role_start_date or employee.hire_date:
        tenure = calculate_tenure(employee.hire_date, employee.role_start_date,
                                  employee.last_raise_date, today=today)
        if employee.time_in_role is None:
            employee.time_in_role = float(tenure.time_in_role_months)

    if not employee.retention_risk_supplied:
        employee.retention_risk = estimate_retention_risk(employee)

    if employee.currency == "USD" and employee.base_salary_usd is None:
        employee.base_salary_usd = employee.base_salary
    return recalculate_compensation(employee)


def enrich_employees(employees: Iterable[Employee], today: Optional[date] = None) -> list[Employee]:
    enriched = [enrich_employee(e, today) for e in employees]
    logger.debug("Enriched %d employees", len(enriched))
    return enriched


def analyze_employee(employee: Employee, today: Optional[date] = None,
                     available_budget: Decimal = Decimal("0"),
                     employees: Optional[list[Employee]] = None) -> EmployeeInsights:
    """Tenure, risk, salary position and a raise recommendation for one person.

    Span of control is resolved only when the roster ``employees`` is given.
    """
    tenure = calculate_tenure(employee.hire_date, employee.role_start_date,
                              employee.last_raise_date, today=today,
                              time_in_role=employee.time_in_role)
    risk = assess_retention_risk(employee, tenure)
    salary = analyze_salary(employee)
    recommendation = recommend_raise(
        employee, tenure, risk, salary,
        BudgetConstraints.for_country(employee.country, available_budget),
    )
    return EmployeeInsights(
        employee_id=employee.employee_id,
        tenure=tenure,
        risk=risk,
        salary=salary,
        recommendation=recommendation,
        span_of_control=(
            calculate_span_of_control(employee, employees) if employees is not None else None
        ),
    )


def summarize_employees(employees: list[Employee]) -> WorkforceStatistics:
    if not employees:
        return WorkforceStatistics()
    comparatios = [e.comparatio for e in employees if e.comparatio]
    base_usd = sum((e.base_salary_usd or Decimal("0") for e in employees), Decimal("0"))
    raises = sum((e.proposed_raise for e in employees), Decimal("0"))
    spans = span_of_control_map(employees)
    team_sizes = [s.direct_reports for s in spans.values() if s.direct_reports]
    return WorkforceStatistics(
        employee_count=len(employees),
        average_comparatio=(
            float(round_half_up(sum(comparatios) / len(comparatios), 1)) if comparatios else None
        ),
        total_base_salary_usd=round_half_up(base_usd, 2),
        total_proposed_raise_usd=round_half_up(raises, 2),
        average_percent_change=round(sum(e.percent_change for e in employees) / len(employees), 2),
        currency_distribution=dict(Counter(e.currency for e in employees)),
        country_distribution=dict(Counter(e.country or "Unknown" for e in employees)),
        risk_distribution=dict(Counter(str(risk_level(e.retention_risk)) for e in employees)),
        employees_with_performance=sum(1 for e in employees if e.performance_rating is not None),
        employees_with_promotion=sum(1 for e in employees if e.has_promotion),
        manager_count=len(spans),
        average_span_of_control=(
            round(sum(team_sizes) / len(team_sizes), 1) if team_sizes else None
        ),
        max_span_of_control=max(team_sizes, default=0),
    )
