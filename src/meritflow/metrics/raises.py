"""Raise recommendation from range position, performance and risk."""

from __future__ import annotations

from meritflow.models.employee import Employee
from meritflow.models.insights import (
    BudgetConstraints,
    Priority,
    RaiseRecommendation,
    RangePosition,
    RetentionRiskAssessment,
    RiskLevel,
    SalaryAnalysis,
    TenureInfo,
)
from meritflow.models.money import Money, round_half_up
from meritflow.models.rating import is_solid, is_top_tier, rating_label

BASE_PERCENT: dict[RangePosition, float] = {
    RangePosition.BELOW_RANGE: 8,
    RangePosition.LOW: 6,
    RangePosition.TARGET: 3,
    RangePosition.HIGH: 2,
    RangePosition.ABOVE_RANGE: 2,
}
OVERDUE_MONTHS = 18


def _priority(percent: float, risk: RetentionRiskAssessment, analysis: SalaryAnalysis) -> Priority:
    if risk.level is RiskLevel.CRITICAL or analysis.position_in_range is RangePosition.BELOW_RANGE:
        return Priority.CRITICAL
    if risk.level is RiskLevel.HIGH or percent >= 6:
        return Priority.HIGH
    if percent >= 3:
        return Priority.MEDIUM
    return Priority.LOW


def recommend_raise(employee: Employee, tenure: TenureInfo, risk: RetentionRiskAssessment,
                    analysis: SalaryAnalysis, constraints: BudgetConstraints | None = None) -> RaiseRecommendation:
    """Percent and USD amount with the reasoning that produced them."""
    constraints = constraints or BudgetConstraints.for_country(employee.country)
    reasoning: list[str] = []

    percent = BASE_PERCENT[analysis.position_in_range]
    reasoning.append(f"{analysis.position_in_range} in grade: base {percent:g}%")

    if is_top_tier(employee.performance_rating):
        percent += 3
        reasoning.append(f"Top performance ({rating_label(employee.performance_rating)}): +3%")
    elif is_solid(employee.performance_rating):
        percent += 1
        reasoning.append(f"Solid performance ({rating_label(employee.performance_rating)}): +1%")

    if risk.level is RiskLevel.CRITICAL:
        percent += 4
        reasoning.append("Critical retention risk: +4%")
    elif risk.level is RiskLevel.HIGH:
        percent += 2
        reasoning.append("High retention risk: +2%")

    if tenure.last_raise_months_ago is not None and tenure.last_raise_months_ago > OVERDUE_MONTHS:
        percent += 1
        reasoning.append(f"No raise in {tenure.last_raise_months_ago} months: +1%")

    if percent > constraints.max_raise_percent:
        reasoning.append(f"Capped at {constraints.max_raise_percent:g}% for the region")
        percent = constraints.max_raise_percent

    base_usd = employee.base_salary_usd_money
    amount = Money(amount=round_half_up(base_usd.scale(percent / 100).amount), currency="USD")
    if constraints.available_budget > 0 and amount.amount > constraints.available_budget:
        reasoning.append(f"Limited by remaining budget of {constraints.available_budget:,.0f} USD")
        amount = Money(amount=round_half_up(constraints.available_budget), currency="USD")
        percent = float(round_half_up(amount.amount / base_usd.amount * 100, 1)) if base_usd.amount else 0.0

    return RaiseRecommendation(
        percent=percent,
        amount=amount,
        reasoning=reasoning,
        priority=_priority(percent, risk, analysis),
    )
