"""Position of a salary within its grade, in local currency."""

from __future__ import annotations

from decimal import Decimal

from meritflow.metrics.compensation import compute_comparatio
from meritflow.models.employee import Employee
from meritflow.models.insights import MarketPosition, RangePosition, SalaryAnalysis
from meritflow.models.money import Money

# Grade bounds assumed when a sheet has none, as multiples of current salary.
DEFAULT_GRADE_FACTORS = (Decimal("0.8"), Decimal("1.1"), Decimal("1.4"))


def market_position(comparatio: float) -> MarketPosition:
    if comparatio < 85:
        return MarketPosition.BELOW_MARKET
    if comparatio <= 115:
        return MarketPosition.COMPETITIVE
    return MarketPosition.ABOVE_MARKET


def range_position(salary: Money, grade_min: Money, grade_max: Money, comparatio: float) -> RangePosition:
    if salary < grade_min:
        return RangePosition.BELOW_RANGE
    if comparatio < 90:
        return RangePosition.LOW
    if comparatio <= 110:
        return RangePosition.TARGET
    if salary <= grade_max:
        return RangePosition.HIGH
    return RangePosition.ABOVE_RANGE


def analyze_salary(employee: Employee) -> SalaryAnalysis:
    salary = employee.base_salary_money
    low_f, mid_f, high_f = DEFAULT_GRADE_FACTORS
    grade_min = Money(amount=employee.salary_grade_min or salary.amount * low_f, currency=salary.currency)
    grade_mid = Money(amount=employee.salary_grade_mid or salary.amount * mid_f, currency=salary.currency)
    grade_max = Money(amount=employee.salary_grade_max or salary.amount * high_f, currency=salary.currency)

    comparatio = compute_comparatio(salary.amount, grade_mid.amount) or 0.0
    position = range_position(salary, grade_min, grade_max, comparatio)
    if position in (RangePosition.BELOW_RANGE, RangePosition.LOW):
        room = grade_mid - salary
    else:
        room = grade_max - salary
    if room.amount < 0:
        room = Money.zero(salary.currency)
    return SalaryAnalysis(
        comparatio=comparatio,
        position_in_range=position,
        room_for_growth=room.rounded(2),
        market_position=market_position(comparatio),
        grade_min=grade_min.rounded(2),
        grade_mid=grade_mid.rounded(2),
        grade_max=grade_max.rounded(2),
    )
