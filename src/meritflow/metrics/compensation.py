"""Compensation arithmetic that keeps local and USD amounts apart.

Salaries live in the employee's local currency; proposed raises are held in
USD so budgets add up across countries. Every crossing between the two goes
through :func:`raise_in_local_currency`.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from meritflow.models.currency import ConversionResult, RateSource
from meritflow.models.employee import Employee
from meritflow.models.money import Money, round_half_up, to_decimal


def compute_comparatio(salary: Optional[Decimal], grade_mid: Optional[Decimal]) -> Optional[float]:
    """round(salary / midpoint * 100), or None without a usable midpoint."""
    if salary is None or grade_mid is None or grade_mid <= 0 or salary <= 0:
        return None
    return float(round_half_up(salary / grade_mid * 100))


def compute_percent_change(raise_usd: Money, base_usd: Money) -> float:
    if base_usd.amount <= 0:
        return 0.0
    return float(round_half_up(raise_usd.ratio_to(base_usd) * 100))


def raise_in_local_currency(employee: Employee, raise_usd: Optional[Money] = None) -> Money:
    """Express a USD raise in the employee's local currency.

    Uses the ratio local salary / USD salary. When no USD salary is known for
    a non-USD employee the raise cannot be placed and a zero local amount is
    returned together with a data-quality note on the record.
    """
    raise_usd = raise_usd if raise_usd is not None else employee.proposed_raise_money
    if raise_usd.currency != "USD":
        raise ValueError(f"raise must be in USD, got {raise_usd.currency}")
    if employee.currency == "USD":
        return Money(amount=raise_usd.amount, currency="USD")
    ratio = employee.local_per_usd
    if ratio is None:
        return Money.zero(employee.currency)
    return raise_usd.convert(ratio, employee.currency)


def _note(employee: Employee, message: str) -> None:
    if message not in employee.data_quality_warnings:
        employee.data_quality_warnings.append(message)


def recalculate_compensation(employee: Employee) -> Employee:
    """Refresh new_salary, percent_change and comparatio figures in place."""
    base_local = employee.base_salary_money
    if employee.currency != "USD" and employee.local_per_usd is None and employee.proposed_raise:
        _note(employee, f"No USD salary for {employee.currency}; raise not applied to local salary")
    new_local = (base_local + raise_in_local_currency(employee)).rounded(2)
    employee.new_salary = new_local.amount
    employee.percent_change = compute_percent_change(
        employee.proposed_raise_money, employee.base_salary_usd_money
    )
    employee.comparatio = compute_comparatio(employee.base_salary, employee.salary_grade_mid) or employee.comparatio
    employee.projected_comparatio = compute_comparatio(new_local.amount, employee.effective_grade_mid)
    return employee


def set_proposed_raise(employee: Employee, amount_usd: Any) -> Employee:
    """Interactive edit: replace the USD raise and recompute."""
    amount = to_decimal(amount_usd)
    if amount < 0:
        raise ValueError("proposed raise cannot be negative")
    employee.proposed_raise = round_half_up(amount, 2)
    return recalculate_compensation(employee)


def set_raise_percent(employee: Employee, percent: Any) -> Employee:
    """Interactive edit: raise as a percent of the USD base salary."""
    amount = employee.base_salary_usd_money.scale(to_decimal(percent) / 100)
    return set_proposed_raise(employee, amount.amount)


def apply_conversion(employee: Employee, result: ConversionResult) -> Employee:
    """Record a local-to-USD salary conversion and recompute."""
    if result.original.currency != employee.currency:
        raise ValueError(
            f"conversion is for {result.original.currency}, employee is paid in {employee.currency}"
        )
    employee.rate_source = result.source
    if result.source is RateSource.UNSUPPORTED or result.rate <= 0:
        # leave base_salary_usd unset so no USD figure is invented
        employee.base_salary_usd = None
        employee.exchange_rate = None
        _note(employee, result.warning or f"No exchange rate for {employee.currency}")
    else:
        employee.base_salary_usd = result.converted.rounded(2).amount
        employee.exchange_rate = (Decimal("1") / result.rate) if result.rate else None
        if result.source is RateSource.FALLBACK:
            _note(employee, f"{employee.currency} converted with a static fallback rate")
    return recalculate_compensation(employee)
