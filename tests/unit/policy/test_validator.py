"""Tests for raise-policy validation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from meritflow.models.employee import Employee
from meritflow.models.policy import (
    BudgetContext,
    PolicySettings,
    PolicyViolation,
    ViolationSeverity,
    ViolationType,
)
from meritflow.policy.validator import (
    ViolationLevel,
    budget_context,
    format_violation,
    grade_number,
    validate_all,
    validate_budget,
    validate_employee,
    violation_level,
)

TODAY = date(2024, 1, 1)


def make_employee(**overrides) -> Employee:
    fields = {
        "employee_id": "E1", "name": "Ann Lee", "display_name": "Ann Lee", "country": "US",
        "base_salary": Decimal("100000"), "base_salary_usd": Decimal("100000"),
    }
    fields.update(overrides)
    return Employee(**fields)


def types(violations: list[PolicyViolation]) -> list[ViolationType]:
    return [v.type for v in violations]


class TestComparatio:
    def test_current_below_floor(self):
        violations = validate_employee(make_employee(comparatio=70.0), today=TODAY)
        assert types(violations) == [ViolationType.COMPARATIO_TOO_LOW]
        assert violations[0].message == "Comparatio 70% is below the minimum of 76%"
        assert violations[0].severity is ViolationSeverity.WARNING

    def test_raise_that_lifts_above_floor_clears_it(self):
        employee = make_employee(base_salary=Decimal("70000"), base_salary_usd=Decimal("70000"),
                                 salary_grade_mid=Decimal("100000"), comparatio=70.0,
                                 proposed_raise=Decimal("8000"))
        assert ViolationType.COMPARATIO_TOO_LOW not in types(validate_employee(employee, today=TODAY))

    def test_projected_below_floor(self):
        employee = make_employee(base_salary=Decimal("70000"), base_salary_usd=Decimal("70000"),
                                 salary_grade_mid=Decimal("100000"), comparatio=70.0,
                                 proposed_raise=Decimal("3000"))
        violations = validate_employee(employee, today=TODAY)
        assert violations[0].message.startswith("Projected comparatio 73%")
        assert violations[0].current_value == 73.0

    def test_custom_floor(self):
        violations = validate_employee(make_employee(comparatio=70.0), PolicySettings(comparatio_floor=60), TODAY)
        assert violations == []


class TestRaiseCeiling:
    def test_us_merit_cap(self):
        violations = validate_employee(make_employee(proposed_raise=Decimal("13000")), today=TODAY)
        assert types(violations) == [ViolationType.RAISE_TOO_HIGH]
        assert violations[0].message == "Raise of 13% exceeds the merit maximum of 12% for US/other regions"
        assert violations[0].severity is ViolationSeverity.ERROR

    def test_at_cap_is_allowed(self):
        assert validate_employee(make_employee(proposed_raise=Decimal("12000")), today=TODAY) == []

    def test_india_cap_is_higher(self):
        employee = make_employee(country="India", currency="INR", base_salary=Decimal("830000"),
                                 base_salary_usd=Decimal("10000"), proposed_raise=Decimal("3000"))
        assert validate_employee(employee, today=TODAY) == []
        employee.proposed_raise = Decimal("3600")
        violations = validate_employee(employee, today=TODAY)
        assert "merit maximum of 35% for India" in violations[0].message

    def test_raise_without_usd_base_is_flagged(self):
        employee = make_employee(country="Germany", currency="XYZ", base_salary=Decimal("1000"),
                                 base_salary_usd=None, proposed_raise=Decimal("5000"))
        violations = validate_employee(employee, today=TODAY)
        assert types(violations) == [ViolationType.RAISE_NOT_VERIFIABLE]
        assert violations[0].severity is ViolationSeverity.ERROR
        assert violations[0].message == (
            "Raise of 5,000.00 USD cannot be checked against the 12% cap: no USD salary for XYZ"
        )
        assert violations[0].threshold == 12

    def test_no_raise_without_usd_base_is_fine(self):
        employee = make_employee(country="Germany", currency="XYZ", base_salary=Decimal("1000"),
                                 base_salary_usd=None)
        assert validate_employee(employee, today=TODAY) == []

    def test_promotion_cap(self):
        employee = make_employee(
            proposed_raise=Decimal("18000"), has_promotion=True, promotion_type="VERTICAL",
            promotion_justification="Leads the team", new_job_title="Senior Analyst",
        )
        assert validate_employee(employee, today=TODAY) == []


class TestStale:
    def test_long_in_role_without_raise(self):
        violations = validate_employee(make_employee(time_in_role=20.0), today=TODAY)
        assert types(violations) == [ViolationType.NO_RAISE_TOO_LONG]
        assert violations[0].message == "20 months in role with no raise proposed (threshold 18 months)"

    def test_raise_clears_it(self):
        employee = make_employee(time_in_role=20.0, proposed_raise=Decimal("3000"))
        assert validate_employee(employee, today=TODAY) == []


class TestPromotion:
    def test_every_rule(self):
        employee = make_employee(
            has_promotion=True, promotion_type="sideways", last_promotion_date="2023-09-01",
            grade_level="G3", new_salary_grade="G6",
        )
        violations = validate_employee(employee, today=TODAY)
        assert types(violations) == [
            ViolationType.INVALID_PROMOTION_TYPE,
            ViolationType.PROMOTION_TOO_SOON,
            ViolationType.GRADE_JUMP_TOO_LARGE,
            ViolationType.MISSING_PROMOTION_JUSTIFICATION,
            ViolationType.MISSING_NEW_TITLE,
        ]
        assert violations[1].message == "Only 4 months since the last role change; minimum is 12"
        assert violations[2].current_value == 3

    def test_role_start_used_without_last_promotion(self):
        employee = make_employee(
            has_promotion=True, promotion_type="VERTICAL", role_start_date="2023-06-01",
            promotion_justification="Ready", new_job_title="Lead",
        )
        assert types(validate_employee(employee, today=TODAY)) == [ViolationType.PROMOTION_TOO_SOON]

    def test_demotion_with_raise(self):
        employee = make_employee(
            has_promotion=True, promotion_type="demotion", proposed_raise=Decimal("1000"),
            promotion_justification="Role change requested",
        )
        assert types(validate_employee(employee, today=TODAY)) == [ViolationType.DEMOTION_WITH_RAISE]

    def test_clean_promotion(self):
        employee = make_employee(
            has_promotion=True, promotion_type="VERTICAL", role_start_date="2020-01-01",
            grade_level="G3", new_salary_grade="G4", promotion_justification="Ready",
            new_job_title="Senior Analyst", proposed_raise=Decimal("10000"),
        )
        assert validate_employee(employee, today=TODAY) == []


@pytest.mark.parametrize("grade, number", [("G7", 7), ("Band 10", 10), ("Senior", None), (None, None)])
def test_grade_number(grade, number):
    assert grade_number(grade) == number


class TestBudget:
    def test_within_budget(self):
        context = BudgetContext(total_budget=Decimal("10000"), current_usage=Decimal("9000"))
        assert validate_budget(context, Decimal("1000")) == []

    def test_exceeded(self):
        context = BudgetContext(total_budget=Decimal("10000"), current_usage=Decimal("9000"))
        violations = validate_budget(context, Decimal("2000"))
        assert violations[0].type is ViolationType.BUDGET_EXCEEDED
        assert violations[0].message == "Budget exceeded by 1,000.00 USD"
        assert violations[0].current_value == 110.0

    def test_utilization_is_not_rounded(self):
        context = BudgetContext(total_budget=Decimal("3000"), current_usage=Decimal("3000"))
        violations = validate_budget(context, Decimal("1"))
        assert violations[0].current_value == pytest.approx(100.0333333333, rel=1e-9)
        assert violations[0].message == "Budget exceeded by 1.00 USD"

    def test_context_from_employees(self):
        staff = [make_employee(proposed_raise=Decimal("500")), make_employee(employee_id="E2",
                                                                             proposed_raise=Decimal("700"))]
        context = budget_context(staff, Decimal("1000"))
        assert context.current_usage == Decimal("1200")
        assert context.remaining == Decimal("-200")
        assert context.employee_count == 2

    def test_validate_all_includes_budget(self):
        staff = [make_employee(proposed_raise=Decimal("5000"))]
        violations = validate_all(staff, budget=budget_context(staff, Decimal("1000")), today=TODAY)
        assert types(violations) == [ViolationType.BUDGET_EXCEEDED]


class TestReporting:
    def test_levels(self):
        warning = PolicyViolation(type=ViolationType.NO_RAISE_TOO_LONG, severity=ViolationSeverity.WARNING,
                                  message="stale")
        error = PolicyViolation(type=ViolationType.RAISE_TOO_HIGH, severity=ViolationSeverity.ERROR,
                                message="too high")
        assert violation_level([]) is ViolationLevel.NONE
        assert violation_level([warning]) is ViolationLevel.WARNING
        assert violation_level([warning, error]) is ViolationLevel.ERROR

    def test_format(self):
        violation = validate_employee(make_employee(time_in_role=20.0), today=TODAY)[0]
        assert format_violation(violation).startswith("WARNING: Ann Lee: 20 months")
