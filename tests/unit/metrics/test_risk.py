"""Tests for retention risk and salary position."""

from __future__ import annotations

from decimal import Decimal

import pytest

from meritflow.metrics.risk import assess_retention_risk, estimate_retention_risk, risk_level
from meritflow.metrics.salary import analyze_salary
from meritflow.models.employee import Employee
from meritflow.models.insights import MarketPosition, RangePosition, RiskLevel, TenureInfo
from meritflow.models.money import Money
from meritflow.models.rating import CategoricalRating, NumericRating


def make_employee(**overrides) -> Employee:
    fields = {"employee_id": "E1", "name": "Ann Lee", "base_salary": Decimal("100000")}
    fields.update(overrides)
    return Employee(**fields)


@pytest.mark.parametrize("total, level", [
    (0, RiskLevel.LOW), (19.9, RiskLevel.LOW), (20, RiskLevel.MEDIUM),
    (40, RiskLevel.HIGH), (69, RiskLevel.HIGH), (70, RiskLevel.CRITICAL),
])
def test_risk_level(total, level):
    assert risk_level(total) is level


class TestAssessRetentionRisk:
    def test_everything_adds_up_and_caps(self):
        employee = make_employee(comparatio=70.0, performance_rating=NumericRating(value=3.0),
                                 job_title="Software Engineer")
        tenure = TenureInfo(time_in_role_months=50, last_raise_months_ago=30)
        risk = assess_retention_risk(employee, tenure)
        assert (risk.comparatio_risk, risk.performance_risk, risk.tenure_risk, risk.market_risk) == (40, 30, 20, 10)
        assert risk.total_risk == 100
        assert risk.level is RiskLevel.CRITICAL
        assert "High-demand role" in risk.factors

    def test_well_placed_top_performer(self):
        employee = make_employee(comparatio=100.0, performance_rating=NumericRating(value=5.0), job_title="Analyst")
        risk = assess_retention_risk(employee, TenureInfo(time_in_role_months=12))
        assert risk.total_risk == 5
        assert risk.level is RiskLevel.LOW
        assert risk.factors == []

    def test_categorical_rating(self):
        employee = make_employee(performance_rating=CategoricalRating(label="Successful"))
        risk = assess_retention_risk(employee, TenureInfo(time_in_role_months=12))
        assert risk.performance_risk == 15
        assert "Solid but not top performance (Successful)" in risk.factors

    def test_percentage_rating(self):
        employee = make_employee(performance_rating=NumericRating(value=0.95, scale=1))
        risk = assess_retention_risk(employee, TenureInfo(time_in_role_months=12))
        assert risk.performance_risk == 0


class TestEstimateRetentionRisk:
    def test_neutral_default(self):
        assert estimate_retention_risk(make_employee()) == 50.0

    def test_adjustments(self):
        employee = make_employee(comparatio=80.0, performance_rating=NumericRating(value=5.0), time_in_role=40.0)
        assert estimate_retention_risk(employee) == 55.0

    def test_clamped(self):
        employee = make_employee(comparatio=70.0, performance_rating=NumericRating(value=1.0), time_in_role=40.0)
        assert estimate_retention_risk(employee) == 100.0


class TestAnalyzeSalary:
    def grade(self, base: str, currency: str = "USD") -> Employee:
        return make_employee(
            base_salary=Decimal(base), currency=currency,
            salary_grade_min=Decimal("80000"), salary_grade_mid=Decimal("100000"),
            salary_grade_max=Decimal("120000"),
        )

    def test_target(self):
        analysis = analyze_salary(self.grade("90000"))
        assert analysis.comparatio == 90.0
        assert analysis.position_in_range is RangePosition.TARGET
        assert analysis.room_for_growth == Money.of("30000.00")
        assert analysis.market_position is MarketPosition.COMPETITIVE

    def test_below_range_grows_to_midpoint(self):
        analysis = analyze_salary(self.grade("70000"))
        assert analysis.position_in_range is RangePosition.BELOW_RANGE
        assert analysis.room_for_growth == Money.of("30000.00")
        assert analysis.market_position is MarketPosition.BELOW_MARKET

    def test_above_range_has_no_room(self):
        analysis = analyze_salary(self.grade("130000"))
        assert analysis.position_in_range is RangePosition.ABOVE_RANGE
        assert analysis.room_for_growth.amount == 0
        assert analysis.market_position is MarketPosition.ABOVE_MARKET

    def test_assumed_grade_stays_in_local_currency(self):
        analysis = analyze_salary(make_employee(currency="INR"))
        assert analysis.grade_mid == Money.of("110000.00", "INR")
        assert analysis.comparatio == 91.0
        assert analysis.room_for_growth.currency == "INR"
