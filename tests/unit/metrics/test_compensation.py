"""Tests for local/USD compensation arithmetic."""

from __future__ import annotations

from decimal import Decimal

import pytest

from meritflow.metrics.compensation import (
    apply_conversion,
    compute_comparatio,
    raise_in_local_currency,
    recalculate_compensation,
    set_proposed_raise,
    set_raise_percent,
)
from meritflow.models.currency import ConversionResult, RateSource
from meritflow.models.employee import Employee
from meritflow.models.money import Money


def inr_employee(**overrides) -> Employee:
    fields = {
        "employee_id": "E2", "name": "Ravi Kumar", "country": "India", "currency": "INR",
        "base_salary": Decimal("830000"), "base_salary_usd": Decimal("10000"),
    }
    fields.update(overrides)
    return Employee(**fields)


def usd_employee(**overrides) -> Employee:
    fields = {
        "employee_id": "E1", "name": "Ann Lee", "base_salary": Decimal("100000"),
        "base_salary_usd": Decimal("100000"), "salary_grade_mid": Decimal("100000"),
    }
    fields.update(overrides)
    return Employee(**fields)


def test_compute_comparatio():
    assert compute_comparatio(Decimal("95000"), Decimal("100000")) == 95.0
    assert compute_comparatio(Decimal("95000"), Decimal("0")) is None
    assert compute_comparatio(None, Decimal("100000")) is None


class TestRaiseInLocalCurrency:
    def test_uses_salary_ratio(self):
        local = raise_in_local_currency(inr_employee(), Money.of("1000"))
        assert local == Money.of("83000", "INR")

    def test_no_usd_salary_gives_zero(self):
        local = raise_in_local_currency(inr_employee(base_salary_usd=None), Money.of("1000"))
        assert local == Money.zero("INR")

    def test_rejects_non_usd_raise(self):
        with pytest.raises(ValueError, match="USD"):
            raise_in_local_currency(inr_employee(), Money.of("1000", "INR"))


class TestRecalculate:
    def test_local_new_salary(self):
        employee = recalculate_compensation(inr_employee(proposed_raise=Decimal("1000")))
        assert employee.new_salary == Decimal("913000.00")
        assert employee.percent_change == 10.0

    def test_missing_usd_salary_is_noted(self):
        employee = recalculate_compensation(inr_employee(base_salary_usd=None, proposed_raise=Decimal("1000")))
        assert employee.new_salary == Decimal("830000")
        assert employee.data_quality_warnings == ["No USD salary for INR; raise not applied to local salary"]

    def test_projected_comparatio(self):
        employee = recalculate_compensation(usd_employee(proposed_raise=Decimal("5000")))
        assert employee.comparatio == 100.0
        assert employee.projected_comparatio == 105.0

    def test_projected_comparatio_uses_new_grade(self):
        employee = recalculate_compensation(usd_employee(
            proposed_raise=Decimal("5000"), has_promotion=True, new_salary_grade_mid=Decimal("150000"),
        ))
        assert employee.projected_comparatio == 70.0


class TestInteractiveEdits:
    def test_set_amount(self):
        employee = set_proposed_raise(usd_employee(), "2500.555")
        assert employee.proposed_raise == Decimal("2500.56")
        assert employee.new_salary == Decimal("102500.56")

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            set_proposed_raise(usd_employee(), -1)

    def test_set_percent(self):
        employee = set_raise_percent(usd_employee(base_salary=Decimal("80000"), base_salary_usd=Decimal("80000")), 5)
        assert employee.proposed_raise == Decimal("4000.00")
        assert employee.percent_change == 5.0


class TestApplyConversion:
    def result(self, source=RateSource.API, rate="0.0125", warning=None, currency="INR") -> ConversionResult:
        original = Money.of("830000", currency)
        converted = original.convert(rate, "USD") if Decimal(rate) else original
        return ConversionResult(original=original, converted=converted, rate=Decimal(rate),
                                source=source, warning=warning)

    def test_live_rate(self):
        employee = apply_conversion(inr_employee(base_salary_usd=None), self.result())
        assert employee.base_salary_usd == Decimal("10375.00")
        assert employee.exchange_rate == Decimal("80")
        assert employee.rate_source is RateSource.API
        assert employee.data_quality_warnings == []

    def test_fallback_is_noted(self):
        employee = apply_conversion(inr_employee(base_salary_usd=None), self.result(RateSource.FALLBACK))
        assert employee.data_quality_warnings == ["INR converted with a static fallback rate"]

    def test_unsupported_leaves_usd_unset(self):
        warning = "No exchange rate for XYZ; amount left in XYZ"
        employee = inr_employee(currency="XYZ", base_salary_usd=None)
        employee = apply_conversion(employee, self.result(RateSource.UNSUPPORTED, "0", warning, "XYZ"))
        assert employee.base_salary_usd is None
        assert employee.exchange_rate is None
        assert warning in employee.data_quality_warnings

    def test_currency_must_match(self):
        with pytest.raises(ValueError, match="employee is paid in INR"):
            apply_conversion(inr_employee(), self.result(currency="EUR"))
