"""Tests for the enrichment pass and workforce summaries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from meritflow.metrics.enrichment import (
    analyze_employee,
    enrich_employee,
    enrich_employees,
    summarize_employees,
)
from meritflow.models.employee import Employee
from meritflow.models.insights import WorkforceStatistics
from meritflow.models.rating import NumericRating

TODAY = date(2024, 1, 1)


def make_employee(**overrides) -> Employee:
    fields = {
        "employee_id": "E1", "name": "Lee, Ann", "country": "US", "base_salary": Decimal("90000"),
        "salary_grade_mid": Decimal("100000"), "role_start_date": "2023-01-01",
        "performance_rating": NumericRating(value=5.0),
    }
    fields.update(overrides)
    return Employee(**fields)


class TestEnrichEmployee:
    def test_fills_derived_fields(self):
        employee = enrich_employee(make_employee(), today=TODAY)
        assert employee.display_name == "Ann Lee"
        assert employee.first_name == "Ann"
        assert employee.comparatio == 90.0
        assert employee.time_in_role == 11.0
        assert employee.retention_risk == 35.0
        assert employee.base_salary_usd == Decimal("90000")
        assert employee.new_salary == Decimal("90000.00")

    def test_supplied_risk_kept(self):
        employee = enrich_employee(make_employee(retention_risk=80.0, retention_risk_supplied=True), today=TODAY)
        assert employee.retention_risk == 80.0

    def test_currency_from_country(self):
        employee = enrich_employee(make_employee(country="India", currency=""), today=TODAY)
        assert employee.currency == "INR"
        assert employee.base_salary_usd is None

    def test_batch(self):
        employees = enrich_employees([make_employee(), make_employee(employee_id="E2")], today=TODAY)
        assert [e.employee_id for e in employees] == ["E1", "E2"]


def test_analyze_employee():
    employee = enrich_employee(make_employee(), today=TODAY)
    insights = analyze_employee(employee, today=TODAY)
    assert insights.employee_id == "E1"
    assert insights.tenure.time_in_role_months == 11
    assert insights.salary.comparatio == 90.0
    assert insights.recommendation.amount.currency == "USD"


class TestSummarize:
    def test_empty(self):
        assert summarize_employees([]) == WorkforceStatistics()

    def test_mixed_currencies(self):
        usd = Employee(employee_id="1", base_salary=Decimal("100000"), base_salary_usd=Decimal("100000"),
                       proposed_raise=Decimal("5000"), percent_change=5.0, comparatio=100.0, country="US")
        inr = Employee(employee_id="2", currency="INR", base_salary=Decimal("830000"),
                       base_salary_usd=Decimal("10000"), comparatio=91.0, country="India")
        stats = summarize_employees([usd, inr])
        assert stats.employee_count == 2
        assert stats.total_base_salary_usd == Decimal("110000.00")
        assert stats.total_proposed_raise_usd == Decimal("5000.00")
        assert stats.average_percent_change == 2.5
        assert stats.average_comparatio == 95.5
        assert stats.currency_distribution == {"USD": 1, "INR": 1}
        assert stats.risk_distribution == {"High": 2}
        assert stats.employees_with_performance == 0


def test_analyze_employee_with_roster():
    manager = enrich_employee(make_employee(employee_id="M1", job_title="Team Manager"), today=TODAY)
    reports = [make_employee(employee_id=f"E{i}", manager_id="M1") for i in range(3)]
    insights = analyze_employee(manager, today=TODAY, employees=[manager, *reports])
    assert insights.span_of_control.is_manager
    assert insights.span_of_control.direct_reports == 3
    assert analyze_employee(manager, today=TODAY).span_of_control is None


def test_summary_span_of_control():
    staff = [
        Employee(employee_id="1", job_title="Director"),
        Employee(employee_id="2", manager_id="1", job_title="Manager"),
        Employee(employee_id="3", manager_id="2"),
        Employee(employee_id="4", manager_id="2"),
        Employee(employee_id="5", manager_id="2"),
        Employee(employee_id="6", job_title="Manager"),
    ]
    stats = summarize_employees(staff)
    assert stats.manager_count == 3
    assert stats.average_span_of_control == 2.0
    assert stats.max_span_of_control == 3
