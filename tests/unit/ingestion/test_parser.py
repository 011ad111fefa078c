"""Tests for end-to-end file parsing."""

from __future__ import annotations

import io
from decimal import Decimal
from unittest.mock import patch

from openpyxl import Workbook

from meritflow.core.config import IngestionConfig
from meritflow.ingestion.parser import content_hash, ingest_files, map_row, parse_file
from meritflow.ingestion.schema import SALARY_FIELDS, resolve_columns
from meritflow.models.rating import CategoricalRating, NumericRating
from meritflow.models.results import FileType, IssueType, Severity
from meritflow.models.rows import PerformanceRow, SalaryRow

SALARY_CSV = (
    "Report Generated: 2026-01-05\n"
    "Filters Applied: All\n"
    "Employee ID,Name,Email,Country,Currency,Base Salary,Salary Grade Mid,Hire Date\n"
    '1001,"Smith, John",John@Corp.com,US,USD,"$100,000",100000,2020-01-15\n'
    '1002,Jane Doe,jane@corp.com,India,INR,"₹ 12,50,000",1500000,2021-03-01\n'
    "1003,No Salary,ns@corp.com,US,USD,,90000,2022-01-01\n"
).encode("utf-8")

PERFORMANCE_CSV = (
    b"Associate ID,Name,Overall Performance Rating,Retention Risk\n"
    b"1001,John Smith,Exceeds Expectations,Yes\n"
    b"1002,Jane Doe,4.5,20\n"
)


def _xlsx(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


class TestSalaryFiles:
    def test_title_block_removed_and_rows_typed(self):
        result = parse_file("salary.csv", SALARY_CSV)
        assert result.accepted
        assert result.file_type is FileType.SALARY
        assert result.header_row_index == 2
        assert result.removed_rows == 2
        assert (result.row_count, result.valid_rows) == (3, 2)
        first, second = result.salary_rows
        assert first.name == "Smith, John"
        assert first.email == "john@corp.com"
        assert first.base_salary == Decimal("100000")
        assert first.hire_date == "2020-01-15"
        assert second.base_salary == Decimal("1250000")
        assert second.currency == "INR"

    def test_out_of_range_date_cell_kept_as_text(self):
        data = b"Employee ID,Name,Base Salary,Hire Date\n1,Ann Lee,1000,2020-01-01\n2,Bob Ray,2000,12345678\n"
        result = parse_file("s.csv", data, FileType.SALARY)
        assert result.accepted
        assert result.valid_rows == 2
        assert [r.hire_date for r in result.salary_rows] == ["2020-01-01", "12345678"]

    def test_reporting_line_columns(self):
        data = (
            b"Employee ID,Name,Base Salary,Manager ID,Management Level,Manager Flag,Team Lead Flag\n"
            b"1,Ann Lee,1000,,Director,Yes,No\n"
            b"2,Bob Ray,900,1,,,TRUE\n"
        )
        first, second = parse_file("org.csv", data, FileType.SALARY).salary_rows
        assert (first.management_level, first.is_manager, first.is_team_lead) == ("Director", True, False)
        assert (second.manager_id, second.is_manager, second.is_team_lead) == ("1", None, True)

    def test_row_errors_cite_source_line(self):
        result = parse_file("salary.csv", SALARY_CSV)
        messages = [e.message for e in result.errors]
        assert "Row 6: missing base salary" in messages
        assert result.errors[0].row == 6

    def test_content_hash_recorded(self):
        assert parse_file("salary.csv", SALARY_CSV).content_hash == content_hash(SALARY_CSV)

    def test_combined_export_keeps_performance(self):
        data = (
            b"Employee ID,Name,Base Salary,Performance Rating,Retention Risk\n"
            b"1,Ann Lee,50000,4,High\n"
        )
        result = parse_file("combined.csv", data)
        row = result.salary_rows[0]
        assert row.performance_rating == NumericRating(value=4.0)
        assert row.retention_risk == 75.0
        assert any(w.severity is Severity.INFO and "Combined" in w.message for w in result.warnings)

    def test_declared_salary_with_no_valid_rows_is_fatal(self):
        data = b"Employee ID,Name,Base Salary\n1,Ann,\n2,Bob,n/a\n"
        result = parse_file("salary.csv", data, FileType.SALARY)
        assert not result.accepted
        assert any(e.message == "No rows contain valid salary data" for e in result.errors)

    def test_missing_required_columns(self):
        data = b"Employee ID,Department,Title\n1,Ops,Analyst\n"
        result = parse_file("salary.csv", data, "salary")
        assert not result.accepted
        assert {e.field for e in result.errors if e.type is IssueType.MISSING_COLUMN} == {"name", "base_salary"}

    def test_duplicate_ids_warned(self):
        data = b"Employee ID,Name,Base Salary\n7,Ann,100\n7,Ann B,200\n"
        result = parse_file("salary.csv", data)
        assert result.quality.duplicate_ids == ["7"]
        assert any(w.type is IssueType.DUPLICATE_DATA for w in result.warnings)

    def test_xlsx_workbook(self):
        data = _xlsx([
            ["Employee Number", "Employee Full Name", "Base Pay All Countries", "Currency"],
            [1001.0, "Ann Lee", 85000, "USD"],
        ])
        result = parse_file("salary.xlsx", data)
        assert result.accepted
        row = result.salary_rows[0]
        assert row.employee_id == "1001"
        assert row.base_salary == Decimal("85000")


class TestPerformanceFiles:
    def test_detected_without_declaration(self):
        result = parse_file("review.csv", PERFORMANCE_CSV)
        assert result.file_type is FileType.PERFORMANCE
        first, second = result.performance_rows
        assert isinstance(first, PerformanceRow)
        assert first.performance_rating == CategoricalRating(label="Exceeds Expectations")
        assert first.retention_risk == 75.0
        assert second.performance_rating == NumericRating(value=4.5)

    def test_declared_performance_needs_id_or_email(self):
        result = parse_file("review.csv", b"Name,Rating,Notes\nAnn,4,x\n", FileType.PERFORMANCE)
        assert not result.accepted


class TestUploadChecks:
    def test_legacy_xls_rejected_with_hint(self):
        result = parse_file("old.xls", b"\xd0\xcf\x11\xe0")
        assert not result.accepted
        assert result.errors[0].type is IssueType.UNSUPPORTED_FILE_TYPE
        assert ".xlsx" in result.errors[0].suggestion

    def test_size_limit(self):
        config = IngestionConfig(max_file_size_mb=1)
        result = parse_file("big.csv", b"x" * (1024 * 1024 + 1), config=config)
        assert result.errors[0].type is IssueType.FILE_TOO_LARGE

    def test_empty_file(self):
        result = parse_file("empty.csv", b"")
        assert result.errors[0].type is IssueType.CORRUPTED_FILE
        assert result.errors[0].fatal

    def test_unexpected_failure_becomes_fatal_issue(self):
        with patch("meritflow.ingestion.parser.parse_table", side_effect=RuntimeError("boom")):
            result = parse_file("salary.csv", SALARY_CSV)
        assert not result.accepted
        assert result.errors[0].message == "Critical parsing error: boom"


def test_batch_continues_past_bad_file():
    results = ingest_files([("bad.pdf", b"%PDF"), ("salary.csv", SALARY_CSV)])
    assert [r.accepted for r in results] == [False, True]


def test_first_non_blank_synonym_wins():
    mapping = resolve_columns(["employee id", "salary", "base salary"], SALARY_FIELDS)
    assert map_row(["1", "500", ""], mapping)["base_salary"] == Decimal("500")
    assert map_row(["1", "500", "700"], mapping)["base_salary"] == Decimal("700")
    row = SalaryRow(**map_row(["1", "500", "700"], mapping))
    assert row.employee_id == "1"
