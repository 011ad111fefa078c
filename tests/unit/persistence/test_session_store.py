"""Unit tests for CacheSessionStore and ParsedFileCache."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from meritflow.core.exceptions import CacheError, EmployeeNotFoundError, StorageError
from meritflow.core.protocols import ISessionStore
from meritflow.models.employee import Employee
from meritflow.models.policy import PolicySettings
from meritflow.models.rating import CategoricalRating, NumericRating
from meritflow.models.results import FileType, IssueType, ParseResult, ValidationIssue
from meritflow.models.rows import PerformanceRow, SalaryRow
from meritflow.models.session import SessionMeta
from meritflow.persistence.file_cache import ParsedFileCache
from meritflow.persistence.session_store import CacheSessionStore
from tests.fakes import ManualClock, MemoryCacheBackend


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache(clock):
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def store(cache):
    return CacheSessionStore(cache, ttl=3600)


def _employee(emp_id: str, **overrides) -> Employee:
    data = {
        "employee_id": emp_id,
        "name": f"Person {emp_id}",
        "base_salary": Decimal("100000"),
        "currency": "USD",
    }
    data.update(overrides)
    return Employee(**data)


def test_store_satisfies_protocol(store):
    assert isinstance(store, ISessionStore)


class TestEmployees:
    def test_empty_store_returns_empty_list(self, store):
        assert store.get_employees() == []

    def test_round_trip_keeps_rating_variants(self, store):
        employees = [
            _employee("1", performance_rating=NumericRating(value=4.2)),
            _employee("2", performance_rating=CategoricalRating(label="Exceeds")),
        ]
        store.save_employees(employees)
        loaded = store.get_employees()
        assert loaded[0].performance_rating == NumericRating(value=4.2)
        assert loaded[1].performance_rating == CategoricalRating(label="Exceeds")
        assert loaded[0].base_salary == Decimal("100000")

    def test_update_employee_replaces_by_id(self, store):
        store.save_employees([_employee("1"), _employee("2")])
        store.update_employee(_employee("2", proposed_raise=Decimal("5000")))
        loaded = {e.employee_id: e for e in store.get_employees()}
        assert loaded["2"].proposed_raise == Decimal("5000")
        assert loaded["1"].proposed_raise == Decimal("0")

    def test_update_unknown_employee_raises(self, store):
        store.save_employees([_employee("1")])
        with pytest.raises(EmployeeNotFoundError):
            store.update_employee(_employee("9"))

    def test_corrupt_document_raises_storage_error(self, store, cache):
        cache.setex("meritflow:employees", 60, "[{\"nope\": 1}]")
        with pytest.raises(StorageError):
            store.get_employees()

    def test_documents_expire_with_ttl(self, store, clock):
        store.save_employees([_employee("1")])
        clock.advance(3601)
        assert store.get_employees() == []


class TestSessionAndPolicy:
    def test_session_round_trip(self, store):
        meta = SessionMeta(salary_files=["salary.csv"], employee_count=3, total_budget=Decimal("25000"))
        store.save_session(meta)
        loaded = store.get_current_session()
        assert loaded.session_id == meta.session_id
        assert loaded.total_budget == Decimal("25000")

    def test_no_session_returns_none(self, store):
        assert store.get_current_session() is None
        assert store.get_policy_settings() is None

    def test_policy_round_trip(self, store):
        store.save_policy_settings(PolicySettings(comparatio_floor=80))
        assert store.get_policy_settings().comparatio_floor == 80

    def test_reset_clears_namespace_only(self, store, cache):
        cache.setex("fx:EUR:USD", 60, "x")
        store.save_employees([_employee("1")])
        store.save_session(SessionMeta())
        store.reset_all_data()
        assert store.get_employees() == []
        assert store.get_current_session() is None
        assert cache.get("fx:EUR:USD") == "x"


class TestParsedFileCache:
    def _result(self, accepted: bool = True) -> ParseResult:
        errors = [] if accepted else [ValidationIssue(type=IssueType.CORRUPTED_FILE, message="bad", fatal=True)]
        return ParseResult(
            file_name="salary.csv",
            file_type=FileType.SALARY,
            row_count=2,
            valid_rows=2,
            content_hash="abc123",
            errors=errors,
            data=[
                SalaryRow(employee_id="1", name="Ann Lee", base_salary=Decimal("50000")),
                PerformanceRow(employee_id="2", performance_rating=NumericRating(value=3.0)),
            ],
        )

    def test_hit_returns_typed_rows(self, cache):
        files = ParsedFileCache(cache)
        files.put(self._result())
        cached = files.get("abc123")
        assert isinstance(cached.data[0], SalaryRow)
        assert isinstance(cached.data[1], PerformanceRow)

    def test_rejected_results_not_cached(self, cache):
        files = ParsedFileCache(cache)
        files.put(self._result(accepted=False))
        assert files.get("abc123") is None

    def test_expected_type_is_part_of_key(self, cache):
        files = ParsedFileCache(cache)
        files.put(self._result(), "salary")
        assert files.get("abc123", "performance") is None
        assert files.get("abc123", "salary") is not None

    def test_entries_expire(self, cache, clock):
        files = ParsedFileCache(cache, ttl=100)
        files.put(self._result())
        clock.advance(101)
        assert files.get("abc123") is None

    def test_clear_removes_entries(self, cache):
        files = ParsedFileCache(cache)
        files.put(self._result())
        assert files.clear() == 1

    def test_clear_tolerates_cache_outage(self):
        broken = MagicMock()
        broken.delete_prefix.side_effect = CacheError("redis down")
        assert ParsedFileCache(broken).clear() == 0
