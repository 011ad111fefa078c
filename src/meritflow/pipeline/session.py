"""Planning session: the one explicit owner of a compensation cycle's state.

Holds the parsed files, the joined employee list, the budget and the policy
settings, and drives ingestion -> join -> currency -> enrichment. Storage is
best-effort: a failed save is logged and the in-memory session carries on.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from meritflow.core.config import AppSettings
from meritflow.core.exceptions import CacheError, EmployeeNotFoundError, StorageError
from meritflow.core.protocols import IFileStore, ISessionStore
from meritflow.currency.converter import CurrencyConverter
from meritflow.imports.comp_review import merge_comp_review, parse_comp_review_file, validate_for_merge
from meritflow.imports.proposals import import_proposals
from meritflow.ingestion.parser import content_hash, parse_file
from meritflow.joining.joiner import JoinOptions, join_records
from meritflow.joining.similarity import normalize_employee_id
from meritflow.metrics.compensation import apply_conversion, set_proposed_raise, set_raise_percent
from meritflow.metrics.enrichment import analyze_employee, enrich_employees, summarize_employees
from meritflow.models.currency import RateSource
from meritflow.models.employee import Employee
from meritflow.models.insights import EmployeeInsights, WorkforceStatistics
from meritflow.models.policy import PolicySettings, PolicyViolation
from meritflow.models.proposals import ProposalImportResult
from meritflow.models.results import FileType, IssueType, ParseResult, Severity, ValidationIssue
from meritflow.models.session import ProcessingResult, SessionMeta
from meritflow.persistence.file_cache import ParsedFileCache
from meritflow.policy.validator import budget_context, validate_all

logger = logging.getLogger(__name__)


class PlanningSession:
    """Single-user planning session over pluggable storage and rate lookups."""

    def __init__(self, settings: AppSettings | None = None, *,
                 converter: CurrencyConverter,
                 store: ISessionStore | None = None,
                 file_cache: ParsedFileCache | None = None,
                 file_store: IFileStore | None = None) -> None:
        self._settings = settings or AppSettings()
        self._converter = converter
        self._store = store
        self._file_cache = file_cache
        self._file_store = file_store
        self._files: list[ParseResult] = []
        self.employees: list[Employee] = []
        self.meta = SessionMeta()
        self.policies = PolicySettings.from_config(self._settings.policy)

    # ---- ingestion ----

    def ingest(self, file_name: str, data: bytes,
               expected_type: FileType | str = FileType.UNKNOWN) -> ParseResult:
        """Parse one file and keep it for the next :meth:`process` if accepted."""
        cache_type = str(FileType(expected_type))
        result = None
        if self._file_cache is not None and data:
            result = self._file_cache.get(content_hash(data), cache_type)
            if result is not None:
                logger.info("Using cached parse of %s", file_name)
                result = result.model_copy(update={"file_name": file_name})
        if result is None:
            result = parse_file(file_name, data, expected_type, self._settings.ingestion)
            if self._file_cache is not None:
                self._file_cache.put(result, cache_type)

        if result.accepted:
            self._files = [f for f in self._files if f.file_name != file_name]
            self._files.append(result)
            self.meta.salary_files = [f.file_name for f in self._files if f.file_type is FileType.SALARY]
            self.meta.performance_files = [
                f.file_name for f in self._files if f.file_type is FileType.PERFORMANCE
            ]
            self.meta.touch()
        return result

    def ingest_batch(self, files: Iterable[tuple[str, bytes]],
                     expected_type: FileType | str = FileType.UNKNOWN) -> list[ParseResult]:
        return [self.ingest(name, data, expected_type) for name, data in files]

    def ingest_from_store(self, prefix: str,
                          expected_type: FileType | str = FileType.UNKNOWN) -> list[ParseResult]:
        """Parse every file under ``prefix`` in the attached file store."""
        if self._file_store is None:
            raise StorageError("No file store configured for this session")
        paths = self._file_store.list_files(prefix)
        logger.info("Ingesting %d files from %s", len(paths), prefix)
        return [
            self.ingest(path.rsplit("/", 1)[-1], self._file_store.read(path), expected_type)
            for path in paths
        ]

    @property
    def files(self) -> list[ParseResult]:
        return list(self._files)

    # ---- processing ----

    async def process(self, options: JoinOptions | None = None,
                      today: Optional[date] = None) -> ProcessingResult:
        """Join the ingested rows, convert salaries to USD and enrich."""
        options = options or JoinOptions.from_config(self._settings.join)
        salary_rows = [r for f in self._files for r in f.salary_rows]
        performance_rows = [r for f in self._files for r in f.performance_rows]
        result = ProcessingResult()
        if not salary_rows:
            result.warnings.append(ValidationIssue(
                type=IssueType.MISSING_REQUIRED_DATA,
                severity=Severity.WARNING,
                message="No salary data loaded; upload a salary export first",
            ))
            return result

        joined = join_records(salary_rows, performance_rows, options)
        result.join = joined
        employees = joined.joined_employees

        conversions = await self._converter.convert_batch(
            [e.base_salary_money for e in employees], "USD"
        )
        for employee, conversion in zip(employees, conversions):
            apply_conversion(employee, conversion)
            if conversion.degraded:
                result.warnings.append(ValidationIssue(
                    type=IssueType.CURRENCY_FALLBACK,
                    severity=Severity.WARNING,
                    message=conversion.warning or f"{employee.currency} rate is not live",
                    employee_id=employee.employee_id,
                ))
        counts = Counter(str(c.source) for c in conversions)
        result.rate_sources = dict(counts)
        result.used_fallback_rates = counts.get(str(RateSource.FALLBACK), 0) > 0

        self.employees = enrich_employees(employees, today)
        result.employees = self.employees
        result.warnings.extend(self._unmatched_warnings(joined.unmatched_salary_rows,
                                                        joined.unmatched_performance_rows))

        self.meta.employee_count = len(self.employees)
        self.meta.touch()
        result.persisted = self._persist()
        logger.info("Processed %d employees (%d warnings)", len(self.employees), len(result.warnings))
        return result

    @staticmethod
    def _unmatched_warnings(salary_rows, performance_rows) -> list[ValidationIssue]:
        warnings: list[ValidationIssue] = []
        if salary_rows:
            warnings.append(ValidationIssue(
                type=IssueType.UNMATCHED_RECORD,
                severity=Severity.WARNING,
                message=f"{len(salary_rows)} salary rows had no performance match",
                suggestion="Check employee IDs or emails agree across files",
            ))
        if performance_rows:
            shown = ", ".join(r.reference for r in performance_rows[:10])
            warnings.append(ValidationIssue(
                type=IssueType.UNMATCHED_RECORD,
                severity=Severity.WARNING,
                message=f"{len(performance_rows)} performance rows matched no salary row: {shown}",
            ))
        return warnings

    # ---- overrides ----

    def apply_proposals(self, file_name: str, data: bytes) -> ProposalImportResult:
        result = import_proposals(file_name, data, self.employees, self._settings.ingestion)
        if result.success:
            self.employees = result.updated_employees
            self._persist()
        return result

    def apply_comp_review(self, file_name: str, data: bytes) -> ProposalImportResult:
        rows, issues = parse_comp_review_file(file_name, data, self._settings.ingestion)
        fatal = [i for i in issues if i.fatal]
        if fatal:
            return ProposalImportResult(success=False, updated_employees=list(self.employees), errors=fatal)
        checks = validate_for_merge(rows)
        errors = [c for c in checks if c.severity is Severity.ERROR]
        if errors:
            return ProposalImportResult(success=False, updated_employees=list(self.employees), errors=errors)
        result = merge_comp_review(self.employees, rows)
        result.warnings[:0] = issues + checks
        if result.success:
            self.employees = result.updated_employees
            self._persist()
        return result

    def find(self, employee_id: str) -> Employee:
        key = normalize_employee_id(employee_id)
        for employee in self.employees:
            if normalize_employee_id(employee.employee_id) == key:
                return employee
        raise EmployeeNotFoundError(employee_id)

    def set_raise(self, employee_id: str, amount_usd: Any = None, percent: Any = None) -> Employee:
        """Edit one raise, by USD amount or by percent of USD salary."""
        if (amount_usd is None) == (percent is None):
            raise ValueError("give exactly one of amount_usd or percent")
        employee = self.find(employee_id)
        if percent is not None:
            set_raise_percent(employee, percent)
        else:
            set_proposed_raise(employee, amount_usd)
        if self._store is not None:
            try:
                self._store.update_employee(employee)
            except (CacheError, StorageError, EmployeeNotFoundError) as exc:
                logger.warning("Could not save raise for %s: %s", employee_id, exc)
        return employee

    def set_budget(self, total_budget: Any) -> None:
        self.meta.total_budget = Decimal(str(total_budget)) if total_budget is not None else None
        self.meta.touch()
        self._persist()

    # ---- read side ----

    def violations(self, policies: PolicySettings | None = None,
                   today: Optional[date] = None) -> list[PolicyViolation]:
        budget = None
        if self.meta.total_budget is not None:
            budget = budget_context(self.employees, self.meta.total_budget)
        return validate_all(self.employees, policies or self.policies, budget, today)

    def statistics(self) -> WorkforceStatistics:
        return summarize_employees(self.employees)

    def insights(self, employee_id: str, today: Optional[date] = None) -> EmployeeInsights:
        """Insights for one employee, span of control resolved over the session roster."""
        remaining = Decimal("0")
        if self.meta.total_budget is not None:
            remaining = max(budget_context(self.employees, self.meta.total_budget).remaining, Decimal("0"))
        return analyze_employee(self.find(employee_id), today, remaining, employees=self.employees)

    def update_policy_settings(self, **changes: Any) -> PolicySettings:
        self.policies = PolicySettings.model_validate({**self.policies.model_dump(), **changes})
        if self._store is not None:
            try:
                self._store.save_policy_settings(self.policies)
            except (CacheError, StorageError) as exc:
                logger.warning("Could not save policy settings: %s", exc)
        return self.policies

    # ---- storage ----

    def _persist(self) -> bool:
        if self._store is None:
            return False
        try:
            self._store.save_employees(self.employees)
            self._store.save_session(self.meta)
        except (CacheError, StorageError) as exc:
            logger.warning("Session not saved: %s", exc)
            return False
        return True

    def restore(self) -> bool:
        """Reload the last saved session. False when nothing was stored or the store is unreachable."""
        if self._store is None:
            return False
        try:
            meta = self._store.get_current_session()
            if meta is None:
                return False
            employees = self._store.get_employees()
            policies = self._store.get_policy_settings()
        except (CacheError, StorageError) as exc:
            logger.warning("Session not restored: %s", exc)
            return False
        self.meta = meta
        self.employees = employees
        self.policies = policies or self.policies
        logger.info("Restored session %s with %d employees", meta.session_id, len(self.employees))
        return True

    def reset(self) -> None:
        self._files.clear()
        self.employees = []
        self.meta = SessionMeta()
        self.policies = PolicySettings.from_config(self._settings.policy)
        if self._store is not None:
            try:
                self._store.reset_all_data()
            except (CacheError, StorageError) as exc:
                logger.warning("Stored session data not cleared: %s", exc)
        if self._file_cache is not None:
            self._file_cache.clear()
