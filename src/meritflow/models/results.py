"""Structured ingestion and join results."""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from meritflow.models.employee import Employee
from meritflow.models.rows import ParsedRow, PerformanceRow, SalaryRow


class Severity(StrEnum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class IssueType(StrEnum):
    MISSING_COLUMN = "MISSING_COLUMN"
    MISSING_REQUIRED_DATA = "MISSING_REQUIRED_DATA"
    INVALID_DATA_TYPE = "INVALID_DATA_TYPE"
    INVALID_FORMAT = "INVALID_FORMAT"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    CORRUPTED_FILE = "CORRUPTED_FILE"
    DUPLICATE_DATA = "DUPLICATE_DATA"
    INCONSISTENT_DATA = "INCONSISTENT_DATA"
    METADATA_REMOVED = "METADATA_REMOVED"
    LOW_VALIDITY = "LOW_VALIDITY"
    UNMATCHED_RECORD = "UNMATCHED_RECORD"
    CURRENCY_FALLBACK = "CURRENCY_FALLBACK"


class ValidationIssue(BaseModel):
    """One problem found while reading or reconciling data."""

    type: IssueType
    severity: Severity = Severity.ERROR
    message: str
    field: Optional[str] = None
    row: Optional[int] = None
    employee_id: Optional[str] = None
    suggestion: Optional[str] = None
    fatal: bool = False  # blocks the whole file


class FileType(StrEnum):
    SALARY = "salary"
    PERFORMANCE = "performance"
    UNKNOWN = "unknown"


class DataQuality(BaseModel):
    completeness_score: float = 0.0  # percent of mapped cells that are filled
    duplicate_count: int = 0
    duplicate_ids: list[str] = Field(default_factory=list)


class ParseResult(BaseModel):
    """Everything learned from one uploaded file."""

    file_name: str
    file_type: FileType = FileType.UNKNOWN
    row_count: int = 0
    valid_rows: int = 0
    header_row_index: Optional[int] = None
    removed_rows: int = 0
    headers: list[str] = Field(default_factory=list)
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    data: list[ParsedRow] = Field(default_factory=list)
    quality: DataQuality = Field(default_factory=DataQuality)
    content_hash: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return not any(issue.fatal for issue in self.errors)

    @property
    def validity_rate(self) -> float:
        return self.valid_rows / self.row_count if self.row_count else 0.0

    @property
    def salary_rows(self) -> list[SalaryRow]:
        return [r for r in self.data if isinstance(r, SalaryRow)]

    @property
    def performance_rows(self) -> list[PerformanceRow]:
        return [r for r in self.data if isinstance(r, PerformanceRow)]


class MatchType(StrEnum):
    ID = "id"
    EMAIL = "email"
    NAME = "name"
    UNMATCHED = "unmatched"


class MatchRecord(BaseModel):
    """How one salary row found (or failed to find) its performance row."""

    salary_row: int
    employee_id: Optional[str] = None
    match_type: MatchType
    performance_row: Optional[int] = None
    similarity: Optional[float] = None


class EmployeeValidation(BaseModel):
    employee_id: Optional[str] = None
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class JoinSummary(BaseModel):
    total_salary_rows: int = 0
    total_performance_rows: int = 0
    successful_joins: int = 0
    id_matches: int = 0
    email_matches: int = 0
    name_matches: int = 0
    unmatched_salary: int = 0
    unmatched_performance: int = 0


class JoinResult(BaseModel):
    joined_employees: list[Employee] = Field(default_factory=list)
    unmatched_salary_rows: list[SalaryRow] = Field(default_factory=list)
    unmatched_performance_rows: list[PerformanceRow] = Field(default_factory=list)
    summary: JoinSummary = Field(default_factory=JoinSummary)
    matches: list[MatchRecord] = Field(default_factory=list)
    validation_results: list[EmployeeValidation] = Field(default_factory=list)
