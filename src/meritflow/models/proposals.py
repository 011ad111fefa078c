"""Manager proposal and compensation-review rows."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from meritflow.models.employee import Employee
from meritflow.models.results import ValidationIssue


class ProposalRow(BaseModel):
    """One manager-authored override line, already column-mapped."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    row_number: int = 0
    employee_id: str
    name: Optional[str] = None
    currency: Optional[str] = None
    current_salary: Optional[Decimal] = None
    proposed_raise: Optional[Decimal] = None
    proposed_raise_percent: Optional[float] = None
    proposed_salary: Optional[Decimal] = None
    proposed_comparatio: Optional[float] = None
    salary_recommendation: Optional[str] = None
    adjustment_notes: Optional[str] = None
    has_promotion: Optional[bool] = None
    new_job_title: Optional[str] = None
    new_salary_grade: Optional[str] = None
    promotion_type: Optional[str] = None
    promotion_justification: Optional[str] = None
    promotion_effective_date: Optional[str] = None
    new_salary_grade_min: Optional[Decimal] = None
    new_salary_grade_mid: Optional[Decimal] = None
    new_salary_grade_max: Optional[Decimal] = None


class CompReviewRow(BaseModel):
    """One line of a compensation-review sheet."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    row_number: int = 0
    employee_id: Optional[str] = None
    name: Optional[str] = None
    proposed_raise: Optional[Decimal] = None  # USD
    merit_recommendation: Optional[str] = None
    salary_adjustment_notes: Optional[str] = None


class ImportSummary(BaseModel):
    total_proposals: int = 0
    successful_matches: int = 0
    failed_matches: int = 0
    total_raise_amount: Decimal = Decimal("0")  # USD


class ProposalImportResult(BaseModel):
    success: bool = True
    updated_employees: list[Employee] = Field(default_factory=list)
    matched_employee_ids: list[str] = Field(default_factory=list)
    unmatched_proposals: list[str] = Field(default_factory=list)
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    summary: ImportSummary = Field(default_factory=ImportSummary)
