"""Typed rows produced by tabular ingestion.

Rows are immutable once parsed; the joiner reads them and builds
:class:`~meritflow.models.employee.Employee` records.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from meritflow.models.rating import PerformanceRating


class PersonFields(BaseModel):
    """Identifier and name columns shared by every sheet type."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    row_number: int = 0  # 1-based line in the source file
    employee_id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def display_source_name(self) -> str:
        """Name as written in the sheet, composed from parts if needed."""
        if self.name:
            return self.name
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    @property
    def has_name(self) -> bool:
        return bool(self.name or self.first_name or self.last_name)

    @property
    def reference(self) -> str:
        """Best identifier for messages."""
        return self.employee_id or self.email or self.display_source_name or f"row {self.row_number}"


class PerformanceFields(BaseModel):
    """Review columns; also embedded on salary rows from combined exports."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    performance_rating: Optional[PerformanceRating] = None
    business_impact_score: Optional[float] = None
    retention_risk: Optional[float] = None
    future_talent: Optional[str] = None
    movement_readiness: Optional[str] = None
    proposed_talent_actions: Optional[str] = None

    @property
    def has_performance_data(self) -> bool:
        return any(
            v is not None
            for v in (
                self.performance_rating, self.business_impact_score, self.retention_risk,
                self.future_talent, self.movement_readiness, self.proposed_talent_actions,
            )
        )


class SalaryRow(PersonFields, PerformanceFields):
    """One row from a compensation export."""

    row_kind: Literal["salary"] = "salary"

    base_salary: Optional[Decimal] = None
    currency: Optional[str] = None
    country: Optional[str] = None
    salary_grade_min: Optional[Decimal] = None
    salary_grade_mid: Optional[Decimal] = None
    salary_grade_max: Optional[Decimal] = None
    comparatio: Optional[float] = None
    grade_level: Optional[str] = None
    department_code: Optional[str] = None
    job_title: Optional[str] = None
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    management_level: Optional[str] = None
    is_manager: Optional[bool] = None
    is_team_lead: Optional[bool] = None
    hire_date: Optional[str] = None
    role_start_date: Optional[str] = None
    last_raise_date: Optional[str] = None
    time_in_role: Optional[float] = None
    salary_range_segment: Optional[str] = None
    below_range_minimum: Optional[bool] = None


class PerformanceRow(PersonFields, PerformanceFields):
    """One row from a performance-review export."""

    row_kind: Literal["performance"] = "performance"


ParsedRow = Annotated[Union[SalaryRow, PerformanceRow], Field(discriminator="row_kind")]
