"""Planning session metadata."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from meritflow.models.employee import Employee
from meritflow.models.results import JoinResult, ValidationIssue


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionMeta(BaseModel):
    session_id: str = Field(default_factory=lambda: uuid4().hex)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
    salary_files: list[str] = Field(default_factory=list)
    performance_files: list[str] = Field(default_factory=list)
    employee_count: int = 0
    total_budget: Optional[Decimal] = None

    def touch(self) -> None:
        self.updated_at = _now()


class ProcessingResult(BaseModel):
    """Outcome of one join + conversion + enrichment pass."""

    join: JoinResult = Field(default_factory=JoinResult)
    employees: list[Employee] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)
    rate_sources: dict[str, int] = Field(default_factory=dict)
    used_fallback_rates: bool = False
    persisted: bool = False
