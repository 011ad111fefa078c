"""Policy validation endpoint."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from meritflow.models.employee import Employee
from meritflow.models.policy import PolicySettings, PolicyViolation
from meritflow.policy.validator import budget_context, format_violation, validate_all, violation_level

router = APIRouter(tags=["policy"])


class ValidateRequest(BaseModel):
    employees: list[Employee] = Field(default_factory=list)
    settings: Optional[PolicySettings] = None
    total_budget: Optional[Decimal] = None


class ValidateResponse(BaseModel):
    level: str
    violations: list[PolicyViolation]
    messages: list[str]


@router.post("/validate", response_model=ValidateResponse)
async def validate(body: ValidateRequest, request: Request) -> ValidateResponse:
    policies = body.settings or PolicySettings.from_config(request.app.state.settings.policy)
    budget = budget_context(body.employees, body.total_budget) if body.total_budget is not None else None
    violations = validate_all(body.employees, policies, budget)
    return ValidateResponse(
        level=str(violation_level(violations)),
        violations=violations,
        messages=[format_violation(v) for v in violations],
    )
