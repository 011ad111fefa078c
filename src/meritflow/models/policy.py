"""Raise-policy settings and violations."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from meritflow.core.config import PolicyConfig


class ViolationType(StrEnum):
    COMPARATIO_TOO_LOW = "COMPARATIO_TOO_LOW"
    RAISE_TOO_HIGH = "RAISE_TOO_HIGH"
    RAISE_NOT_VERIFIABLE = "RAISE_NOT_VERIFIABLE"
    NO_RAISE_TOO_LONG = "NO_RAISE_TOO_LONG"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    INVALID_PROMOTION_TYPE = "INVALID_PROMOTION_TYPE"
    PROMOTION_TOO_SOON = "PROMOTION_TOO_SOON"
    GRADE_JUMP_TOO_LARGE = "GRADE_JUMP_TOO_LARGE"
    MISSING_PROMOTION_JUSTIFICATION = "MISSING_PROMOTION_JUSTIFICATION"
    MISSING_NEW_TITLE = "MISSING_NEW_TITLE"
    DEMOTION_WITH_RAISE = "DEMOTION_WITH_RAISE"


class ViolationSeverity(StrEnum):
    WARNING = "WARNING"
    ERROR = "ERROR"


class PromotionType(StrEnum):
    VERTICAL = "VERTICAL"
    LATERAL = "LATERAL"
    INTERNAL = "INTERNAL"
    DEMOTION = "DEMOTION"


class PolicySettings(BaseModel):
    """Thresholds a validation pass runs against."""

    comparatio_floor: float = 76
    max_raise_percent_us: float = 12
    max_raise_percent_india: float = 35
    max_promotion_raise_percent_us: float = 20
    max_promotion_raise_percent_india: float = 45
    no_raise_threshold_months: int = 18
    min_months_between_promotions: int = 12
    max_grade_jump: int = 2

    @classmethod
    def from_config(cls, config: PolicyConfig | None = None) -> PolicySettings:
        config = config or PolicyConfig()
        return cls(**config.model_dump())


class PolicyViolation(BaseModel):
    type: ViolationType
    severity: ViolationSeverity
    message: str
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    current_value: Optional[float] = None
    threshold: Optional[float] = None


class BudgetContext(BaseModel):
    """Aggregate raise budget, all amounts in USD."""

    total_budget: Decimal = Decimal("0")
    current_usage: Decimal = Decimal("0")
    employee_count: int = 0

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.current_usage
