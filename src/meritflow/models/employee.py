"""Unified employee record: the shape every downstream stage operates on."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from meritflow.models.currency import RateSource
from meritflow.models.money import Money
from meritflow.models.rating import PerformanceRating

DEFAULT_RETENTION_RISK = 50.0


class Employee(BaseModel):
    """Salary and performance data for one person plus derived fields.

    Monetary fields are stored as plain Decimals with ``currency`` naming the
    local unit; ``base_salary_usd`` and ``proposed_raise`` are always USD.
    Use the ``*_money`` properties for arithmetic so units are checked.
    """

    # --- Identity ---
    employee_id: str
    email: Optional[str] = None
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    middle_name: Optional[str] = None
    display_name: str = ""

    # --- Organisation ---
    country: Optional[str] = None
    department_code: Optional[str] = None
    job_title: Optional[str] = None
    grade_level: Optional[str] = None
    manager_id: Optional[str] = None
    manager_name: Optional[str] = None
    management_level: Optional[str] = None
    is_manager: Optional[bool] = None
    is_team_lead: Optional[bool] = None

    # --- Compensation (local currency unless noted) ---
    currency: str = "USD"
    base_salary: Decimal = Decimal("0")
    base_salary_usd: Optional[Decimal] = None
    salary_grade_min: Optional[Decimal] = None
    salary_grade_mid: Optional[Decimal] = None
    salary_grade_max: Optional[Decimal] = None
    comparatio: Optional[float] = None
    salary_range_segment: Optional[str] = None
    below_range_minimum: Optional[bool] = None
    exchange_rate: Optional[Decimal] = None  # local units per USD
    rate_source: Optional[RateSource] = None

    # --- Dates ---
    hire_date: Optional[str] = None
    role_start_date: Optional[str] = None
    last_raise_date: Optional[str] = None
    time_in_role: Optional[float] = None  # months

    # --- Performance ---
    performance_rating: Optional[PerformanceRating] = None
    business_impact_score: Optional[float] = None
    retention_risk: float = DEFAULT_RETENTION_RISK
    retention_risk_supplied: bool = False
    future_talent: Optional[str] = None
    movement_readiness: Optional[str] = None
    proposed_talent_actions: Optional[str] = None

    # --- Planning ---
    proposed_raise: Decimal = Decimal("0")  # USD
    new_salary: Decimal = Decimal("0")  # local
    percent_change: float = 0.0
    projected_comparatio: Optional[float] = None
    merit_recommendation: Optional[str] = None
    salary_adjustment_notes: Optional[str] = None

    # --- Promotion ---
    has_promotion: bool = False
    new_job_title: Optional[str] = None
    new_salary_grade: Optional[str] = None
    promotion_type: Optional[str] = None
    promotion_justification: Optional[str] = None
    promotion_effective_date: Optional[str] = None
    new_salary_grade_min: Optional[Decimal] = None
    new_salary_grade_mid: Optional[Decimal] = None
    new_salary_grade_max: Optional[Decimal] = None
    last_promotion_date: Optional[str] = None

    data_quality_warnings: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.employee_id

    @property
    def base_salary_money(self) -> Money:
        return Money(amount=self.base_salary, currency=self.currency)

    @property
    def base_salary_usd_money(self) -> Money:
        usd = self.base_salary_usd
        if usd is None:
            usd = self.base_salary if self.currency == "USD" else Decimal("0")
        return Money(amount=usd, currency="USD")

    @property
    def proposed_raise_money(self) -> Money:
        return Money(amount=self.proposed_raise, currency="USD")

    @property
    def new_salary_money(self) -> Money:
        return Money(amount=self.new_salary, currency=self.currency)

    @property
    def local_per_usd(self) -> Optional[Decimal]:
        """Ratio local salary / USD salary, the rate used to move raises between units."""
        if self.currency == "USD":
            return Decimal("1")
        usd = self.base_salary_usd
        if usd is None or usd <= 0 or self.base_salary <= 0:
            return None
        return self.base_salary / usd

    @property
    def effective_grade_mid(self) -> Optional[Decimal]:
        """Midpoint that applies after the plan: the new grade's when promoted."""
        if self.has_promotion and self.new_salary_grade_mid:
            return self.new_salary_grade_mid
        return self.salary_grade_mid
