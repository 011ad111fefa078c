"""Derived-metric result models."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field

from meritflow.core.regions import is_india
from meritflow.models.money import Money


class TenureBand(StrEnum):
    NEW = "New"
    DEVELOPING = "Developing"
    EXPERIENCED = "Experienced"
    VETERAN = "Veteran"


class RiskLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class RangePosition(StrEnum):
    BELOW_RANGE = "Below Range"
    LOW = "Low"
    TARGET = "Target"
    HIGH = "High"
    ABOVE_RANGE = "Above Range"


class MarketPosition(StrEnum):
    BELOW_MARKET = "Below Market"
    COMPETITIVE = "Competitive"
    ABOVE_MARKET = "Above Market"


class Priority(StrEnum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TenureInfo(BaseModel):
    total_tenure_months: int = 0
    time_in_role_months: int = 0
    years_of_service: float = 0.0
    last_raise_months_ago: Optional[int] = None
    band: TenureBand = TenureBand.NEW


class RetentionRiskAssessment(BaseModel):
    comparatio_risk: int = 0
    performance_risk: int = 0
    tenure_risk: int = 0
    market_risk: int = 0
    total_risk: int = 0
    level: RiskLevel = RiskLevel.LOW
    factors: list[str] = Field(default_factory=list)


class SalaryAnalysis(BaseModel):
    """Where a salary sits in its grade, in local currency."""

    comparatio: float
    position_in_range: RangePosition
    room_for_growth: Money
    market_position: MarketPosition
    grade_min: Money
    grade_mid: Money
    grade_max: Money


class SpanOfControl(BaseModel):
    """Who reports to a manager or team lead, directly and through sub-managers."""

    is_manager: bool = False
    is_team_lead: bool = False
    management_level: str = "Individual Contributor"
    direct_reports: int = 0
    managers_under: int = 0
    total_team_size: int = 0
    direct_report_ids: list[str] = Field(default_factory=list)

    @property
    def indirect_reports(self) -> int:
        return self.total_team_size - self.direct_reports


class BudgetConstraints(BaseModel):
    """Limits a single recommendation is clamped to."""

    available_budget: Decimal = Decimal("0")  # USD
    max_raise_percent: float = 12

    @classmethod
    def for_country(cls, country: Optional[str], available_budget: Decimal = Decimal("0")) -> BudgetConstraints:
        return cls(
            available_budget=available_budget,
            max_raise_percent=10 if is_india(country) else 12,
        )


class RaiseRecommendation(BaseModel):
    percent: float
    amount: Money  # USD
    reasoning: list[str] = Field(default_factory=list)
    priority: Priority = Priority.LOW


class EmployeeInsights(BaseModel):
    employee_id: str
    tenure: TenureInfo
    risk: RetentionRiskAssessment
    salary: SalaryAnalysis
    recommendation: RaiseRecommendation
    span_of_control: Optional[SpanOfControl] = None


class WorkforceStatistics(BaseModel):
    employee_count: int = 0
    average_comparatio: Optional[float] = None
    total_base_salary_usd: Decimal = Decimal("0")
    total_proposed_raise_usd: Decimal = Decimal("0")
    average_percent_change: float = 0.0
    currency_distribution: dict[str, int] = Field(default_factory=dict)
    country_distribution: dict[str, int] = Field(default_factory=dict)
    risk_distribution: dict[str, int] = Field(default_factory=dict)
    employees_with_performance: int = 0
    employees_with_promotion: int = 0
    manager_count: int = 0
    average_span_of_control: Optional[float] = None
    max_span_of_control: int = 0
