"""Retention-risk scoring."""

from __future__ import annotations

from typing import Optional

from meritflow.models.employee import DEFAULT_RETENTION_RISK, Employee
from meritflow.models.insights import RetentionRiskAssessment, RiskLevel, TenureInfo
from meritflow.models.rating import rating_label, rating_to_scale

HIGH_DEMAND_TITLES = ("engineer", "developer", "manager")


def risk_level(total: float) -> RiskLevel:
    if total < 20:
        return RiskLevel.LOW
    if total < 40:
        return RiskLevel.MEDIUM
    if total < 70:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def _comparatio_risk(comparatio: Optional[float], factors: list[str]) -> int:
    if not comparatio:
        return 0
    if comparatio < 75:
        factors.append(f"Significantly underpaid ({comparatio:g}% comparatio)")
        return 40
    if comparatio < 85:
        factors.append(f"Below market pay ({comparatio:g}% comparatio)")
        return 25
    if comparatio < 95:
        factors.append(f"Slightly below midpoint ({comparatio:g}% comparatio)")
        return 10
    if comparatio > 120:
        factors.append(f"Well above midpoint ({comparatio:g}% comparatio)")
        return 5
    return 0


def _performance_risk(employee: Employee, factors: list[str]) -> int:
    if employee.performance_rating is None:
        return 0
    score = rating_to_scale(employee.performance_rating)
    label = rating_label(employee.performance_rating)
    if score is None or score < 3.5:
        factors.append(f"Performance concerns ({label})")
        return 30
    if score >= 4.5:
        return 0
    if score >= 4.0:
        return 5
    factors.append(f"Solid but not top performance ({label})")
    return 15


def _tenure_risk(tenure: TenureInfo, factors: list[str]) -> int:
    risk = 0
    if tenure.time_in_role_months < 6:
        risk += 5
        factors.append("New to role")
    elif tenure.time_in_role_months > 48:
        risk += 15
        factors.append(f"Long time in role ({tenure.time_in_role_months} months)")
    elif tenure.time_in_role_months > 24:
        risk += 10
    if tenure.last_raise_months_ago is not None and tenure.last_raise_months_ago > 24:
        risk += 10
        factors.append(f"No raise in {tenure.last_raise_months_ago} months")
    return min(risk, 20)


def _market_risk(job_title: Optional[str], factors: list[str]) -> int:
    title = (job_title or "").lower()
    if any(t in title for t in HIGH_DEMAND_TITLES):
        factors.append("High-demand role")
        return 10
    return 5


def assess_retention_risk(employee: Employee, tenure: TenureInfo) -> RetentionRiskAssessment:
    """Sum of comparatio, performance, tenure and market sub-scores, capped at 100."""
    factors: list[str] = []
    comparatio_risk = _comparatio_risk(employee.comparatio, factors)
    performance_risk = _performance_risk(employee, factors)
    tenure_risk = _tenure_risk(tenure, factors)
    market_risk = _market_risk(employee.job_title, factors)
    total = min(100, comparatio_risk + performance_risk + tenure_risk + market_risk)
    return RetentionRiskAssessment(
        comparatio_risk=comparatio_risk,
        performance_risk=performance_risk,
        tenure_risk=tenure_risk,
        market_risk=market_risk,
        total_risk=total,
        level=risk_level(total),
        factors=factors,
    )


def estimate_retention_risk(employee: Employee) -> float:
    """Neutral-50 heuristic for records whose sheets carried no risk score."""
    risk = DEFAULT_RETENTION_RISK
    comparatio = employee.comparatio
    if comparatio:
        if comparatio < 75:
            risk += 25
        elif comparatio < 85:
            risk += 15
        elif comparatio < 95:
            risk += 5
        elif comparatio > 120:
            risk -= 10
        elif comparatio > 110:
            risk -= 5

    score = rating_to_scale(employee.performance_rating)
    if score is not None:
        if score >= 4.5:
            risk -= 20
        elif score >= 4.0:
            risk -= 10
        elif score >= 3.5:
            risk -= 5
        elif score < 2.5:
            risk += 15

    if employee.time_in_role is not None:
        if employee.time_in_role < 6:
            risk -= 5
        elif employee.time_in_role > 36:
            risk += 10
    return max(0.0, min(100.0, risk))
