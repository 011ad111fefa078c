"""Tenure and time-in-role from hire, role-start and last-raise dates."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from meritflow.metrics.dates import months_between, parse_date
from meritflow.models.insights import TenureBand, TenureInfo


def tenure_band(time_in_role_months: int) -> TenureBand:
    if time_in_role_months < 12:
        return TenureBand.NEW
    if time_in_role_months < 36:
        return TenureBand.DEVELOPING
    if time_in_role_months < 72:
        return TenureBand.EXPERIENCED
    return TenureBand.VETERAN


def calculate_tenure(hire_date: Any, role_start_date: Any = None, last_raise_date: Any = None,
                     today: Optional[date] = None, time_in_role: Optional[float] = None) -> TenureInfo:
    """Months of service and in role. Role start falls back to hire date,
    then to a time-in-role figure taken from the sheet."""
    today = today or date.today()
    hired = parse_date(hire_date)
    role_start = parse_date(role_start_date) or hired
    last_raise = parse_date(last_raise_date)

    total = months_between(hired, today) if hired else 0
    if role_start:
        in_role = months_between(role_start, today)
    else:
        in_role = int(time_in_role) if time_in_role and time_in_role > 0 else 0
    return TenureInfo(
        total_tenure_months=total,
        time_in_role_months=in_role,
        years_of_service=round(total / 12, 1),
        last_raise_months_ago=months_between(last_raise, today) if last_raise else None,
        band=tenure_band(in_role),
    )
