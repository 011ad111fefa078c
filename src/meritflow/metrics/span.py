"""Span of control: direct and indirect reports resolved through ``manager_id``.

Managers are recognised by an explicit flag, by a management level naming a
manager, director or VP, by a job title naming a manager, director, lead or
supervisor, or simply by having someone report to them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Optional

from meritflow.joining.similarity import normalize_employee_id
from meritflow.models.employee import Employee
from meritflow.models.insights import SpanOfControl

logger = logging.getLogger(__name__)

INDIVIDUAL_CONTRIBUTOR = "Individual Contributor"
_LEVEL_MARKERS = ("manager", "director", "vp", "vice president")
_TITLE_MARKERS = ("manager", "director", "lead", "supervisor")

ReportsIndex = dict[str, list[Employee]]


def management_level(employee: Employee) -> str:
    return (employee.management_level or "").strip() or INDIVIDUAL_CONTRIBUTOR


def is_manager(employee: Employee) -> bool:
    """Manager by flag, level or title; reporting lines are not consulted here."""
    if employee.is_manager:
        return True
    level = (employee.management_level or "").lower()
    if any(marker in level for marker in _LEVEL_MARKERS):
        return True
    title = (employee.job_title or "").lower()
    return any(marker in title for marker in _TITLE_MARKERS)


def is_team_lead(employee: Employee) -> bool:
    return bool(employee.is_team_lead)


def build_reports_index(employees: Iterable[Employee]) -> ReportsIndex:
    """Normalised manager id -> employees naming that manager."""
    index: ReportsIndex = defaultdict(list)
    for employee in employees:
        manager_key = normalize_employee_id(employee.manager_id)
        if manager_key and manager_key != normalize_employee_id(employee.employee_id):
            index[manager_key].append(employee)
    return index


def _leads_people(employee: Employee, index: ReportsIndex) -> bool:
    return is_manager(employee) or is_team_lead(employee) or bool(
        index.get(normalize_employee_id(employee.employee_id))
    )


def _team_size(root_key: str, index: ReportsIndex) -> int:
    # Walk the reporting tree once per person; cyclic manager ids stop at the first repeat.
    visited = {root_key}
    pending = [root_key]
    size = 0
    while pending:
        for report in index.get(pending.pop(), []):
            key = normalize_employee_id(report.employee_id)
            if key in visited:
                continue
            visited.add(key)
            size += 1
            pending.append(key)
    return size


def calculate_span_of_control(employee: Employee, employees: Iterable[Employee],
                              index: Optional[ReportsIndex] = None) -> SpanOfControl:
    """Span of control for ``employee`` within ``employees``.

    Pass a prebuilt ``index`` when computing spans for a whole roster.
    """
    if index is None:
        index = build_reports_index(employees)
    key = normalize_employee_id(employee.employee_id)
    direct = index.get(key, []) if key else []
    manager = is_manager(employee) or bool(direct)
    team_lead = is_team_lead(employee)
    level = management_level(employee)
    if not manager and not team_lead:
        return SpanOfControl(management_level=level)

    return SpanOfControl(
        is_manager=manager,
        is_team_lead=team_lead,
        management_level=level,
        direct_reports=len(direct),
        managers_under=sum(1 for report in direct if _leads_people(report, index)),
        total_team_size=_team_size(key, index) if key else 0,
        direct_report_ids=[report.employee_id for report in direct],
    )


def span_of_control_map(employees: list[Employee]) -> dict[str, SpanOfControl]:
    """Span of control for every manager or team lead, keyed by employee id."""
    index = build_reports_index(employees)
    spans: dict[str, SpanOfControl] = {}
    for employee in employees:
        span = calculate_span_of_control(employee, employees, index)
        if span.is_manager or span.is_team_lead:
            spans[employee.employee_id] = span
    logger.debug("Resolved span of control for %d of %d employees", len(spans), len(employees))
    return spans


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def format_span_of_control(span: SpanOfControl) -> tuple[str, list[str]]:
    """Summary line and detail lines for display."""
    if not span.is_manager and not span.is_team_lead:
        return INDIVIDUAL_CONTRIBUTOR, []
    details: list[str] = []
    if span.direct_reports:
        details.append(_plural(span.direct_reports, "direct report"))
    if span.managers_under:
        details.append(f"{_plural(span.managers_under, 'manager')} reporting")
    if span.indirect_reports > 0:
        details.append(_plural(span.indirect_reports, "indirect report"))
    role = "Manager" if span.is_manager else "Team Lead"
    summary = f"{role} ({span.total_team_size} total team members)" if span.total_team_size else role
    return summary, details
