"""Synonym tables mapping export headers to canonical field names.

Header text is compared after lower-casing and folding underscores and runs
of whitespace to a single space, so "Employee_Number" and "employee number"
are the same spelling. Within a field, synonyms are listed best first: when a
file carries several matching columns, the earliest non-blank one wins.
"""

from __future__ import annotations

import re

from meritflow.models.schema_mapping import ColumnMapping, FieldKind, FieldSpec, SchemaMapping

K = FieldKind

_ID = (
    "employee id", "employee number", "employeeid", "emp id", "associate id",
    "worker id", "id",
)
_NAME = ("employee full name", "full name", "employee name", "name", "worker")

SALARY_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="employee_id", kind=K.IDENTIFIER, synonyms=_ID),
    FieldSpec(name="email", kind=K.EMAIL, synonyms=("email", "email address", "e-mail", "work email")),
    FieldSpec(name="name", synonyms=_NAME),
    FieldSpec(name="first_name", synonyms=("first name", "firstname", "given name")),
    FieldSpec(name="last_name", synonyms=("last name", "lastname", "surname", "family name")),
    FieldSpec(name="country", synonyms=("country", "country iso2", "location")),
    FieldSpec(name="currency", kind=K.CURRENCY_CODE, synonyms=("currency", "curr")),
    FieldSpec(name="base_salary", kind=K.MONEY, synonyms=(
        "base salary", "basesalary", "annual salary", "base pay all countries",
        "annual calculated base pay all countries", "total base pay", "salary",
    )),
    FieldSpec(name="salary_grade_min", kind=K.MONEY, synonyms=(
        "salary grade min", "min pay grade value", "grade min", "min salary",
    )),
    FieldSpec(name="salary_grade_mid", kind=K.MONEY, synonyms=(
        "salary grade mid", "mid pay grade value", "grade mid", "mid salary",
    )),
    FieldSpec(name="salary_grade_max", kind=K.MONEY, synonyms=(
        "salary grade max", "max pay grade value", "grade max", "max salary",
    )),
    FieldSpec(name="comparatio", kind=K.COMPARATIO, synonyms=("comparatio", "compa ratio", "compa-ratio")),
    FieldSpec(name="time_in_role", kind=K.NUMBER, synonyms=(
        "time in role", "months in role", "tenure",
    )),
    FieldSpec(name="hire_date", kind=K.DATE, synonyms=(
        "latest hire date", "hire date", "original hire date", "start date",
    )),
    FieldSpec(name="role_start_date", kind=K.DATE, synonyms=(
        "job entry start date", "role start date", "current role start",
    )),
    FieldSpec(name="last_raise_date", kind=K.DATE, synonyms=(
        "last salary change date", "last raise date",
    )),
    FieldSpec(name="department_code", synonyms=("department - cc based", "department code", "department")),
    FieldSpec(name="job_title", synonyms=(
        "business title", "job title", "title", "job profile", "job function", "job family",
    )),
    FieldSpec(name="manager_id", kind=K.IDENTIFIER, synonyms=("manager employee number", "manager id")),
    FieldSpec(name="manager_name", synonyms=(
        "first line manager", "manager full name", "manager name", "direct manager", "supervisor",
    )),
    FieldSpec(name="management_level", synonyms=("management level", "position level", "job level")),
    FieldSpec(name="is_manager", kind=K.BOOLEAN, synonyms=("manager flag", "is manager", "people manager")),
    FieldSpec(name="is_team_lead", kind=K.BOOLEAN, synonyms=("team lead flag", "is team lead", "team lead")),
    FieldSpec(name="grade_level", synonyms=("compensation grade profile", "grade band", "grade level", "grade")),
    FieldSpec(name="salary_range_segment", synonyms=("salary range segment", "range segment")),
    FieldSpec(name="below_range_minimum", kind=K.BOOLEAN, synonyms=(
        "below range minimum?", "below range minimum", "is below minimum",
    )),
)

PERFORMANCE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="employee_id", kind=K.IDENTIFIER, synonyms=_ID),
    FieldSpec(name="email", kind=K.EMAIL, synonyms=("email", "email address", "e-mail", "work email")),
    FieldSpec(name="name", synonyms=_NAME),
    FieldSpec(name="first_name", synonyms=("first name", "firstname")),
    FieldSpec(name="last_name", synonyms=("last name", "lastname")),
    FieldSpec(name="performance_rating", kind=K.RATING, synonyms=(
        "calibrated value: overall performance rating",
        "overall performance rating (current)",
        "overall performance rating",
        "performance rating",
        "perf rating",
        "rating",
        "performance",
        "pre-calibrated value: overall performance rating",
        "calibrated value: performance: what",
        "performance: what (current)",
        "calibrated value: performance: how",
        "performance: how (current)",
    )),
    FieldSpec(name="business_impact_score", kind=K.NUMBER, synonyms=(
        "business impact score", "business impact", "impact score",
        "calibrated value: future talent: growth agility",
        "calibrated value: future talent: change agility",
    )),
    FieldSpec(name="retention_risk", kind=K.RISK, synonyms=(
        "retention risk", "risk score", "flight risk",
    )),
    FieldSpec(name="future_talent", synonyms=(
        "calibrated value: identified as future talent?",
        "identified as future talent? (current)",
        "identified as future talent?",
        "future talent",
    )),
    FieldSpec(name="movement_readiness", synonyms=(
        "calibrated value: movement readiness", "movement readiness",
    )),
    FieldSpec(name="proposed_talent_actions", synonyms=(
        "calibrated value: proposed talent actions", "proposed talent actions",
    )),
)

# Performance columns that may ride along on a salary export.
EMBEDDED_PERFORMANCE_FIELDS: tuple[FieldSpec, ...] = tuple(
    f for f in PERFORMANCE_FIELDS
    if f.name not in {"employee_id", "email", "name", "first_name", "last_name"}
)

PROPOSAL_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="employee_id", kind=K.IDENTIFIER, synonyms=_ID),
    FieldSpec(name="name", synonyms=("employee full name", "full name", "employee name", "name")),
    FieldSpec(name="currency", kind=K.CURRENCY_CODE, synonyms=("currency",)),
    FieldSpec(name="current_salary", kind=K.MONEY, synonyms=(
        "base pay all countries", "base salary", "current salary", "salary",
    )),
    FieldSpec(name="proposed_raise_percent", kind=K.PERCENT, synonyms=(
        "proposed raise (percent)", "proposed raise percent", "merit increase %",
        "merit increase percent", "raise percent", "raise percentage",
    )),
    FieldSpec(name="proposed_raise", kind=K.MONEY, synonyms=(
        "proposed raise", "merit increase amount", "raise amount",
    )),
    FieldSpec(name="proposed_salary", kind=K.MONEY, synonyms=(
        "proposed salary", "new base pay all countries", "new salary",
    )),
    FieldSpec(name="proposed_comparatio", kind=K.COMPARATIO, synonyms=(
        "proposed comparatio", "new comparatio",
    )),
    FieldSpec(name="salary_recommendation", synonyms=(
        "merit increase recommendation", "merit increase priority", "salary recommendation",
    )),
    FieldSpec(name="adjustment_notes", synonyms=("salary adjustment notes", "adjustment notes", "notes")),
    FieldSpec(name="has_promotion", kind=K.BOOLEAN, synonyms=(
        "has promotion", "promotion flag", "promoted", "promotion",
    )),
    FieldSpec(name="new_job_title", synonyms=(
        "new job title", "promoted job title", "new title", "promotion title", "future job title",
    )),
    FieldSpec(name="new_salary_grade", synonyms=(
        "new salary grade", "promoted salary grade", "new grade", "promotion grade", "future grade",
    )),
    FieldSpec(name="new_salary_grade_min", kind=K.MONEY, synonyms=("new salary range minimum",)),
    FieldSpec(name="new_salary_grade_mid", kind=K.MONEY, synonyms=("new salary range midpoint",)),
    FieldSpec(name="new_salary_grade_max", kind=K.MONEY, synonyms=("new salary range maximum",)),
    FieldSpec(name="promotion_type", synonyms=("promotion type", "promotion category")),
    FieldSpec(name="promotion_justification", synonyms=(
        "promotion justification", "promotion reason", "justification", "promotion notes",
    )),
    FieldSpec(name="promotion_effective_date", kind=K.DATE, synonyms=(
        "promotion effective date", "effective date", "promotion date",
    )),
)

COMP_REVIEW_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="employee_id", kind=K.IDENTIFIER, synonyms=_ID),
    FieldSpec(name="name", synonyms=_NAME),
    FieldSpec(name="proposed_raise", kind=K.MONEY, synonyms=(
        "proposed raise", "merit increase amount", "raise amount",
    )),
    FieldSpec(name="merit_recommendation", synonyms=(
        "merit recommendation", "merit increase recommendation", "recommendation",
    )),
    FieldSpec(name="salary_adjustment_notes", synonyms=(
        "salary adjustment notes", "adjustment notes", "notes", "comments",
    )),
)

TABLES: dict[str, tuple[FieldSpec, ...]] = {
    "salary": SALARY_FIELDS,
    "performance": PERFORMANCE_FIELDS,
    "proposal": PROPOSAL_FIELDS,
    "comp_review": COMP_REVIEW_FIELDS,
}

PERFORMANCE_HEADER_HINTS = ("performance", "rating", "talent", "calibrated", "movement", "readiness")
SALARY_HEADER_HINTS = ("salary", "basesalary", "compensation", "pay")

_SEPARATORS = re.compile(r"[\s_]+")


def header_key(header: str) -> str:
    return _SEPARATORS.sub(" ", header.strip().lower())


def resolve_columns(headers: list[str], fields: tuple[FieldSpec, ...], table: str = "") -> SchemaMapping:
    """Resolve a header row against a synonym table once, up front."""
    keys = [header_key(h) for h in headers]
    mappings: list[ColumnMapping] = []
    used: set[int] = set()
    for spec in fields:
        positions: list[int] = []
        for synonym in spec.synonyms:
            for index, key in enumerate(keys):
                if key == synonym and index not in positions:
                    positions.append(index)
        if positions:
            used.update(positions)
            mappings.append(ColumnMapping(
                target_field=spec.name,
                data_type=spec.kind,
                positions=positions,
                source_fields=[headers[i] for i in positions],
            ))
    unmapped = [h for i, h in enumerate(headers) if i not in used and h]
    return SchemaMapping(table=table, column_mappings=mappings, unmapped_headers=unmapped)


def has_performance_headers(headers: list[str]) -> bool:
    return any(hint in header_key(h) for h in headers for hint in PERFORMANCE_HEADER_HINTS)


def detect_file_type(headers: list[str]) -> str:
    """Guess "salary", "performance" or "unknown" from header words alone."""
    keys = [header_key(h) for h in headers]
    salary = any(hint in k for k in keys for hint in SALARY_HEADER_HINTS)
    performance = any(hint in k for k in keys for hint in ("performance", "rating", "review", "score"))
    if salary and not performance:
        return "salary"
    if performance and not salary:
        return "performance"
    return "unknown"


def analyze_workday_format(headers: list[str]) -> list[str]:
    """Hints for Workday exports whose columns did not map cleanly."""
    keys = [header_key(h) for h in headers]
    suggestions: list[str] = []
    if any("employee number" in k or "associate id" in k for k in keys):
        suggestions.append("Workday employee identifier column detected")
    if any(k.startswith("calibrated value:") for k in keys):
        suggestions.append("Calibrated talent-review columns detected; calibrated values take priority")
    if any("base pay all countries" in k for k in keys):
        suggestions.append("Multi-country base pay column detected; check the currency column is present")
    if not any(k in ("currency", "curr") for k in keys) and any("pay" in k or "salary" in k for k in keys):
        suggestions.append("No currency column; salaries will default by country (USD otherwise)")
    return suggestions
