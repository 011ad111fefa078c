"""Session storage over any ICacheBackend.

The whole planning session is three JSON documents: the employee list, the
session metadata, and the policy settings. Writes refresh the TTL.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from meritflow.core.exceptions import EmployeeNotFoundError, StorageError
from meritflow.core.protocols import ICacheBackend
from meritflow.models.employee import Employee
from meritflow.models.policy import PolicySettings
from meritflow.models.session import SessionMeta

logger = logging.getLogger(__name__)

_EMPLOYEES = TypeAdapter(list[Employee])


class CacheSessionStore:
    """ISessionStore that keeps JSON documents under a key namespace."""

    DEFAULT_TTL = 7 * 24 * 3600

    def __init__(self, cache: ICacheBackend, *, namespace: str = "meritflow",
                 ttl: int | None = None) -> None:
        self._cache = cache
        self._ns = namespace
        self._ttl = ttl or self.DEFAULT_TTL

    def _key(self, name: str) -> str:
        return f"{self._ns}:{name}"

    def _load(self, name: str) -> str | None:
        return self._cache.get(self._key(name))

    def _save(self, name: str, payload: str) -> None:
        self._cache.setex(self._key(name), self._ttl, payload)

    # ---- employees ----

    def save_employees(self, employees: list[Employee]) -> None:
        self._save("employees", _EMPLOYEES.dump_json(employees).decode())
        logger.debug("Saved %d employees", len(employees))

    def get_employees(self) -> list[Employee]:
        raw = self._load("employees")
        if raw is None:
            return []
        try:
            return _EMPLOYEES.validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Stored employee list is unreadable: {exc}") from exc

    def update_employee(self, employee: Employee) -> None:
        employees = self.get_employees()
        for i, existing in enumerate(employees):
            if existing.employee_id == employee.employee_id:
                employees[i] = employee
                break
        else:
            raise EmployeeNotFoundError(employee.employee_id)
        self.save_employees(employees)

    # ---- session ----

    def save_session(self, meta: SessionMeta) -> None:
        self._save("session", meta.model_dump_json())

    def get_current_session(self) -> SessionMeta | None:
        raw = self._load("session")
        if raw is None:
            return None
        try:
            return SessionMeta.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Stored session is unreadable: {exc}") from exc

    # ---- policy ----

    def save_policy_settings(self, settings: PolicySettings) -> None:
        self._save("policy", settings.model_dump_json())

    def get_policy_settings(self) -> PolicySettings | None:
        raw = self._load("policy")
        if raw is None:
            return None
        try:
            return PolicySettings.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Stored policy settings are unreadable: {exc}") from exc

    def reset_all_data(self) -> None:
        removed = self._cache.delete_prefix(f"{self._ns}:")
        logger.info("Reset session data (%d keys removed)", removed)
