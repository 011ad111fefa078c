"""Protocol interfaces for MeritFlow collaborators.

Persistence and rate lookups are reached only through these Protocols:
structural typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from meritflow.models.currency import ExchangeRate
    from meritflow.models.employee import Employee
    from meritflow.models.policy import PolicySettings
    from meritflow.models.session import SessionMeta


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible key/value cache with per-key expiry."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def delete_prefix(self, prefix: str) -> int: ...


# ---------------------------------------------------------------------------
# Persistence: File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible file storage interface."""

    def read(self, path: str) -> bytes: ...

    def write(self, path: str, data: bytes, content_type: str | None = None) -> str: ...

    def move(self, src: str, dst: str) -> None: ...

    def list_files(self, prefix: str) -> list[str]: ...


# ---------------------------------------------------------------------------
# Persistence: Session Store
# ---------------------------------------------------------------------------

@runtime_checkable
class ISessionStore(Protocol):
    """Best-effort storage for the single planning session."""

    def save_employees(self, employees: list[Employee]) -> None: ...

    def get_employees(self) -> list[Employee]: ...

    def update_employee(self, employee: Employee) -> None: ...

    def save_session(self, meta: SessionMeta) -> None: ...

    def get_current_session(self) -> SessionMeta | None: ...

    def save_policy_settings(self, settings: PolicySettings) -> None: ...

    def get_policy_settings(self) -> PolicySettings | None: ...

    def reset_all_data(self) -> None: ...


# ---------------------------------------------------------------------------
# Currency: Rate Provider
# ---------------------------------------------------------------------------

@runtime_checkable
class IRateProvider(Protocol):
    """Remote exchange-rate source. Raises on network or payload failure."""

    async def fetch_rate(self, from_currency: str, to_currency: str) -> ExchangeRate: ...
