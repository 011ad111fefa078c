"""MeritFlow exception hierarchy."""

from __future__ import annotations


class MeritFlowError(Exception):
    """Base exception for all MeritFlow errors."""


class IngestionError(MeritFlowError):
    """A file could not be turned into rows."""


class UnsupportedFileError(IngestionError):
    """File extension is not one we can parse."""

    def __init__(self, file_name: str, extension: str) -> None:
        self.file_name = file_name
        self.extension = extension
        super().__init__(f"Unsupported file type {extension or '(none)'!r} for {file_name}")


class EmptyFileError(IngestionError):
    """File has no bytes or no usable rows."""


class FileTooLargeError(IngestionError):
    """File exceeds the configured size cap."""

    def __init__(self, file_name: str, size_bytes: int, limit_bytes: int) -> None:
        self.file_name = file_name
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"{file_name} is {size_bytes / 1024 / 1024:.1f}MB, "
            f"limit is {limit_bytes / 1024 / 1024:.0f}MB"
        )


class HeaderNotFoundError(IngestionError):
    """No row looked like a header."""


class CurrencyMismatchError(MeritFlowError):
    """Arithmetic attempted across two currencies."""

    def __init__(self, left: str, right: str) -> None:
        self.left = left
        self.right = right
        super().__init__(f"Cannot combine {left} and {right} amounts without conversion")


class CurrencyError(MeritFlowError):
    """Exchange-rate lookup or conversion failed."""


class UnsupportedCurrencyError(CurrencyError):
    """No rate source knows this currency."""

    def __init__(self, currency: str) -> None:
        self.currency = currency
        super().__init__(f"Unsupported currency: {currency}")


class ExchangeRateUnavailableError(CurrencyError):
    """Rate API did not return a usable rate."""


class ConversionBatchError(CurrencyError):
    """A batch conversion could not produce one result per input."""


class CacheError(MeritFlowError):
    """Cache backend operation failed."""


class StorageError(MeritFlowError):
    """Session or file storage operation failed."""


class EmployeeNotFoundError(MeritFlowError):
    """No employee with the given ID in the current session."""

    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id!r} not found")
