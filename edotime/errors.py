"""Exception types shared by the reference-table lookups."""

from __future__ import annotations

__all__ = [
    "ReferenceDataError",
    "NotFoundError",
    "DateOutOfRangeError",
    "DataRangeError",
]


class ReferenceDataError(RuntimeError):
    """Raised when a reference dataset cannot be located, read or parsed."""


class NotFoundError(LookupError):
    """Raised when a civil date has no row in the lunar calendar table."""

    def __init__(self, message: str, reason: str = "gap") -> None:
        super().__init__(message)
        self.reason = reason


class DateOutOfRangeError(NotFoundError):
    """Raised when a civil date lies before or after the lunar table's span."""


class DataRangeError(LookupError):
    """Raised when an instant falls outside the tabulated new-moon coverage."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason
