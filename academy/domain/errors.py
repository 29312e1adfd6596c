"""Exception types raised by the scheduling core and the API layer."""

from __future__ import annotations

from typing import Any


class ValidationInputError(Exception):
    """A required request field is missing or malformed."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class InvalidTimeFormat(ValueError):
    """A time string is not a valid ``HH:MM`` wall-clock time."""


class StoreReadError(Exception):
    """The schedule snapshot could not be read from the store."""


class ApiError(Exception):
    """An error the HTTP layer turns into a ``{success: false}`` envelope."""

    def __init__(self, status_code: int, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details
