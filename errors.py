"""Client-facing error types raised by the service layer."""
from __future__ import annotations

from typing import List, Optional


class ApiError(RuntimeError):
    """Base error carrying the HTTP status and JSON body to report."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, error: Optional[str] = None, details: Optional[List[str]] = None):
        super().__init__(error or self.error)
        if error:
            self.error = error
        self.details = details or []

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class MissingFieldsError(ApiError):
    """Raised when required request fields are absent or blank."""

    status_code = 400
    error = "Missing required fields"


class InvalidCategoryError(ApiError):
    status_code = 400
    error = "Invalid category"


class ValidationFailedError(ApiError):
    """Raised when parameters are present but out of range."""

    status_code = 400
    error = "Validation failed"


class EntityNotFoundError(ApiError):
    """Raised when an entity cannot be located in the database."""

    status_code = 404
    error = "User not found"


class EntityConflictError(ApiError):
    """Raised when a unique constraint is violated."""

    status_code = 400
    error = "Duplicate entity"
