"""
Error types shared across the export pipeline.
"""

from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "An error occurred while processing your request."
NO_RESPONSE_MESSAGE = "No response received from the server. Please check your connection."


class InvalidInputError(ValueError):
    """A required identifier was missing. Never retried."""


class ApiError(Exception):
    """Normalized task API failure.

    Attributes:
        message: Server-provided message or a generic description
        status: HTTP status code, None when no response was received
        details: Server-provided details, or the whole response body
    """

    def __init__(
        self,
        message: str = DEFAULT_ERROR_MESSAGE,
        status: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "status": self.status, "details": self.details}

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status={self.status!r})"


class SpreadsheetNotFoundError(RuntimeError):
    """The destination spreadsheet does not exist."""


class SpreadsheetAccessError(RuntimeError):
    """The service account may not access the destination spreadsheet."""
