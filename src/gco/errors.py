"""Error types raised by gco components.

Only failures that abort a single operation are raised. Consistency
problems found by the validator are returned as data instead.
"""

from typing import Any


class ErrorCode:
    """Machine-readable error codes."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"


class GcoError(Exception):
    """Base error for gco operations.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.INVALID_INPUT,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "message": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class TaskNotFoundError(GcoError):
    """Raised when a referenced task id is absent from the board."""

    def __init__(self, task_id: str):
        super().__init__(
            f"Task {task_id} not found",
            error_code=ErrorCode.NOT_FOUND,
            details={"task_id": task_id},
        )
        self.task_id = task_id


class ProjectNotFoundError(GcoError):
    """Raised when no .gco directory exists above the start path."""

    def __init__(self, start: str):
        super().__init__(
            f"No gco project found from {start}. Run 'gco init' first.",
            error_code=ErrorCode.PROJECT_NOT_FOUND,
            details={"start": start},
        )


class ExternalServiceError(GcoError):
    """Raised by adapters around external services such as git."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.SERVICE_UNAVAILABLE,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)
