"""
Custom exceptions for Worksite Reports.

All exceptions inherit from WorksiteBaseException for easier catching.
Each exception includes a message and optional details dict.
"""

from typing import List


class WorksiteBaseException(Exception):
    """Base exception for all Worksite Reports errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """String representation with details if available."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(WorksiteBaseException):
    """Draft record failed one or more validation rules."""

    @property
    def errors(self) -> List[str]:
        """All rule violations, in rule order."""
        return list(self.details.get("errors", [self.message]))


class RemoteServiceError(WorksiteBaseException):
    """Remote fetch or mutation failed or returned a failure status."""

    def __init__(self, message: str = "", details: dict = None, status: int = None):
        super().__init__(message, details)
        self.status = status


class ConflictError(RemoteServiceError):
    """Remote service rejected a record as a duplicate."""
    pass


class RecordSourceError(WorksiteBaseException):
    """Record snapshot could not be read or parsed."""
    pass


class ExportError(WorksiteBaseException):
    """Export artifact could not be produced or written."""
    pass


class NotFoundError(WorksiteBaseException):
    """Requested collection or record kind not found."""
    pass
