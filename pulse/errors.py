"""Exception hierarchy for ProjectPulse.

Usage:
    from pulse.errors import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=42)
    raise ValidationError("Confidence level must be between 1 and 5",
                          details={"confidence_level": 7})
"""

from __future__ import annotations


class PulseError(Exception):
    """Base class for all ProjectPulse errors."""


class NotFoundError(PulseError):
    """Raised when a referenced project, risk or notification does not exist.

    The recalculation engine never raises this for a missing project; it
    returns the neutral score instead. Event handlers do raise it.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(PulseError):
    """Raised when event input is well-formed but out of range.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(PulseError):
    """Raised when a submission would duplicate a weekly record."""

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(f"{resource} with {field}={value!r} already exists")


class PersistenceError(PulseError):
    """Raised when the transactional health write fails.

    The transaction has been rolled back by the time this propagates, so no
    partial score/status/notification state is visible.
    """

    def __init__(self, project_id: int, cause: Exception) -> None:
        self.project_id = project_id
        self.cause = cause
        super().__init__(f"Health update for project id={project_id} failed: {cause}")
