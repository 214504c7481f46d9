# product_lifecycle_engine/initiative_engine/errors.py
"""
Error taxonomy for the lifecycle engine.

Every error is raised to the immediate caller. Only the reconciliation sweep
isolates failures per record (see services/lifecycle/reconciliation.py).
"""

from __future__ import annotations

from typing import Optional


class LifecycleError(Exception):
    """Base class for all engine errors."""


class ValidationError(LifecycleError):
    """A requested transition, creation or edit violates a precondition.

    Always recoverable: nothing has been written when this is raised.
    """

    def __init__(self, message: str, initiative_id: Optional[int] = None, field: Optional[str] = None):
        super().__init__(message)
        self.initiative_id = initiative_id
        self.field = field


class DuplicateEscalationError(LifecycleError):
    """The experiment already has a derived feature."""

    def __init__(self, experiment_id: int, existing_ids: Optional[list[int]] = None):
        super().__init__(f"Experiment {experiment_id} was already escalated to delivery")
        self.experiment_id = experiment_id
        self.existing_ids = existing_ids or []


class NotFoundError(LifecycleError):
    """The referenced initiative does not exist (anymore)."""

    def __init__(self, initiative_id: int):
        super().__init__(f"Initiative {initiative_id} not found")
        self.initiative_id = initiative_id


class ExternalFailure(LifecycleError):
    """A collaborator (store, announcement sink, roster) failed or rejected a write."""


class UniqueConstraintViolation(ExternalFailure):
    """The store rejected a write because of a uniqueness constraint."""


__all__ = [
    "LifecycleError",
    "ValidationError",
    "DuplicateEscalationError",
    "NotFoundError",
    "ExternalFailure",
    "UniqueConstraintViolation",
]
