"""Domain error hierarchy for sessions and diagram editing."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Session, entity or connection not found."""


class ValidationError(DomainError):
    """Invalid input or an interaction attempted from the wrong state."""


class ConflictError(DomainError):
    """Conflicting change (duplicate entity name, overlapping drag)."""
