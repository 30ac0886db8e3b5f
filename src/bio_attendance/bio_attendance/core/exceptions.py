class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class IngestionError(DomainError):
    """Raised when a whole batch cannot be processed (unreadable file, missing file date)."""


class MergeConflictError(DomainError):
    """Raised when a concurrent upsert keeps conflicting after all retries."""
