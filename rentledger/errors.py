"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
INVALID_STATE = "INVALID_STATE"
OVERPAYMENT = "OVERPAYMENT"
CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
FORBIDDEN = "FORBIDDEN"
UNAUTHORIZED = "UNAUTHORIZED"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    pass


class DomainValidationError(DomainError):
    """Raised when business rules or domain validation fail (e.g. non-positive amounts, inverted dates)."""

    pass


class DuplicateResourceError(DomainValidationError):
    """Raised when attempting to create or update a resource that would violate a uniqueness constraint."""

    pass


class InvalidStateError(DomainError):
    """Raised when an operation is illegal for the entity's current state (e.g. voiding a paid invoice)."""

    pass


class OverpaymentError(DomainError):
    """Raised by the invoice ledger when an application would push amount_paid above amount.

    The allocation engine caps every allocation at the invoice balance, so reaching
    this means the engine and the ledger disagree.
    """

    pass


class ConcurrencyConflictError(DomainError):
    """Raised when a tenant's invoices were changed by a concurrent payment.

    Callers should retry the whole payment-recording operation.
    """

    pass


class ForbiddenError(DomainError):
    """Raised when the current user is not allowed to perform an action."""

    pass


class UnauthorizedError(DomainError):
    """Raised when credentials are missing or invalid."""

    pass
