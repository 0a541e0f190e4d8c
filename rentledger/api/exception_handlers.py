"""Map domain exceptions to JSON error responses with a stable machine-readable code."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from rentledger.errors import (
    CONCURRENCY_CONFLICT,
    DUPLICATE_RESOURCE,
    FORBIDDEN,
    INVALID_STATE,
    NOT_FOUND,
    OVERPAYMENT,
    UNAUTHORIZED,
    VALIDATION_ERROR,
    ConcurrencyConflictError,
    DomainError,
    DomainValidationError,
    DuplicateResourceError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    OverpaymentError,
    UnauthorizedError,
)
from rentledger.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

# Most specific first: DuplicateResourceError is a DomainValidationError.
ERROR_RESPONSES = (
    (DuplicateResourceError, status.HTTP_409_CONFLICT, DUPLICATE_RESOURCE),
    (DomainValidationError, status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR),
    (NotFoundError, status.HTTP_404_NOT_FOUND, NOT_FOUND),
    (InvalidStateError, status.HTTP_409_CONFLICT, INVALID_STATE),
    (ConcurrencyConflictError, status.HTTP_409_CONFLICT, CONCURRENCY_CONFLICT),
    (OverpaymentError, status.HTTP_500_INTERNAL_SERVER_ERROR, OVERPAYMENT),
    (ForbiddenError, status.HTTP_403_FORBIDDEN, FORBIDDEN),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED),
)


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    body = ErrorResponse(detail=detail, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    for error_type, status_code, code in ERROR_RESPONSES:
        if isinstance(exc, error_type):
            break
    else:
        logger.error("Unmapped domain error on %s %s: %r", request.method, request.url.path, exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "INTERNAL_ERROR")

    if isinstance(exc, OverpaymentError):
        # The allocation engine never applies more than a balance; reaching here is a bug.
        logger.error("Overpayment guard raised on %s %s: %s", request.method, request.url.path, exc)
    elif isinstance(exc, ConcurrencyConflictError):
        logger.warning("Concurrency conflict on %s %s: %s", request.method, request.url.path, exc)

    return _error_response(status_code, str(exc), code)


def register_exception_handlers(app):
    """Register the domain exception handler on the FastAPI app."""
    app.add_exception_handler(DomainError, domain_error_handler)
