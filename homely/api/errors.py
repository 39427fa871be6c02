"""
Translation of domain errors into HTTP responses.
"""

from fastapi import HTTPException, status

from homely.core.exceptions import (
    DuplicateError,
    HomelyError,
    InvalidStateTransitionError,
    NotFoundError,
    QuotaExceededError,
    TransientStorageError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (QuotaExceededError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateTransitionError, status.HTTP_409_CONFLICT),
    (DuplicateError, status.HTTP_409_CONFLICT),
    (TransientStorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(exc: HomelyError) -> HTTPException:
    """Map a domain error to the HTTPException the route should raise."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, (ValidationError, QuotaExceededError)):
        return HTTPException(status_code=status_code, detail={"message": exc.message, "errors": exc.details})
    return HTTPException(status_code=status_code, detail=exc.message)
