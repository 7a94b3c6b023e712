"""Map moderation errors to HTTP responses."""

import logging

from fastapi import HTTPException, status

from src.domain.errors import (
    AuthError,
    InvalidPayloadError,
    InvalidStateError,
    ModerationError,
    NotFoundError,
    PermissionDeniedError,
    QueryError,
)

logger = logging.getLogger(__name__)


def http_error(exc: ModerationError) -> HTTPException:
    """Translate a domain error into the caller-facing HTTPException."""
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
    if isinstance(exc, AuthError):
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{exc.entity} not found")
    if isinstance(exc, InvalidStateError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Proposal was already reviewed"
        )
    if isinstance(exc, InvalidPayloadError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"field": exc.field, "message": str(exc)},
        )
    if isinstance(exc, QueryError):
        logger.error("Store failure during %s", exc.operation, exc_info=exc)
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Temporary storage problem, please try again",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
