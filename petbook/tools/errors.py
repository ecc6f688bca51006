from fastapi import HTTPException

from petbook.services.exceptions import (
    InvalidStateError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


def http_error(exc: ServiceError) -> HTTPException:
    """Map a service-layer failure onto the HTTP status the tools expose."""
    if isinstance(exc, ValidationError):
        detail = {"message": str(exc), "field": exc.field}
        return HTTPException(status_code=422, detail=detail)
    if isinstance(exc, InvalidStateError):
        detail = {"message": str(exc), "current": exc.current, "requested": exc.requested}
        return HTTPException(status_code=409, detail=detail)
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))
