"""Domain errors raised by the service layer and their HTTP mapping."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class StayFinderError(Exception):
    """Base class for caller-actionable domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StayFinderError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(StayFinderError):
    """The actor has no rights over the entity."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidInputError(StayFinderError):
    """Required fields are missing or malformed."""

    status_code = 422  # Starlette renamed the named constant; the number is stable


class InvalidRangeError(StayFinderError):
    """check_out is not after check_in, or the night count is not positive."""

    status_code = 422


class InvalidTransitionError(StayFinderError):
    """Illegal booking status change."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidStateError(StayFinderError):
    """The entity is not in a state that allows the operation."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(StayFinderError):
    """Double booking, duplicate favorite or duplicate review."""

    status_code = status.HTTP_409_CONFLICT


async def stayfinder_error_handler(request: Request, exc: StayFinderError) -> JSONResponse:
    logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain error handler to the application."""
    app.add_exception_handler(StayFinderError, stayfinder_error_handler)  # type: ignore[arg-type]
