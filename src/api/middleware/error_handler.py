"""Error types raised by the API and the middleware that renders them."""

import logging
from typing import Any, Callable

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

ErrorDetails = list[dict[str, Any]]


class APIError(Exception):
    """An error the client is told about.

    Subclasses fix the HTTP status and the ``error`` category; the message
    and optional field-level details vary per raise site.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "api_error"
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, details: ErrorDetails | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class NotFoundError(APIError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"
    default_message = "Resource not found"


class ValidationError(APIError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_type = "validation_error"
    default_message = "Validation error"


class AuthorizationError(APIError):
    status_code = status.HTTP_403_FORBIDDEN
    error_type = "authorization_error"
    default_message = "Access denied"


class ConflictError(APIError):
    """The request does not fit the resource's current state."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"
    default_message = "Conflict"


class InvalidTransitionError(ConflictError):
    """An order was asked to move to a status it cannot reach."""

    def __init__(self, current: str, requested: str, allowed: list[str]) -> None:
        self.current = current
        self.requested = requested
        self.allowed = allowed
        super().__init__(
            f"Order cannot move from {current} to {requested}",
            details=[
                {
                    "loc": ["body", "status"],
                    "msg": "Allowed: " + (", ".join(allowed) or "none"),
                    "type": "invalid_transition",
                }
            ],
        )


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: ErrorDetails | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Render an error in the shared ``ErrorResponse`` envelope."""
    body = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Turn exceptions escaping a route into JSON error responses.

    ``APIError`` and ``HTTPException`` keep their status and message.
    Anything else is logged with its traceback and reported as a generic 500
    so internals never reach the client.
    """
    request_id = request.headers.get("X-Request-ID")
    log_extra = {"request_id": request_id, "path": request.url.path}

    try:
        return await call_next(request)
    except APIError as e:
        logger.warning("%s on %s %s: %s", e.error_type, request.method, request.url.path, e.message, extra=log_extra)
        return create_error_response(e.error_type, e.message, e.status_code, e.details, request_id)
    except HTTPException as e:
        logger.warning("HTTP %s on %s %s: %s", e.status_code, request.method, request.url.path, e.detail, extra=log_extra)
        return create_error_response("http_error", str(e.detail), e.status_code, request_id=request_id)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, extra=log_extra)
        return create_error_response(
            "internal_error",
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )
