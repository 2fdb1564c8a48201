"""
Application error taxonomy.

Every error raised by a route or dependency is an `AppError` subclass and is
rendered by the handlers in `main.create_app` into the shared response
envelope `{success: false, message, errors?}`.
"""

from typing import Any

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        self.errors = errors
        self.headers = headers
        super().__init__(self.message)


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized to access this route"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is deactivated"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class ValidationError(AppError):
    status_code = 422  # Unprocessable Content
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, Any]], message: str | None = None):
        super().__init__(message, errors=errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}])


def errors_from_pydantic(raw_errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts into `{field, message}` entries."""
    # Leading "body"/"query"/"path" segments are request locations, not fields
    request_locations = {"body", "query", "path", "header"}
    flattened = []
    for error in raw_errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in request_locations:
            loc = loc[1:]
        flattened.append(
            {
                "field": ".".join(loc) if loc else "body",
                "message": error.get("msg", "Invalid value"),
            }
        )
    return flattened
