"""
Error taxonomy for the admin functions.

Handlers raise these at the point a check fails and turn them into an HTTP
response in one place (see ``responses.error_response``).
"""
from typing import Any, Dict


class ApiError(Exception):
    """Base class: an error that maps to a JSON error response."""

    status_code = 500

    def __init__(self, message: str, /, **extra: Any):
        # positional-only so "message" can also be an extra body field
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.extra)
        return body


class AuthenticationError(ApiError):
    status_code = 401


class AuthorizationError(ApiError):
    status_code = 403


class ValidationError(ApiError):
    status_code = 400


class ConflictError(ApiError):
    """The request is valid but the current data forbids it (e.g. ownership block)."""

    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class DependencyError(ApiError):
    """The backend failed a query, update or delete."""

    status_code = 500
