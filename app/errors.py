"""Service-level error taxonomy, rendered to JSON by the handlers in ``app.main``."""

from typing import Any, Optional


class ServiceError(Exception):
    """Base class: carries an HTTP status and a user-facing message."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(ServiceError):
    status_code = 400
    default_message = "Invalid request data"


class Unauthenticated(ServiceError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "You don't have permission to perform this action"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "The request conflicts with the current state"


class Internal(ServiceError):
    status_code = 500


class ServiceUnavailable(ServiceError):
    status_code = 503
    default_message = "Service temporarily unavailable"
