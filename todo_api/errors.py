"""Typed request failures.

Every failure a handler can raise derives from TodoApiError and carries a
stable ``code`` plus the HTTP status the error handler answers with.
"""

from typing import Optional


class TodoApiError(Exception):
    """Base exception for all request failures."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }

    def headers(self) -> Optional[dict]:
        return None


class Unauthenticated(TodoApiError):
    """No valid session on the request."""
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, "UNAUTHENTICATED", 401)

    def headers(self) -> Optional[dict]:
        return {"WWW-Authenticate": "Bearer"}


class EmailAlreadyRegistered(TodoApiError):
    """Signup with an email that already has an account."""
    def __init__(self, message: str = "Email already registered"):
        super().__init__(message, "EMAIL_ALREADY_REGISTERED", 400)


class RateLimited(TodoApiError):
    """The caller's bucket for this operation is empty."""
    def __init__(self, retry_after_ms: int, operation: Optional[str] = None):
        super().__init__(
            f"Rate limit exceeded. Retry after {retry_after_ms}ms",
            "RATE_LIMITED",
            429,
        )
        self.retry_after_ms = retry_after_ms
        self.operation = operation

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["retry_after_ms"] = self.retry_after_ms
        return response

    def headers(self) -> Optional[dict]:
        # Retry-After is whole seconds; never advertise 0 while still limited
        return {"Retry-After": str(max(1, -(-self.retry_after_ms // 1000)))}


class NotFound(TodoApiError):
    """Entity id does not resolve."""
    def __init__(self, message: str = "Not found"):
        super().__init__(message, "NOT_FOUND", 404)


class Forbidden(TodoApiError):
    """Entity exists but belongs to another user."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "FORBIDDEN", 403)


class InvalidArgument(TodoApiError):
    """Input failed length or emptiness bounds."""
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "INVALID_ARGUMENT", 400)
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        if self.field:
            response["error"]["field"] = self.field
        return response
