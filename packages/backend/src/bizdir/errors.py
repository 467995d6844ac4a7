"""Domain error taxonomy.

Every failure a route handler can report maps to exactly one of these.
The exception handlers installed in main.py turn them into JSON bodies
of the form {"success": false, "error": "..."}.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return None


class AuthenticationMissing(AppError):
    """No token was presented."""

    status_code = 401
    default_message = "Authentication required"

    @property
    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class AuthenticationInvalid(AuthenticationMissing):
    """A token was presented but failed verification or resolution."""

    default_message = "Invalid or expired token"


class AuthorizationDenied(AppError):
    status_code = 403
    default_message = "Access denied"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid request"
