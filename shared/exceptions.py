"""
Base exception classes for the HomeBase Pro client.

Every error the app shows the user is one of these. Besides the message and
a machine-readable code, each class carries the title used when the error is
turned into an alert. Modules subclass these and override the title.
"""

from typing import Optional, Any


class HomeBaseError(Exception):
    """Root of all HomeBase errors."""

    title = "Something Went Wrong"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Structured form for log records and the status display."""
        return {
            "error": self.code,
            "title": self.title,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(HomeBaseError):
    """A row the operation needs doesn't exist (or RLS hides it)."""

    title = "Not Found"


class ValidationError(HomeBaseError):
    """Input rejected before it reached the backend."""

    title = "Invalid Input"


class AuthenticationError(HomeBaseError):
    """Sign-in, sign-up or sign-out was rejected."""

    title = "Authentication Failed"


class AuthorizationError(HomeBaseError):
    """The operation isn't allowed in the current session state."""

    title = "Not Allowed"


class ExternalServiceError(HomeBaseError):
    """Supabase Auth, a table, or an edge function failed."""

    title = "Service Unavailable"

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
