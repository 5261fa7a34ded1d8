"""
Authentication module exceptions.

Auth backend failures are translated into these types so the controller
can pick the right message for the user. Each carries the notice title
shown when it reaches an operation boundary.
"""

from typing import Optional

from shared.exceptions import (
    HomeBaseError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)


class AuthBackendError(ExternalServiceError):
    """Raised by the auth backend adapter for any rejected auth call."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(
            message,
            service="supabase-auth",
            code=code,
            details={"status": status} if status is not None else None,
        )
        self.backend_code = code
        self.status = status


class InvalidCredentialsError(AuthenticationError):
    """Raised when the email/password pair is rejected."""

    title = "Invalid Credentials"

    def __init__(
        self,
        message: str = "The email or password you entered is incorrect. Please try again.",
    ):
        super().__init__(message, code="INVALID_CREDENTIALS")


class EmailNotConfirmedError(AuthenticationError):
    """Raised when the account exists but its email isn't confirmed."""

    title = "Email Not Confirmed"

    def __init__(
        self,
        message: str = "Please confirm your email address using the link we sent you, then sign in.",
    ):
        super().__init__(message, code="EMAIL_NOT_CONFIRMED")


class LoginFailedError(AuthenticationError):
    """Raised for any other login rejection."""

    title = "Login Failed"

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "We couldn't sign you in. Please try again.",
            code="LOGIN_FAILED",
            details={"reason": reason} if reason else None,
        )


class AccountExistsError(AuthenticationError):
    """Raised when signing up with an email that already has an account."""

    title = "Account Exists"

    def __init__(self, email: str):
        super().__init__(
            "An account with this email already exists. Would you like to sign in instead?",
            code="ACCOUNT_EXISTS",
            details={"email": email},
        )


class SignupFailedError(AuthenticationError):
    """Raised for sign-up rejections other than a duplicate email."""

    title = "Signup Failed"

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "We couldn't create your account. Please try again.",
            code="SIGNUP_FAILED",
            details={"reason": reason} if reason else None,
        )


class LogoutFailedError(AuthenticationError):
    """Raised when the backend can't end the session."""

    title = "Logout Failed"

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "We couldn't sign you out. Please check your connection and try again.",
            code="LOGOUT_FAILED",
            details={"reason": reason} if reason else None,
        )


class NotAuthenticatedError(AuthorizationError):
    """Raised when an operation needs a signed-in profile and there isn't one."""

    title = "Not Signed In"

    def __init__(self, operation: str):
        super().__init__(
            "You need to be signed in to do that.",
            code="NOT_AUTHENTICATED",
            details={"operation": operation},
        )


class RoleSwitchError(HomeBaseError):
    """Raised when any step of a role switch fails."""

    title = "Switch Failed"

    def __init__(self, target_role: str):
        super().__init__(
            "Failed to switch account. Please try again.",
            code="ROLE_SWITCH_FAILED",
            details={"target_role": target_role},
        )


# Backend codes and message fragments, checked in this order
_INVALID_CREDENTIALS_CODES = {"invalid_credentials", "invalid_grant"}
_EMAIL_NOT_CONFIRMED_CODES = {"email_not_confirmed"}
_ACCOUNT_EXISTS_CODES = {"user_already_exists", "email_exists"}

_INVALID_CREDENTIALS_TEXT = "invalid login credentials"
_EMAIL_NOT_CONFIRMED_TEXT = "email not confirmed"
_ACCOUNT_EXISTS_TEXT = "already registered"


def classify_login_error(error: AuthBackendError) -> AuthenticationError:
    """
    Map a sign-in rejection to the error shown to the user.

    The backend's structured code is used when present; older backends
    only send text, so known message fragments are the fallback.
    """
    code = (error.backend_code or "").lower()
    text = (error.message or "").lower()

    if code in _INVALID_CREDENTIALS_CODES or _INVALID_CREDENTIALS_TEXT in text:
        return InvalidCredentialsError()
    if code in _EMAIL_NOT_CONFIRMED_CODES or _EMAIL_NOT_CONFIRMED_TEXT in text:
        return EmailNotConfirmedError()
    return LoginFailedError(error.message)


def is_account_exists_error(error: AuthBackendError) -> bool:
    """True if a sign-up rejection means the email is already registered."""
    code = (error.backend_code or "").lower()
    text = (error.message or "").lower()
    return code in _ACCOUNT_EXISTS_CODES or _ACCOUNT_EXISTS_TEXT in text
