"""
Authentication module.

Owns the device's session: identity, profile, active role and the
provider's organization, plus login/signup/logout/role switching.

Public API:
- ISessionController: Interface for session operations
- IAuthBackend, IProfileStore, INavigator, IPrompter: Collaborator interfaces
- UserRole, Route, Profile, User, SessionInfo, AuthState, Notice: Models
- resolve_redirect: Route guard
- Auth exceptions: InvalidCredentialsError, EmailNotConfirmedError, etc.
"""

from .interfaces import (
    ISessionController,
    IAuthBackend,
    IProfileStore,
    INavigator,
    IPrompter,
)
from .models import (
    UserRole,
    Route,
    SignupOutcome,
    SessionInfo,
    AuthResult,
    Profile,
    User,
    AuthState,
    Notice,
)
from .guard import resolve_redirect
from .exceptions import (
    AuthBackendError,
    InvalidCredentialsError,
    EmailNotConfirmedError,
    LoginFailedError,
    AccountExistsError,
    SignupFailedError,
    LogoutFailedError,
    NotAuthenticatedError,
    RoleSwitchError,
)

__all__ = [
    # Interfaces
    "ISessionController",
    "IAuthBackend",
    "IProfileStore",
    "INavigator",
    "IPrompter",
    # Models
    "UserRole",
    "Route",
    "SignupOutcome",
    "SessionInfo",
    "AuthResult",
    "Profile",
    "User",
    "AuthState",
    "Notice",
    # Guard
    "resolve_redirect",
    # Exceptions
    "AuthBackendError",
    "InvalidCredentialsError",
    "EmailNotConfirmedError",
    "LoginFailedError",
    "AccountExistsError",
    "SignupFailedError",
    "LogoutFailedError",
    "NotAuthenticatedError",
    "RoleSwitchError",
]
