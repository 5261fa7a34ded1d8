"""
Authentication module interfaces.

The session controller depends only on these protocols, so it can run
against Supabase in the app and against in-memory fakes in tests.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from modules.organizations.models import Organization

from .models import (
    AuthResult,
    AuthState,
    Notice,
    Profile,
    Route,
    SessionInfo,
    SignupOutcome,
    User,
    UserRole,
)

AuthStateCallback = Callable[[str, Optional[SessionInfo]], None]
StateListener = Callable[[AuthState], None]
Unsubscribe = Callable[[], None]


@runtime_checkable
class IAuthBackend(Protocol):
    """Password auth and session notifications."""

    async def get_session(self) -> Optional[SessionInfo]:
        """Return the persisted session, if any."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        """
        Sign in with email and password.

        Raises:
            AuthBackendError: If the backend rejects the credentials
        """
        ...

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
    ) -> AuthResult:
        """
        Create an account. The result has no session when email
        confirmation is required.

        Raises:
            AuthBackendError: If the backend rejects the sign-up
        """
        ...

    async def sign_out(self) -> None:
        """
        End the current session.

        Raises:
            AuthBackendError: If the backend can't end the session
        """
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        """
        Subscribe to auth events (sign in, token refresh, sign out).

        The callback may be invoked from a thread other than the caller's.

        Returns:
            A function that cancels the subscription
        """
        ...


@runtime_checkable
class IProfileStore(Protocol):
    """Profile rows, looked up by the session subject."""

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        """Return the profile for an auth user, or None if not there (yet)."""
        ...

    def update_role(self, profile_id: str, role: UserRole) -> None:
        """Set the active role on a profile."""
        ...


@runtime_checkable
class INavigator(Protocol):
    """Replaces the current screen."""

    def replace(self, route: Route) -> None:
        ...


@runtime_checkable
class IPrompter(Protocol):
    """Shows notices to the user."""

    async def alert(self, notice: Notice) -> None:
        """Show a message and wait for it to be dismissed."""
        ...

    async def confirm(self, notice: Notice) -> bool:
        """Ask a yes/no question. True if the user chose confirm_label."""
        ...


@runtime_checkable
class ISessionController(Protocol):
    """
    Interface for the session/role controller.

    State is read-only from the outside; these operations are the only
    way to change it.
    """

    @property
    def user(self) -> Optional[User]: ...

    @property
    def profile(self) -> Optional[Profile]: ...

    @property
    def organization(self) -> Optional[Organization]: ...

    @property
    def session(self) -> Optional[SessionInfo]: ...

    @property
    def loading(self) -> bool: ...

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def state(self) -> AuthState: ...

    def add_listener(self, listener: StateListener) -> Unsubscribe:
        """Call listener with a fresh AuthState after every change."""
        ...

    async def bootstrap(self) -> None:
        """Resume any persisted session and subscribe to auth events."""
        ...

    async def close(self) -> None:
        """Tear down the auth event subscription."""
        ...

    async def login(self, email: str, password: str) -> bool:
        """Sign in and navigate to the role's home. True on success."""
        ...

    async def signup(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> SignupOutcome:
        """Create an account and route the new user."""
        ...

    async def logout(self) -> bool:
        """Sign out and clear state. State is kept if sign-out fails."""
        ...

    def update_user(self, **changes: Any) -> None:
        """Patch the local user view without writing to the server."""
        ...

    async def switch_profile(self, target_role: UserRole) -> bool:
        """Switch the active role. True if the switch happened."""
        ...

    async def refresh_profile(self) -> bool:
        """Reload profile and organization for the current session."""
        ...
