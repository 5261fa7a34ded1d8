"""
Supabase Auth adapter.

Wraps the Supabase client's auth API behind IAuthBackend: SDK sessions
become SessionInfo, SDK errors become AuthBackendError with the backend's
error code kept when it sends one.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import AuthError, Client

from .exceptions import AuthBackendError
from .interfaces import IAuthBackend, AuthStateCallback, Unsubscribe
from .models import AuthResult, SessionInfo

logger = logging.getLogger(__name__)


def _to_backend_error(error: AuthError) -> AuthBackendError:
    return AuthBackendError(
        getattr(error, "message", None) or str(error),
        code=getattr(error, "code", None),
        status=getattr(error, "status", None),
    )


def to_session_info(session: Any) -> Optional[SessionInfo]:
    """Convert an SDK session object into SessionInfo."""
    if session is None or not getattr(session, "access_token", None):
        return None

    user = getattr(session, "user", None)
    expires_at = getattr(session, "expires_at", None)

    return SessionInfo(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None) or "",
        user_id=str(user.id) if user is not None else "",
        email=getattr(user, "email", None),
        expires_at=(
            datetime.fromtimestamp(expires_at, tz=timezone.utc)
            if isinstance(expires_at, (int, float))
            else None
        ),
    )


def _to_auth_result(response: Any) -> AuthResult:
    user = getattr(response, "user", None)
    identities = getattr(user, "identities", None) if user is not None else None
    return AuthResult(
        session=to_session_info(getattr(response, "session", None)),
        user_id=str(user.id) if user is not None else None,
        email=getattr(user, "email", None),
        identities_count=len(identities) if identities is not None else None,
    )


class SupabaseAuthBackend(IAuthBackend):
    """IAuthBackend on top of the Supabase client."""

    def __init__(self, db: Client) -> None:
        self._db = db

    async def get_session(self) -> Optional[SessionInfo]:
        try:
            session = self._db.auth.get_session()
        except AuthError as e:
            # A stored session whose refresh token was revoked
            logger.warning(f"Could not restore session: {e}")
            return None
        return to_session_info(session)

    async def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        try:
            response = self._db.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise _to_backend_error(e) from e
        return _to_auth_result(response)

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any],
    ) -> AuthResult:
        try:
            response = self._db.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"data": metadata},
                }
            )
        except AuthError as e:
            raise _to_backend_error(e) from e
        return _to_auth_result(response)

    async def sign_out(self) -> None:
        try:
            self._db.auth.sign_out()
        except AuthError as e:
            raise _to_backend_error(e) from e

    def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        def handler(event: str, session: Any) -> None:
            callback(str(event), to_session_info(session))

        subscription = self._db.auth.on_auth_state_change(handler)
        return subscription.unsubscribe
