"""
Route guard.

Decides whether the screen at current_path is allowed for the current
auth state, and where to send the user if not.
"""

from typing import Optional

from .models import AuthState, Route, UserRole

_AUTH_GROUP = "auth"
_PROVIDER_GROUP = "(provider)"
_HOMEOWNER_GROUP = "(homeowner)"


def route_group(path: str) -> str:
    """First path segment, e.g. "/(provider)/(tabs)" -> "(provider)"."""
    segments = [s for s in path.split("/") if s]
    return segments[0] if segments else ""


def current_role(state: AuthState, stored_role: Optional[str] = None) -> UserRole:
    """Profile role, falling back to the stored role, then provider."""
    if state.profile is not None:
        return state.profile.role
    if stored_role in {r.value for r in UserRole}:
        return UserRole(stored_role)
    return UserRole.PROVIDER


def resolve_redirect(
    state: AuthState,
    current_path: str,
    stored_role: Optional[str] = None,
) -> Optional[Route]:
    """
    Return the route to redirect to, or None to stay.

    Nothing is decided while state is still loading.
    """
    if state.loading:
        return None

    group = route_group(current_path)

    if not state.is_authenticated:
        return None if group == _AUTH_GROUP else Route.LOGIN

    role = current_role(state, stored_role)

    if group == _AUTH_GROUP:
        return Route.home_for(role)
    if role == UserRole.PROVIDER and group == _HOMEOWNER_GROUP:
        return Route.PROVIDER_HOME
    if role == UserRole.HOMEOWNER and group == _PROVIDER_GROUP:
        return Route.HOMEOWNER_HOME
    return None
