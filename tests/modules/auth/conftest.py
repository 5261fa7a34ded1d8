"""
Pytest fixtures for auth module tests.

In-memory stand-ins for Supabase Auth, the profiles and organizations
tables, and the UI, so the session controller can be driven end to end.
"""

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock, patch

import pytest

from modules.auth.exceptions import AuthBackendError
from modules.auth.models import AuthResult, Notice, Profile, Route, SessionInfo, UserRole
from modules.auth.service import SessionController
from modules.organizations.models import Organization
from shared.config import Settings
from shared.storage import MemoryStore


class FakeAuthBackend:
    """Scriptable IAuthBackend."""

    def __init__(self) -> None:
        self.persisted_session: Optional[SessionInfo] = None
        self.sign_in_result: Optional[AuthResult] = None
        self.sign_in_error: Optional[Exception] = None
        self.sign_up_result: Optional[AuthResult] = None
        self.sign_up_error: Optional[Exception] = None
        self.sign_out_error: Optional[Exception] = None
        self.sign_up_calls: list[dict[str, Any]] = []
        self.sign_out_calls = 0
        self.callbacks: list = []

    async def get_session(self) -> Optional[SessionInfo]:
        return self.persisted_session

    async def sign_in_with_password(self, email: str, password: str) -> AuthResult:
        if self.sign_in_error is not None:
            raise self.sign_in_error
        return self.sign_in_result

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> AuthResult:
        self.sign_up_calls.append({"email": email, "metadata": metadata})
        if self.sign_up_error is not None:
            raise self.sign_up_error
        return self.sign_up_result

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        if self.sign_out_error is not None:
            raise self.sign_out_error

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)

        def unsubscribe() -> None:
            self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, event: str, session: Optional[SessionInfo]) -> None:
        for callback in list(self.callbacks):
            callback(event, session)


class InMemoryProfileStore:
    """IProfileStore keyed by auth user ID."""

    def __init__(self) -> None:
        self.rows: dict[str, Profile] = {}
        self.fetch_calls = 0
        self.missing_fetches = 0  # leading fetches that find nothing
        self.fetch_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.role_updates: list[tuple[str, UserRole]] = []

    def add(self, profile: Profile) -> Profile:
        self.rows[profile.user_id] = profile
        return profile

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        if self.missing_fetches > 0:
            self.missing_fetches -= 1
            return None
        return self.rows.get(user_id)

    def update_role(self, profile_id: str, role: UserRole) -> None:
        self.role_updates.append((profile_id, role))
        if self.update_error is not None:
            raise self.update_error
        for user_id, profile in self.rows.items():
            if profile.id == profile_id:
                self.rows[user_id] = profile.model_copy(update={"role": role})


class InMemoryOrganizationStore:
    """IOrganizationStore keyed by owner profile ID."""

    def __init__(self) -> None:
        self.rows: dict[str, Organization] = {}
        self.created: list[Organization] = []
        self.create_error: Optional[Exception] = None

    def add(self, organization: Organization) -> Organization:
        self.rows[organization.owner_id] = organization
        return organization

    def get_by_owner(self, owner_id: str) -> Optional[Organization]:
        return self.rows.get(owner_id)

    def create(self, owner_id: str, business_name: str) -> Organization:
        if self.create_error is not None:
            raise self.create_error
        organization = Organization(
            id=f"org-{len(self.created) + 1}",
            owner_id=owner_id,
            business_name=business_name,
            onboarding_completed=False,
        )
        self.created.append(organization)
        self.rows[owner_id] = organization
        return organization

    def update(self, organization_id: str, data: dict[str, Any]) -> Organization:
        for owner_id, organization in self.rows.items():
            if organization.id == organization_id:
                self.rows[owner_id] = organization.model_copy(update=data)
                return self.rows[owner_id]
        raise KeyError(organization_id)


class RecordingNavigator:
    def __init__(self) -> None:
        self.routes: list[Route] = []

    @property
    def current(self) -> Optional[Route]:
        return self.routes[-1] if self.routes else None

    def replace(self, route: Route) -> None:
        self.routes.append(route)


class ScriptedPrompter:
    """Records notices; answers confirmations with `answer`."""

    def __init__(self) -> None:
        self.alerts: list[Notice] = []
        self.confirms: list[Notice] = []
        self.answer = True

    async def alert(self, notice: Notice) -> None:
        self.alerts.append(notice)

    async def confirm(self, notice: Notice) -> bool:
        self.confirms.append(notice)
        return self.answer


@pytest.fixture
def backend() -> FakeAuthBackend:
    return FakeAuthBackend()


@pytest.fixture
def profiles() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def organizations() -> InMemoryOrganizationStore:
    return InMemoryOrganizationStore()


@pytest.fixture
def storage() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        profile_fetch_attempts=3,
        profile_fetch_delay=1.0,
        role_reconciliation="device",
    )


@pytest.fixture
def sleep_mock():
    """Patch the retry delay so tests don't wait."""
    with patch("modules.auth.service.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def controller(
    backend, profiles, organizations, storage, navigator, prompter, settings, sleep_mock
) -> SessionController:
    return SessionController(
        backend=backend,
        profiles=profiles,
        organizations=organizations,
        storage=storage,
        navigator=navigator,
        prompter=prompter,
        settings=settings,
    )


@pytest.fixture
def make_session(test_user_id, test_user_email):
    def _make(user_id: str = test_user_id, email: str = test_user_email) -> SessionInfo:
        return SessionInfo(
            access_token=f"access-{user_id}",
            refresh_token=f"refresh-{user_id}",
            user_id=user_id,
            email=email,
        )

    return _make


@pytest.fixture
def make_profile(test_user_id, test_profile_id, test_user_email):
    def _make(
        role: str = "homeowner",
        user_id: str = test_user_id,
        profile_id: str = test_profile_id,
        name: str = "Jo Smith",
    ) -> Profile:
        return Profile(
            id=profile_id,
            user_id=user_id,
            email=test_user_email,
            name=name,
            role=role,
        )

    return _make


@pytest.fixture
def make_organization(test_profile_id):
    def _make(onboarding_completed: bool = True, owner_id: str = test_profile_id) -> Organization:
        return Organization(
            id="org-existing",
            owner_id=owner_id,
            business_name="Jo's Plumbing",
            onboarding_completed=onboarding_completed,
        )

    return _make


@pytest.fixture
def drain():
    """Wait for auth events the controller has queued on the loop."""

    async def _drain(controller: SessionController) -> None:
        while controller._pending:
            await asyncio.gather(
                *(asyncio.wrap_future(f) for f in list(controller._pending)),
                return_exceptions=True,
            )

    return _drain


@pytest.fixture
def backend_error():
    def _make(message: str, code: Optional[str] = None, status: int = 400) -> AuthBackendError:
        return AuthBackendError(message, code=code, status=status)

    return _make
