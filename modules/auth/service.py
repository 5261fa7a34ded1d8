"""
Session/role controller implementation.

Owns the signed-in user's session, profile, active role and (for
providers) organization. Screens read state from here and change it only
through the operations below.

Every mutating operation and every auth event handler runs under one
asyncio.Lock, so a reload triggered by a backend notification can never
interleave with an explicit login or role switch.
"""

import asyncio
import logging
from concurrent.futures import Future
from typing import Any, Optional

from shared.config import Settings, get_settings
from shared.database import get_supabase_client
from shared.exceptions import HomeBaseError
from shared.storage import KeyValueStore, get_device_store
from modules.organizations.interfaces import IOrganizationStore
from modules.organizations.models import Organization
from modules.organizations.repository import OrganizationRepository
from modules.organizations.service import default_business_name

from .backend import SupabaseAuthBackend
from .exceptions import (
    AccountExistsError,
    AuthBackendError,
    LoginFailedError,
    LogoutFailedError,
    NotAuthenticatedError,
    RoleSwitchError,
    SignupFailedError,
    classify_login_error,
    is_account_exists_error,
)
from .interfaces import (
    IAuthBackend,
    INavigator,
    IProfileStore,
    IPrompter,
    ISessionController,
    StateListener,
    Unsubscribe,
)
from .models import (
    AuthState,
    Notice,
    Profile,
    Route,
    SessionInfo,
    SignupOutcome,
    User,
    UserRole,
)
from .repository import ProfileRepository

logger = logging.getLogger(__name__)

ROLE_STORAGE_KEY = "user_role"


class SessionController(ISessionController):
    """
    Implementation of the session/role controller.

    Collaborators are injected so the controller runs the same way
    against Supabase and against test fakes.
    """

    def __init__(
        self,
        backend: IAuthBackend,
        profiles: IProfileStore,
        organizations: IOrganizationStore,
        storage: KeyValueStore,
        navigator: INavigator,
        prompter: IPrompter,
        settings: Optional[Settings] = None,
    ):
        self._backend = backend
        self._profiles = profiles
        self._organizations = organizations
        self._storage = storage
        self._navigator = navigator
        self._prompter = prompter
        self._settings = settings or get_settings()

        self._user: Optional[User] = None
        self._profile: Optional[Profile] = None
        self._organization: Optional[Organization] = None
        self._session: Optional[SessionInfo] = None
        self._loading = True

        self._lock = asyncio.Lock()
        self._listeners: list[StateListener] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._pending: set[Future] = set()

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def profile(self) -> Optional[Profile]:
        return self._profile

    @property
    def organization(self) -> Optional[Organization]:
        return self._organization

    @property
    def session(self) -> Optional[SessionInfo]:
        return self._session

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None and self._user is not None

    @property
    def state(self) -> AuthState:
        return AuthState(
            user=self._user,
            profile=self._profile,
            organization=self._organization,
            session=self._session,
            loading=self._loading,
        )

    def add_listener(self, listener: StateListener) -> Unsubscribe:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def bootstrap(self) -> None:
        """
        Resume any persisted session and subscribe to auth events.

        Calling it again while subscribed does nothing.
        """
        if self._unsubscribe is not None:
            return

        self._loop = asyncio.get_running_loop()
        session = await self._backend.get_session()
        self._unsubscribe = self._backend.on_auth_state_change(self._on_auth_state_change)

        async with self._lock:
            if session is None:
                logger.debug("No persisted session")
                self._end_session()
                return
            self._update(session=session)
            await self._load_user_data(session.user_id)

    async def close(self) -> None:
        """Cancel the auth subscription and any queued event handling."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for future in list(self._pending):
            future.cancel()
        self._pending.clear()
        self._loop = None

    async def __aenter__(self) -> "SessionController":
        await self.bootstrap()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _on_auth_state_change(self, event: str, session: Optional[SessionInfo]) -> None:
        # May be called from the SDK's token refresh thread
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        future = asyncio.run_coroutine_threadsafe(
            self._handle_auth_event(event, session), loop
        )
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    async def _handle_auth_event(self, event: str, session: Optional[SessionInfo]) -> None:
        logger.debug(f"Auth event: {event}")
        async with self._lock:
            if session is None:
                self._end_session()
                return
            self._update(session=session)
            await self._load_user_data(session.user_id)

    # -------------------------------------------------------------------------
    # Profile loading
    # -------------------------------------------------------------------------

    async def load_user_data(self, subject_id: str) -> bool:
        """
        Load profile, role and organization for an auth user.

        Returns:
            True if a profile was loaded
        """
        async with self._lock:
            return await self._load_user_data(subject_id)

    async def refresh_profile(self) -> bool:
        async with self._lock:
            if self._session is None:
                return False
            return await self._load_user_data(self._session.user_id)

    async def _load_user_data(self, subject_id: str) -> bool:
        # Caller holds self._lock
        self._update(loading=True)
        try:
            profile = await self._fetch_profile(subject_id)
            if profile is None:
                logger.warning(f"No profile for user {subject_id}; leaving state empty")
                self._update(user=None, profile=None, organization=None)
                return False

            role = self._reconcile_role(profile)
            if role != profile.role:
                profile = profile.model_copy(update={"role": role})
            self._storage.set_item(ROLE_STORAGE_KEY, role.value)

            organization = None
            if role == UserRole.PROVIDER:
                organization = self._organizations.get_by_owner(profile.id)

            self._update(
                profile=profile,
                user=User.from_profile(profile, subject_id),
                organization=organization,
            )
            return True
        except Exception:
            logger.exception(f"Loading user data for {subject_id} failed")
            self._update(user=None, profile=None, organization=None)
            return False
        finally:
            self._update(loading=False)

    async def _fetch_profile(self, subject_id: str) -> Optional[Profile]:
        """
        Fetch the profile, retrying while it isn't there yet.

        The row is created server-side at sign-up and can lag behind the
        session. Fixed delay between attempts, none after the last.
        """
        attempts = max(1, self._settings.profile_fetch_attempts)
        for attempt in range(1, attempts + 1):
            try:
                profile = self._profiles.get_by_user_id(subject_id)
            except Exception as e:
                logger.warning(f"Profile fetch {attempt}/{attempts} for {subject_id} failed: {e}")
                profile = None
            else:
                if profile is None:
                    logger.debug(f"Profile fetch {attempt}/{attempts} for {subject_id}: not found")

            if profile is not None:
                return profile
            if attempt < attempts:
                await asyncio.sleep(self._settings.profile_fetch_delay)
        return None

    def _reconcile_role(self, profile: Profile) -> UserRole:
        """Resolve the active role from the profile and the stored role."""
        stored_raw = self._storage.get_item(ROLE_STORAGE_KEY)
        if stored_raw not in {r.value for r in UserRole}:
            return profile.role

        stored = UserRole(stored_raw)
        if stored == profile.role or self._settings.role_reconciliation == "server":
            return profile.role

        logger.info(
            f"Stored role {stored.value} overrides profile role "
            f"{profile.role.value} for profile {profile.id}"
        )
        try:
            self._profiles.update_role(profile.id, stored)
        except Exception as e:
            logger.warning(f"Could not write stored role back to profile {profile.id}: {e}")
        return stored

    # -------------------------------------------------------------------------
    # Login / signup / logout
    # -------------------------------------------------------------------------

    async def login(self, email: str, password: str) -> bool:
        async with self._lock:
            self._update(loading=True)
            error: HomeBaseError
            try:
                result = await self._backend.sign_in_with_password(email, password)
                if result.session is None:
                    raise LoginFailedError("No session returned")

                self._update(session=result.session)
                await self._load_user_data(result.session.user_id)

                role = self._landing_role(result.session.user_id)
                logger.info(f"Signed in as {role.value}")
                self._navigator.replace(Route.home_for(role))
                return True
            except AuthBackendError as e:
                error = classify_login_error(e)
                logger.info(f"Login rejected: {error.code}")
            except HomeBaseError as e:
                error = e
                logger.warning(f"Login failed: {e.message}")
            except Exception:
                logger.exception("Unexpected error during login")
                error = LoginFailedError()
            finally:
                self._update(loading=False)

            await self._alert(error)
            return False

    def _landing_role(self, subject_id: str) -> UserRole:
        """Role to navigate by after login: the server's, else the loaded one."""
        try:
            latest = self._profiles.get_by_user_id(subject_id)
        except Exception as e:
            logger.warning(f"Could not re-read profile for {subject_id}: {e}")
            latest = None

        if latest is not None:
            return latest.role
        if self._profile is not None:
            return self._profile.role
        return UserRole.HOMEOWNER

    async def signup(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> SignupOutcome:
        role = UserRole(role)
        async with self._lock:
            self._update(loading=True)
            error: HomeBaseError
            try:
                outcome = await self._signup(email, password, name, role)
            except AccountExistsError as e:
                self._update(loading=False)
                if await self._prompter.confirm(
                    Notice(
                        title=e.title,
                        message=e.message,
                        confirm_label="Go to Login",
                        cancel_label="Cancel",
                    )
                ):
                    self._navigator.replace(Route.LOGIN)
                return SignupOutcome.ALREADY_REGISTERED
            except HomeBaseError as e:
                error = e
                logger.warning(f"Sign-up failed: {e.message}")
            except Exception:
                logger.exception("Unexpected error during sign-up")
                error = SignupFailedError()
            else:
                self._update(loading=False)
                if outcome == SignupOutcome.CONFIRMATION_REQUIRED:
                    await self._prompter.alert(
                        Notice(
                            title="Check Your Email",
                            message=(
                                f"We sent a confirmation link to {email}. "
                                "Confirm your email, then sign in."
                            ),
                        )
                    )
                    self._navigator.replace(Route.LOGIN)
                return outcome

            self._update(loading=False)
            await self._alert(error)
            return SignupOutcome.FAILED

    async def _signup(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> SignupOutcome:
        try:
            result = await self._backend.sign_up(
                email, password, {"name": name, "role": role.value}
            )
        except AuthBackendError as e:
            if is_account_exists_error(e):
                raise AccountExistsError(email) from e
            raise SignupFailedError(e.message) from e

        if result.identities_count == 0:
            raise AccountExistsError(email)

        if result.session is None:
            logger.info("Sign-up needs email confirmation")
            return SignupOutcome.CONFIRMATION_REQUIRED

        # Stored before loading so reconciliation keeps the chosen role
        self._storage.set_item(ROLE_STORAGE_KEY, role.value)
        self._update(session=result.session)
        await self._load_user_data(result.session.user_id)

        if role == UserRole.PROVIDER:
            try:
                route = self._provider_entry_route(name)
            except Exception:
                # The account and session exist; onboarding can finish the setup
                logger.exception("Provider setup after sign-up failed")
                await self._prompter.alert(
                    Notice(
                        title="Business Setup Incomplete",
                        message=(
                            "Your account is ready, but we couldn't set up your "
                            "business yet. Please try again in a moment."
                        ),
                    )
                )
                route = Route.PROVIDER_ONBOARDING
        else:
            route = Route.HOMEOWNER_HOME

        logger.info(f"Signed up as {role.value}")
        self._navigator.replace(route)
        return SignupOutcome.SIGNED_IN

    def _provider_entry_route(self, name: str) -> Route:
        """Make sure a new provider has an organization and pick the first screen."""
        profile = self._profile
        if profile is None:
            return Route.PROVIDER_ONBOARDING

        if profile.role != UserRole.PROVIDER:
            # Profile row was created before the requested role reached it
            self._profiles.update_role(profile.id, UserRole.PROVIDER)
            self._storage.set_item(ROLE_STORAGE_KEY, UserRole.PROVIDER.value)
            profile = profile.model_copy(update={"role": UserRole.PROVIDER})
            self._update(
                profile=profile,
                user=self._user.model_copy(update={"role": UserRole.PROVIDER}) if self._user else None,
            )

        organization = self._organization or self._organizations.get_by_owner(profile.id)
        if organization is None:
            organization = self._organizations.create(
                profile.id, default_business_name(profile.name or name)
            )
            logger.info(f"Created organization {organization.id} for new provider {profile.id}")
        self._update(organization=organization)

        if organization.onboarding_completed:
            return Route.PROVIDER_HOME
        return Route.PROVIDER_ONBOARDING

    async def logout(self) -> bool:
        async with self._lock:
            try:
                await self._backend.sign_out()
            except Exception as e:
                # The server may still consider the session live; keep state
                logger.warning(f"Sign-out failed: {e}")
                await self._alert(LogoutFailedError(str(e)))
                return False

            self._end_session()
            logger.info("Signed out")
            self._navigator.replace(Route.LOGIN)
            return True

    def update_user(self, **changes: Any) -> None:
        if self._user is None:
            return
        self._update(user=User.model_validate({**self._user.model_dump(), **changes}))

    # -------------------------------------------------------------------------
    # Role switching
    # -------------------------------------------------------------------------

    async def switch_profile(self, target_role: UserRole) -> bool:
        target = UserRole(target_role)
        async with self._lock:
            profile, session = self._profile, self._session
            if profile is None or session is None:
                await self._alert(NotAuthenticatedError("switch_profile"))
                return False

            if profile.role == target:
                self._navigator.replace(Route.home_for(target))
                return True

            try:
                if target == UserRole.PROVIDER:
                    organization = self._organizations.get_by_owner(profile.id)

                    if organization is None:
                        if not await self._prompter.confirm(
                            Notice(
                                title="Create Provider Account",
                                message=(
                                    "You don't have a provider account yet. Create one now? "
                                    "You'll set up your business next."
                                ),
                                confirm_label="Create",
                                cancel_label="Cancel",
                            )
                        ):
                            return False
                        self._apply_role(profile, target)
                        display_name = self._user.name if self._user else profile.name
                        self._organizations.create(profile.id, default_business_name(display_name))
                        await self._reload_after_switch(session, target)
                        self._navigator.replace(Route.PROVIDER_ONBOARDING)
                        return True

                    if not organization.onboarding_completed:
                        if not await self._prompter.confirm(
                            Notice(
                                title="Complete Onboarding",
                                message=(
                                    "Finish setting up your business to use the "
                                    "provider dashboard."
                                ),
                                confirm_label="Continue",
                                cancel_label="Cancel",
                            )
                        ):
                            return False
                        self._apply_role(profile, target)
                        await self._reload_after_switch(session, target)
                        self._navigator.replace(Route.PROVIDER_ONBOARDING)
                        return True

                self._apply_role(profile, target)
                await self._reload_after_switch(session, target)
                self._navigator.replace(Route.home_for(target))
                return True
            except Exception:
                logger.exception(f"Switching to {target.value} failed")
                await self._alert(RoleSwitchError(target.value))
                return False

    def _apply_role(self, profile: Profile, role: UserRole) -> None:
        # Server first, then device; neither step is undone if the other fails
        self._profiles.update_role(profile.id, role)
        self._storage.set_item(ROLE_STORAGE_KEY, role.value)
        logger.info(f"Profile {profile.id} switched to {role.value}")

    async def _reload_after_switch(self, session: SessionInfo, role: UserRole) -> None:
        if not await self._load_user_data(session.user_id):
            raise RoleSwitchError(role.value)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _alert(self, error: HomeBaseError) -> None:
        await self._prompter.alert(
            Notice(title=error.title, message=error.message)
        )

    def _end_session(self) -> None:
        # The stored role belongs to the user who just left
        self._storage.remove_item(ROLE_STORAGE_KEY)
        self._update(
            session=None,
            user=None,
            profile=None,
            organization=None,
            loading=False,
        )

    def _update(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self, f"_{name}", value)

        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Auth state listener failed")


def create_session_controller(
    navigator: INavigator,
    prompter: IPrompter,
    settings: Optional[Settings] = None,
) -> SessionController:
    """Build a controller wired to Supabase and the device store."""
    client = get_supabase_client()
    return SessionController(
        backend=SupabaseAuthBackend(client),
        profiles=ProfileRepository(client),
        organizations=OrganizationRepository(client),
        storage=get_device_store(),
        navigator=navigator,
        prompter=prompter,
        settings=settings,
    )
