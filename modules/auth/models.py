"""
Authentication module data models.

These models define the session, profile and role state held by the
session controller and exposed to the rest of the app.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, computed_field, field_validator

from modules.organizations.models import Organization


class UserRole(str, Enum):
    """Business role of a profile."""

    PROVIDER = "provider"    # Service business
    HOMEOWNER = "homeowner"  # Service consumer

    @classmethod
    def coerce(cls, value: Any) -> "UserRole":
        """Return the matching role, or HOMEOWNER for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.HOMEOWNER


class Route(str, Enum):
    """Screens the controller navigates to."""

    LOGIN = "/auth/login"
    PROVIDER_HOME = "/(provider)/(tabs)"
    HOMEOWNER_HOME = "/(homeowner)/(tabs)"
    PROVIDER_ONBOARDING = "/(provider)/onboarding/business-basics"

    @classmethod
    def home_for(cls, role: UserRole) -> "Route":
        return cls.PROVIDER_HOME if role == UserRole.PROVIDER else cls.HOMEOWNER_HOME


class SignupOutcome(str, Enum):
    """How a signup attempt ended."""

    SIGNED_IN = "signed_in"                          # Account created with a live session
    CONFIRMATION_REQUIRED = "confirmation_required"  # Account created, email must be confirmed
    ALREADY_REGISTERED = "already_registered"        # Email already has an account
    FAILED = "failed"                                # Anything else


class SessionInfo(BaseModel):
    """
    A live authentication session issued by Supabase Auth.

    Token material is opaque to the app; only the subject is interpreted.
    """

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(default="", description="Refresh token")
    user_id: str = Field(..., description="Session subject (auth user ID)")
    email: Optional[str] = Field(None, description="Email on the auth user")
    expires_at: Optional[datetime] = Field(None, description="Access token expiry")

    model_config = {"frozen": True}


class AuthResult(BaseModel):
    """Result of a sign-in or sign-up call."""

    session: Optional[SessionInfo] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    # Supabase answers a sign-up for an existing, confirmed email with a
    # user that has no identities instead of an error.
    identities_count: Optional[int] = None


class Profile(BaseModel):
    """The durable account record; carries the business role."""

    id: str = Field(..., description="Profile ID (UUID)")
    user_id: Optional[str] = Field(None, description="Auth user ID this profile belongs to")
    email: str = Field(default="", description="Email address")
    name: str = Field(default="", description="Display name")
    phone: Optional[str] = Field(None, description="Phone number")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    role: UserRole = Field(default=UserRole.HOMEOWNER, description="Active business role")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> UserRole:
        return UserRole.coerce(value)


class User(BaseModel):
    """Denormalized identity view for display, derived from the profile."""

    id: str
    email: str
    role: UserRole
    name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_profile(cls, profile: Profile, subject_id: str) -> "User":
        return cls(
            id=subject_id,
            email=profile.email,
            role=profile.role,
            name=profile.name,
            phone=profile.phone,
            avatar=profile.avatar_url,
            created_at=profile.created_at,
        )


class AuthState(BaseModel):
    """Read-only snapshot of everything the session controller holds."""

    user: Optional[User] = None
    profile: Optional[Profile] = None
    organization: Optional[Organization] = None
    session: Optional[SessionInfo] = None
    loading: bool = True

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_authenticated(self) -> bool:
        return self.session is not None and self.user is not None

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile else None


class Notice(BaseModel):
    """A user-facing alert or confirmation."""

    title: str
    message: str
    confirm_label: str = "OK"
    cancel_label: Optional[str] = None
