"""
Organizations module data models.

An organization is a provider's business entity. Each provider profile
owns at most one.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


class Organization(BaseModel):
    """A provider's business, mirrored from the organizations table."""

    id: str = Field(..., description="Organization ID (UUID)")
    owner_id: str = Field(..., description="Owning profile ID")
    business_name: str = Field(..., description="Public business name")
    description: Optional[str] = Field(None, description="Business description")
    logo_url: Optional[str] = Field(None, description="Logo image URL")
    service_categories: list[str] = Field(default_factory=list)
    service_radius: Optional[int] = Field(None, description="Service radius in miles")
    location: Optional[str] = Field(None, description="Base location")
    slug: Optional[str] = Field(None, description="Marketplace profile slug")
    verified: bool = Field(default=False)
    published_to_marketplace: bool = Field(default=False)
    stripe_account_id: Optional[str] = Field(None, description="Stripe Connect account")
    subscription_plan: str = Field(default="free")
    subscription_status: Optional[str] = Field(None)
    onboarding_completed: bool = Field(default=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(
        "verified",
        "published_to_marketplace",
        "onboarding_completed",
        mode="before",
    )
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        # Nullable booleans in the table
        return False if value is None else value

    @field_validator("service_categories", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("subscription_plan", mode="before")
    @classmethod
    def _null_is_free(cls, value: Any) -> Any:
        return "free" if value is None else value


class OnboardingDetails(BaseModel):
    """Business fields collected by the provider onboarding flow."""

    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    logo_url: Optional[str] = None
    service_categories: Optional[list[str]] = None
    service_radius: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None


class FinancialSummary(BaseModel):
    """Money overview returned by the provider-financials edge function."""

    mtd_revenue_cents: int = 0
    outstanding_invoices_count: int = 0
    outstanding_invoices_total_cents: int = 0
    stripe_connected: bool = False
    stripe_balance_cents: int = 0
    recent_payments: list[dict[str, Any]] = Field(default_factory=list)

    @staticmethod
    def format_cents(cents: int) -> str:
        """Format an amount in cents as dollars, e.g. 12345 -> "$123.45"."""
        sign = "-" if cents < 0 else ""
        return f"{sign}${abs(cents) / 100:,.2f}"
