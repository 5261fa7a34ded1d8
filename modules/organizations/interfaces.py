"""
Organizations module interfaces.

IOrganizationStore is the data access contract the session controller
depends on; IOrganizationService is what provider screens use.
"""

from typing import Any, Protocol, Optional, runtime_checkable

from .models import Organization, FinancialSummary, OnboardingDetails


@runtime_checkable
class IOrganizationStore(Protocol):
    """Read and write organization rows."""

    def get_by_owner(self, owner_id: str) -> Optional[Organization]:
        """Return the organization owned by a profile, or None."""
        ...

    def create(self, owner_id: str, business_name: str) -> Organization:
        """Insert a new organization with onboarding not yet completed."""
        ...

    def update(self, organization_id: str, data: dict[str, Any]) -> Organization:
        """Apply a partial update and return the updated row."""
        ...


@runtime_checkable
class IOrganizationService(Protocol):
    """
    Interface for provider-side organization operations.
    """

    async def get_for_owner(self, owner_id: str) -> Optional[Organization]:
        """
        Get the organization owned by a profile.

        Args:
            owner_id: Profile ID of the provider

        Returns:
            Organization if one exists, None otherwise
        """
        ...

    async def create_default(self, owner_id: str, display_name: Optional[str]) -> Organization:
        """
        Create an organization named after the owner's display name.

        Raises:
            OrganizationCreateError: If the insert returns no row
        """
        ...

    async def complete_onboarding(
        self,
        organization_id: str,
        details: Optional[OnboardingDetails] = None,
    ) -> Organization:
        """
        Mark onboarding complete, saving any collected business fields.

        Raises:
            OrganizationNotFoundError: If the organization doesn't exist
        """
        ...

    async def get_financials(self, organization_id: str) -> FinancialSummary:
        """
        Fetch the money overview for an organization.

        Raises:
            ExternalServiceError: If the edge function fails
        """
        ...

    async def create_stripe_connect_link(self, organization_id: str) -> str:
        """
        Get a Stripe Connect onboarding URL.

        Raises:
            StripeLinkUnavailableError: If no URL comes back
        """
        ...
