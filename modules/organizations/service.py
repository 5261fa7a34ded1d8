"""
Organization service implementation.

Provider-side operations on the signed-in provider's organization: the
row itself lives in the organizations table, money and Stripe Connect go
through edge functions.
"""

import logging
from typing import Optional

from shared.config import get_settings
from shared.database import get_supabase_client
from shared.functions import EdgeFunctionGateway

from .interfaces import IOrganizationService, IOrganizationStore
from .models import Organization, FinancialSummary, OnboardingDetails
from .exceptions import OrganizationNotFoundError, StripeLinkUnavailableError
from .repository import OrganizationRepository

logger = logging.getLogger(__name__)


def default_business_name(display_name: Optional[str]) -> str:
    """Business name used until onboarding collects the real one."""
    name = (display_name or "").strip()
    return f"{name}'s Business" if name else "My Business"


class OrganizationService(IOrganizationService):
    """Organization operations backed by Supabase."""

    def __init__(
        self,
        repository: IOrganizationStore,
        functions: EdgeFunctionGateway,
    ):
        self._repository = repository
        self._functions = functions
        self._settings = get_settings()

    async def get_for_owner(self, owner_id: str) -> Optional[Organization]:
        return self._repository.get_by_owner(owner_id)

    async def create_default(self, owner_id: str, display_name: Optional[str]) -> Organization:
        organization = self._repository.create(owner_id, default_business_name(display_name))
        logger.info(f"Created organization {organization.id} for profile {owner_id}")
        return organization

    async def complete_onboarding(
        self,
        organization_id: str,
        details: Optional[OnboardingDetails] = None,
    ) -> Organization:
        """
        Mark onboarding complete.

        Only fields set on details are written; the rest keep their
        current values. The session controller keeps its own copy of the
        organization, so call refresh_profile() on it afterwards.
        """
        data = details.model_dump(exclude_none=True) if details else {}
        data["onboarding_completed"] = True
        try:
            organization = self._repository.update(organization_id, data)
        except OrganizationNotFoundError:
            logger.warning(f"Onboarding completed for missing organization {organization_id}")
            raise
        logger.info(f"Onboarding completed for organization {organization_id}")
        return organization

    async def get_financials(self, organization_id: str) -> FinancialSummary:
        payload = self._functions.invoke(
            "provider-financials",
            {"action": "get_financials", "org_id": organization_id},
        )
        return FinancialSummary.model_validate(payload)

    async def create_stripe_connect_link(self, organization_id: str) -> str:
        payload = self._functions.invoke(
            "stripe-connect-link",
            {
                "organization_id": organization_id,
                "return_url": self._settings.stripe_return_url,
                "refresh_url": self._settings.stripe_refresh_url,
            },
        )
        url = payload.get("url")
        if not url:
            raise StripeLinkUnavailableError(organization_id)
        return url


# Module-level instance getter
_service_instance: Optional[OrganizationService] = None


def get_organization_service() -> OrganizationService:
    """Get the organization service singleton."""
    global _service_instance
    if _service_instance is None:
        client = get_supabase_client()
        _service_instance = OrganizationService(
            OrganizationRepository(client),
            EdgeFunctionGateway(client),
        )
    return _service_instance


def reset_organization_service() -> None:
    """Reset the organization service singleton (for testing)."""
    global _service_instance
    _service_instance = None
