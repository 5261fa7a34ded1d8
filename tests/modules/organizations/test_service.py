"""Tests for the organization service."""

import pytest
from unittest.mock import MagicMock, patch

from modules.organizations.exceptions import OrganizationNotFoundError, StripeLinkUnavailableError
from modules.organizations.models import OnboardingDetails, Organization
from modules.organizations.service import (
    OrganizationService,
    default_business_name,
    get_organization_service,
    reset_organization_service,
)
from shared.exceptions import ExternalServiceError


def make_organization(**overrides) -> Organization:
    data = {
        "id": "org-123",
        "owner_id": "profile-123",
        "business_name": "Jo Smith's Business",
    }
    data.update(overrides)
    return Organization(**data)


@pytest.fixture
def repository():
    return MagicMock()


@pytest.fixture
def functions():
    return MagicMock()


@pytest.fixture
def service(repository, functions):
    return OrganizationService(repository, functions)


class TestDefaultBusinessName:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Jo Smith", "Jo Smith's Business"),
            ("  Jo  ", "Jo's Business"),
            ("", "My Business"),
            (None, "My Business"),
        ],
    )
    def test_default_business_name(self, name, expected):
        """Should derive a placeholder name from the display name."""
        assert default_business_name(name) == expected


class TestOrganizationLookup:
    @pytest.mark.asyncio
    async def test_get_for_owner(self, service, repository):
        """Should delegate to the repository."""
        repository.get_by_owner.return_value = make_organization()

        org = await service.get_for_owner("profile-123")

        assert org.id == "org-123"
        repository.get_by_owner.assert_called_once_with("profile-123")

    @pytest.mark.asyncio
    async def test_create_default(self, service, repository):
        """Should create with the placeholder business name."""
        repository.create.return_value = make_organization()

        await service.create_default("profile-123", "Jo Smith")

        repository.create.assert_called_once_with("profile-123", "Jo Smith's Business")


class TestCompleteOnboarding:
    @pytest.mark.asyncio
    async def test_marks_completed(self, service, repository):
        """Should set onboarding_completed with no other fields."""
        repository.update.return_value = make_organization(onboarding_completed=True)

        org = await service.complete_onboarding("org-123")

        repository.update.assert_called_once_with("org-123", {"onboarding_completed": True})
        assert org.onboarding_completed is True

    @pytest.mark.asyncio
    async def test_writes_given_details(self, service, repository):
        """Only fields that were set should be written."""
        repository.update.return_value = make_organization(onboarding_completed=True)

        await service.complete_onboarding(
            "org-123",
            OnboardingDetails(business_name="Jo's Plumbing", location="Austin, TX"),
        )

        repository.update.assert_called_once_with(
            "org-123",
            {
                "business_name": "Jo's Plumbing",
                "location": "Austin, TX",
                "onboarding_completed": True,
            },
        )

    @pytest.mark.asyncio
    async def test_missing_organization(self, service, repository):
        """Should propagate not-found."""
        repository.update.side_effect = OrganizationNotFoundError("org-404")

        with pytest.raises(OrganizationNotFoundError):
            await service.complete_onboarding("org-404")


class TestFinancials:
    @pytest.mark.asyncio
    async def test_get_financials(self, service, functions):
        """Should call provider-financials and parse the summary."""
        functions.invoke.return_value = {
            "mtd_revenue_cents": 125000,
            "outstanding_invoices_count": 2,
            "outstanding_invoices_total_cents": 30000,
            "stripe_connected": True,
            "stripe_balance_cents": 9900,
            "recent_payments": [{"id": "pay-1", "amount": 5000}],
        }

        summary = await service.get_financials("org-123")

        functions.invoke.assert_called_once_with(
            "provider-financials",
            {"action": "get_financials", "org_id": "org-123"},
        )
        assert summary.mtd_revenue_cents == 125000
        assert summary.stripe_connected is True
        assert len(summary.recent_payments) == 1

    @pytest.mark.asyncio
    async def test_get_financials_failure(self, service, functions):
        """Gateway errors should propagate."""
        functions.invoke.side_effect = ExternalServiceError(
            "boom", service="provider-financials", code="EDGE_FUNCTION_FAILED"
        )

        with pytest.raises(ExternalServiceError):
            await service.get_financials("org-123")


class TestStripeConnectLink:
    @pytest.mark.asyncio
    async def test_returns_url(self, service, functions):
        """Should send the org and redirect URLs and return the link."""
        functions.invoke.return_value = {"url": "https://connect.stripe.com/setup/abc"}

        url = await service.create_stripe_connect_link("org-123")

        assert url == "https://connect.stripe.com/setup/abc"
        name, body = functions.invoke.call_args[0]
        assert name == "stripe-connect-link"
        assert body["organization_id"] == "org-123"
        assert body["return_url"] == "homebasepro://settings/payment"
        assert body["refresh_url"] == "homebasepro://settings/payment"

    @pytest.mark.asyncio
    async def test_missing_url(self, service, functions):
        """A response without a URL is an error."""
        functions.invoke.return_value = {}

        with pytest.raises(StripeLinkUnavailableError) as exc_info:
            await service.create_stripe_connect_link("org-123")

        assert exc_info.value.code == "STRIPE_LINK_UNAVAILABLE"


class TestServiceSingleton:
    @patch("modules.organizations.service.get_supabase_client")
    def test_get_organization_service_caches(self, mock_client):
        """Should build the service once."""
        mock_client.return_value = MagicMock()

        first = get_organization_service()
        second = get_organization_service()

        assert first is second
        mock_client.assert_called_once()

    @patch("modules.organizations.service.get_supabase_client")
    def test_reset_organization_service(self, mock_client):
        """Reset should force a rebuild."""
        mock_client.return_value = MagicMock()

        first = get_organization_service()
        reset_organization_service()
        second = get_organization_service()

        assert first is not second


class TestOrganizationInterfaces:
    def test_implementations_satisfy_protocols(self, service):
        """Repository and service should satisfy their protocols."""
        from modules.organizations.interfaces import IOrganizationService, IOrganizationStore
        from modules.organizations.repository import OrganizationRepository

        assert isinstance(OrganizationRepository(MagicMock()), IOrganizationStore)
        assert isinstance(service, IOrganizationService)
