"""
Organizations module exceptions.
"""

from shared.exceptions import (
    HomeBaseError,
    NotFoundError,
    ExternalServiceError,
)


class OrganizationError(HomeBaseError):
    """Base exception for organization-related errors."""

    pass


class OrganizationNotFoundError(NotFoundError):
    """Raised when an organization is not found."""

    def __init__(self, organization_id: str):
        super().__init__(
            f"Organization not found: {organization_id}",
            code="ORGANIZATION_NOT_FOUND",
            details={"organization_id": organization_id},
        )


class OrganizationCreateError(OrganizationError):
    """Raised when the backend doesn't return the inserted organization."""

    def __init__(self, owner_id: str):
        super().__init__(
            f"Failed to create organization for owner: {owner_id}",
            code="ORGANIZATION_CREATE_FAILED",
            details={"owner_id": owner_id},
        )


class StripeLinkUnavailableError(ExternalServiceError):
    """Raised when stripe-connect-link returns no onboarding URL."""

    def __init__(self, organization_id: str):
        super().__init__(
            "Stripe did not return a connect link",
            service="stripe-connect-link",
            code="STRIPE_LINK_UNAVAILABLE",
            details={"organization_id": organization_id},
        )
