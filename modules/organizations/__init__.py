"""
Organizations module.

A provider's business entity: lookup, creation on first switch to the
provider role, onboarding completion, and money/Stripe edge functions.

Public API:
- IOrganizationService / IOrganizationStore: Interfaces
- Organization, OnboardingDetails, FinancialSummary: Models
- Organization exceptions
"""

from .interfaces import IOrganizationService, IOrganizationStore
from .models import Organization, OnboardingDetails, FinancialSummary
from .exceptions import (
    OrganizationError,
    OrganizationNotFoundError,
    OrganizationCreateError,
    StripeLinkUnavailableError,
)

__all__ = [
    # Interfaces
    "IOrganizationService",
    "IOrganizationStore",
    # Models
    "Organization",
    "OnboardingDetails",
    "FinancialSummary",
    # Exceptions
    "OrganizationError",
    "OrganizationNotFoundError",
    "OrganizationCreateError",
    "StripeLinkUnavailableError",
]
