"""
Organization repository for database access.

Encapsulates Supabase queries and data mapping for the organizations table.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from .exceptions import OrganizationCreateError, OrganizationNotFoundError
from .models import Organization


class OrganizationRepository(BaseRepository[Organization]):
    """
    Repository for organization data access.

    Note: This repository does NOT perform authorization checks.
    Row Level Security limits the signed-in user to their own rows.
    """

    def get_by_owner(self, owner_id: str) -> Optional[Organization]:
        """
        Get the organization owned by a profile.

        Args:
            owner_id: The owning profile's ID.

        Returns:
            Organization, or None if the provider hasn't got one yet.
        """
        result = (
            self._db.table("organizations")
            .select("*")
            .eq("owner_id", owner_id)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return self._map_to_organization(row) if row else None

    def get_by_id(self, organization_id: str) -> Optional[Organization]:
        """Get an organization by ID."""
        result = (
            self._db.table("organizations")
            .select("*")
            .eq("id", organization_id)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return self._map_to_organization(row) if row else None

    def create(self, owner_id: str, business_name: str) -> Organization:
        """
        Create a new organization with onboarding not yet completed.

        Args:
            owner_id: The owning profile's ID.
            business_name: Initial business name.

        Returns:
            Created Organization with generated ID and timestamps.
        """
        data = {
            "owner_id": owner_id,
            "business_name": business_name,
            "onboarding_completed": False,
        }
        result = self._db.table("organizations").insert(data).execute()
        row = self._first(result)
        if row is None:
            raise OrganizationCreateError(owner_id)
        return self._map_to_organization(row)

    def update(self, organization_id: str, data: dict[str, Any]) -> Organization:
        """
        Apply a partial update to an organization.

        Args:
            organization_id: The organization UUID.
            data: Columns to update.

        Returns:
            The updated Organization.
        """
        payload = {**data, "updated_at": self._now()}
        result = (
            self._db.table("organizations")
            .update(payload)
            .eq("id", organization_id)
            .execute()
        )
        row = self._first(result)
        if row is None:
            raise OrganizationNotFoundError(organization_id)
        return self._map_to_organization(row)

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_organization(self, data: dict[str, Any]) -> Organization:
        """Map database row to Organization model."""
        return Organization(
            id=str(data["id"]),
            owner_id=str(data.get("owner_id") or ""),
            business_name=data.get("business_name") or "",
            description=data.get("description"),
            logo_url=data.get("logo_url"),
            service_categories=data.get("service_categories"),
            service_radius=data.get("service_radius"),
            location=data.get("location"),
            slug=data.get("slug"),
            verified=data.get("verified"),
            published_to_marketplace=data.get("published_to_marketplace"),
            stripe_account_id=data.get("stripe_account_id"),
            subscription_plan=data.get("subscription_plan"),
            subscription_status=data.get("subscription_status"),
            onboarding_completed=data.get("onboarding_completed"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
