"""
Profile repository for database access.

Encapsulates Supabase queries and data mapping for the profiles table.
"""

from typing import Any, Optional

from shared.repository import BaseRepository
from .models import Profile, UserRole


class ProfileRepository(BaseRepository[Profile]):
    """
    Repository for profile data access.

    Profiles are created server-side at sign-up, so a lookup right after
    sign-up can come back empty for a moment.
    """

    def get_by_user_id(self, user_id: str) -> Optional[Profile]:
        """
        Get the profile belonging to an auth user.

        Args:
            user_id: The session subject.

        Returns:
            Profile, or None if the row doesn't exist (yet).
        """
        result = (
            self._db.table("profiles")
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return self._map_to_profile(row) if row else None

    def update_role(self, profile_id: str, role: UserRole) -> None:
        """
        Set the active role on a profile.

        Args:
            profile_id: The profile UUID.
            role: New role.
        """
        data = {"role": UserRole.coerce(role).value, "updated_at": self._now()}
        self._db.table("profiles").update(data).eq("id", profile_id).execute()

    def _map_to_profile(self, data: dict[str, Any]) -> Profile:
        """Map database row to Profile model."""
        return Profile(
            id=str(data["id"]),
            user_id=data.get("user_id"),
            email=data.get("email") or "",
            name=data.get("name") or "",
            phone=data.get("phone"),
            avatar_url=data.get("avatar_url"),
            role=data.get("role"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
