"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

from datetime import datetime, timezone
from typing import Any, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints
    - First-row helper for select queries

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class ProfileRepository(BaseRepository[Profile]):
            def get_by_id(self, profile_id: str) -> Optional[Profile]:
                result = self._db.table("profiles").select("*").eq("id", profile_id).execute()
                row = self._first(result)
                return self._map_to_profile(row) if row else None
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    @staticmethod
    def _first(result: Any) -> dict[str, Any] | None:
        """Return the first row of a query result, or None when empty."""
        if result is None or not result.data:
            return None
        return result.data[0]

    @staticmethod
    def _now() -> str:
        """Current UTC time in the ISO format the database expects."""
        return datetime.now(timezone.utc).isoformat()
