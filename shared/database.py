"""
Database client factory for Supabase.

The app runs on a user's device, so it only ever holds the anon key and
acts as the signed-in user; Row Level Security decides what it can touch.
The auth session is persisted to the device store so a relaunch resumes it.
"""

from typing import Optional
from supabase import create_client, Client, ClientOptions

from .config import get_settings
from .storage import get_device_store

# Module-level client cache
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """
    Get the shared Supabase client.

    Sessions are persisted to device storage and refreshed automatically
    by the auth client.

    Returns:
        Supabase client configured with the anon key
    """
    global _client

    if _client is None:
        settings = get_settings()
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError(
                "Supabase configuration missing. "
                "Set SUPABASE_URL and SUPABASE_ANON_KEY environment variables."
            )
        _client = create_client(
            settings.supabase_url,
            settings.supabase_anon_key,
            options=ClientOptions(
                storage=get_device_store(),
                persist_session=True,
                auto_refresh_token=True,
            ),
        )

    return _client


def reset_client_cache() -> None:
    """
    Reset the cached database client.

    Useful for testing or when configuration changes.
    """
    global _client
    _client = None
