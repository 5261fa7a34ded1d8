"""
Centralized configuration for the HomeBase Pro client.

All settings are loaded from environment variables with sensible defaults.
Supabase settings use the SUPABASE_* names the dashboard hands out.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "HomeBase Pro"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase (client side, anon key only)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Device-local persistent storage (session tokens, last active role)
    storage_path: Path = Path.home() / ".homebase" / "storage.json"

    # Profile loading
    profile_fetch_attempts: int = 3
    profile_fetch_delay: float = 1.0  # seconds

    # Which side wins when the stored role and the profile row disagree
    role_reconciliation: Literal["device", "server"] = "device"

    # Stripe Connect redirect targets
    stripe_return_url: str = "homebasepro://settings/payment"
    stripe_refresh_url: str = "homebasepro://settings/payment"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
