"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest

from modules.organizations.service import reset_organization_service
from shared.config import get_settings
from shared.database import reset_client_cache
from shared.storage import reset_device_store


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached clients, stores and services before and after each test."""
    reset_client_cache()
    reset_device_store()
    reset_organization_service()
    get_settings.cache_clear()
    yield
    reset_client_cache()
    reset_device_store()
    reset_organization_service()
    get_settings.cache_clear()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent auth user ID (session subject)."""
    return "user-123"


@pytest.fixture
def test_profile_id() -> str:
    """Provide a consistent profile ID."""
    return "profile-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "user@example.com"
