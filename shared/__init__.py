"""
Shared infrastructure for the HomeBase Pro client.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- storage: Device-local key/value storage
- functions: Edge function gateway

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    HomeBaseError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
)
from .functions import EdgeFunctionGateway
from .storage import (
    KeyValueStore,
    MemoryStore,
    JSONFileStore,
    get_device_store,
    reset_device_store,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "HomeBaseError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "EdgeFunctionGateway",
    "KeyValueStore",
    "MemoryStore",
    "JSONFileStore",
    "get_device_store",
    "reset_device_store",
]
