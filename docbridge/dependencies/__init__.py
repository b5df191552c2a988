"""Expose the composition-root factories."""

from .clients import (
    get_drive_operations_service,
    get_google_oauth_client,
    get_session_registry,
    get_token_refresh_guard,
)

__all__ = [
    "get_drive_operations_service",
    "get_google_oauth_client",
    "get_session_registry",
    "get_token_refresh_guard",
]
