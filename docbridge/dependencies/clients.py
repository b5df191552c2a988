"""
Factory functions wiring the Drive session layer once per process.
"""

from datetime import timedelta
from functools import lru_cache

from docbridge.clients import GoogleOAuthClient, drive_client_factory
from docbridge.core.config import get_settings
from docbridge.core.logging import DiagnosticLogger
from docbridge.services import DriveOperationsService, SessionRegistry, TokenRefreshGuard


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def _diagnostic_logger(component: str) -> DiagnosticLogger:
    return DiagnosticLogger(component, debug=_settings().debug_mode)


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    return GoogleOAuthClient(_settings().google)


@lru_cache()
def get_session_registry() -> SessionRegistry:
    """Provide the process-wide registry of per-user Drive sessions."""
    settings = _settings()
    return SessionRegistry(
        drive_client_factory(
            settings.google.drive_root_folder_id, scopes=settings.sessions.scopes
        ),
        logger=_diagnostic_logger("SessionRegistry"),
        default_token_lifetime=timedelta(
            seconds=settings.sessions.default_token_lifetime_seconds
        ),
    )


@lru_cache()
def get_token_refresh_guard() -> TokenRefreshGuard:
    """Provide the refresh guard bound to the shared registry."""
    settings = _settings()
    return TokenRefreshGuard(
        get_session_registry(),
        get_google_oauth_client(),
        logger=_diagnostic_logger("TokenRefreshGuard"),
        refresh_window=timedelta(seconds=settings.sessions.refresh_window_seconds),
    )


@lru_cache()
def get_drive_operations_service() -> DriveOperationsService:
    """Provide the Drive upload/convert/delete service."""
    return DriveOperationsService(
        get_session_registry(),
        get_token_refresh_guard(),
        logger=_diagnostic_logger("GoogleDriveService"),
    )


__all__ = [
    "get_drive_operations_service",
    "get_google_oauth_client",
    "get_session_registry",
    "get_token_refresh_guard",
]
