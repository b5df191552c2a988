"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient, OAuthTokenExchangeError
from .google_drive import GoogleDriveClient, drive_client_factory, is_auth_error

__all__ = [
    "GoogleDriveClient",
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
    "drive_client_factory",
    "is_auth_error",
]
