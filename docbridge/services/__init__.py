"""Service layer exports."""

from .drive_operations import DriveOperationsService, derive_edit_url
from .sessions import CredentialSession, SessionRegistry
from .token_refresh import TokenRefreshGuard

__all__ = [
    "CredentialSession",
    "DriveOperationsService",
    "SessionRegistry",
    "TokenRefreshGuard",
    "derive_edit_url",
]
