"""
Error taxonomy for the Drive session and conversion layer.

Callers map these onto transport responses; the layer itself only exposes
distinguishable error kinds.
"""

from __future__ import annotations


class DocBridgeError(Exception):
    """Base class for errors surfaced by the session layer."""


class InvalidCredentialsError(DocBridgeError):
    """Raised when a session is initialized without an access token."""


class SessionNotInitializedError(DocBridgeError):
    """Raised when an operation runs for a user without a session."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"Drive client not initialized for user: {user_id}")
        self.user_id = user_id


class SourceNotFoundError(DocBridgeError):
    """Raised when the local file to upload does not exist."""

    def __init__(self, file_path: str) -> None:
        super().__init__(f"File not found: {file_path}")
        self.file_path = file_path


class AuthenticationFailedError(DocBridgeError):
    """Raised when the refresh-then-retry cycle could not authenticate."""


class ProviderOperationError(DocBridgeError):
    """Raised when a Drive call fails for a reason other than authentication."""

    operation = "perform Drive operation"

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to {self.operation}: {message}")


class UploadError(ProviderOperationError):
    operation = "upload file"


class ConversionError(ProviderOperationError):
    operation = "convert document"


class DeletionError(ProviderOperationError):
    operation = "delete file"


__all__ = [
    "AuthenticationFailedError",
    "ConversionError",
    "DeletionError",
    "DocBridgeError",
    "InvalidCredentialsError",
    "ProviderOperationError",
    "SessionNotInitializedError",
    "SourceNotFoundError",
    "UploadError",
]
