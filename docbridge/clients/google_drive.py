"""Google Drive client wrapper."""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Sequence, TYPE_CHECKING

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from docbridge.services.sessions import CredentialSession

GOOGLE_DOCS_MIME_TYPE = "application/vnd.google-apps.document"

_FILE_FIELDS = "id,name,mimeType,webViewLink"


def is_auth_error(exc: BaseException) -> bool:
    """Return True when ``exc`` signals an invalid or expired access token."""
    if isinstance(exc, RefreshError):
        return True
    if isinstance(exc, HttpError):
        return exc.resp.status == 401
    for attr in ("status_code", "status", "code"):
        if getattr(exc, attr, None) == 401:
            return True
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None) == 401


class GoogleDriveClient:
    """Drive v3 calls on behalf of one user, bound to a single access token."""

    def __init__(self, credentials: Credentials, drive_root_folder_id: str | None = None) -> None:
        self._credentials = credentials
        self._drive_root_folder_id = drive_root_folder_id

    @classmethod
    def for_session(
        cls,
        session: "CredentialSession",
        drive_root_folder_id: str | None = None,
        scopes: Optional[Sequence[str]] = None,
    ) -> "GoogleDriveClient":
        """
        Build a client from a credential session.

        Only the access token is handed to google-auth so that token refresh
        stays with the session layer instead of happening silently inside
        the HTTP transport.
        """
        credentials = Credentials(
            token=session.access_token,
            scopes=list(scopes) if scopes else None,
        )
        return cls(credentials, drive_root_folder_id=drive_root_folder_id)

    def _service(self) -> Any:
        return build("drive", "v3", credentials=self._credentials, cache_discovery=False)

    async def upload_file(self, *, file_path: str, file_name: str, mime_type: str) -> dict:
        """Upload a local file and return its Drive metadata."""

        def _execute_upload() -> dict:
            file_metadata: dict[str, Any] = {"name": file_name}
            if self._drive_root_folder_id:
                file_metadata["parents"] = [self._drive_root_folder_id]

            media = MediaFileUpload(file_path, mimetype=mime_type, resumable=False)
            return (
                self._service()
                .files()
                .create(body=file_metadata, media_body=media, fields=_FILE_FIELDS)
                .execute()
            )

        return await asyncio.to_thread(_execute_upload)

    async def get_file_metadata(self, *, file_id: str) -> dict:
        """Fetch name and MIME type for a Drive file."""

        def _execute_metadata() -> dict:
            return self._service().files().get(fileId=file_id, fields="id,name,mimeType").execute()

        return await asyncio.to_thread(_execute_metadata)

    async def copy_file(self, *, file_id: str, name: str, mime_type: str) -> dict:
        """Copy a file, letting Drive convert it to ``mime_type``."""

        def _execute_copy() -> dict:
            return (
                self._service()
                .files()
                .copy(fileId=file_id, body={"name": name, "mimeType": mime_type}, fields=_FILE_FIELDS)
                .execute()
            )

        return await asyncio.to_thread(_execute_copy)

    async def share_with_anyone(self, *, file_id: str, role: str = "writer") -> dict:
        """Grant ``role`` to anyone holding the link."""

        def _execute_share() -> dict:
            return (
                self._service()
                .permissions()
                .create(fileId=file_id, body={"role": role, "type": "anyone"}, fields="id")
                .execute()
            )

        return await asyncio.to_thread(_execute_share)

    async def delete_file(self, *, file_id: str) -> None:
        """Remove a file from Drive."""

        def _execute_delete() -> None:
            self._service().files().delete(fileId=file_id).execute()

        await asyncio.to_thread(_execute_delete)


def drive_client_factory(
    drive_root_folder_id: Optional[str] = None,
    scopes: Optional[Sequence[str]] = None,
):
    """Return a session -> client factory for ``SessionRegistry``."""

    def _factory(session: "CredentialSession") -> GoogleDriveClient:
        return GoogleDriveClient.for_session(
            session, drive_root_folder_id=drive_root_folder_id, scopes=scopes
        )

    return _factory


__all__ = [
    "GOOGLE_DOCS_MIME_TYPE",
    "GoogleDriveClient",
    "drive_client_factory",
    "is_auth_error",
]
