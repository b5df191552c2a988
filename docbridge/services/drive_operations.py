"""
Upload, convert and delete documents in a user's Google Drive.

Every operation runs through one auth-retry policy: refresh proactively,
call, and on a 401-class failure force a single refresh and retry once.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

from docbridge.clients.google_drive import GOOGLE_DOCS_MIME_TYPE, is_auth_error
from docbridge.core.errors import (
    AuthenticationFailedError,
    ConversionError,
    DeletionError,
    ProviderOperationError,
    SessionNotInitializedError,
    SourceNotFoundError,
    UploadError,
)
from docbridge.core.logging import DiagnosticLogger
from docbridge.schemas.drive import RemoteFile
from docbridge.services.sessions import SessionRegistry
from docbridge.services.token_refresh import TokenRefreshGuard
from docbridge.utils.files import get_mime_type

T = TypeVar("T")

_VIEW_SUFFIX = "/view"
_EDIT_SUFFIX = "/edit"


def derive_edit_url(view_url: str) -> str:
    """Swap a trailing ``/view`` segment for ``/edit``; other URLs pass through."""
    if view_url.endswith(_VIEW_SUFFIX):
        return view_url[: -len(_VIEW_SUFFIX)] + _EDIT_SUFFIX
    return view_url


class DriveOperationsService:
    """Run Drive operations for a user with token refresh and a single auth retry."""

    EDITABLE_SUFFIX = " (Editable)"

    def __init__(
        self,
        registry: SessionRegistry,
        refresh_guard: TokenRefreshGuard,
        *,
        logger: Optional[DiagnosticLogger] = None,
    ) -> None:
        self._registry = registry
        self._guard = refresh_guard
        self._logger = logger or DiagnosticLogger("DriveOperations")

    async def upload_file(
        self,
        user_id: str,
        file_path: str,
        file_name: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> RemoteFile:
        """Upload a local file to the user's Drive."""
        if not os.path.isfile(file_path):
            self._logger.error(f"File not found: {file_path}", {"user_id": user_id})
            raise SourceNotFoundError(file_path)

        name = file_name or Path(file_path).name
        content_type = mime_type or get_mime_type(name)
        self._logger.info(f"Uploading file for user {user_id}: {name} ({content_type})")

        async def _upload(client: Any) -> dict:
            return await client.upload_file(
                file_path=file_path, file_name=name, mime_type=content_type
            )

        created = await self._execute_with_auth_retry(
            user_id,
            action="upload",
            error_cls=UploadError,
            call=_upload,
            context={"file_name": name, "mime_type": content_type, "file_path": file_path},
        )
        self._logger.info(f"File uploaded successfully. File ID: {created.get('id')}")
        return RemoteFile.model_validate(created)

    async def convert_to_editable_format(self, user_id: str, file_id: str) -> RemoteFile:
        """Copy a Drive file into Google Docs format and open it for editing."""
        self._logger.info(
            f"Converting file to Google Docs format. User: {user_id}, File ID: {file_id}"
        )

        async def _convert(client: Any) -> dict:
            source = await client.get_file_metadata(file_id=file_id)
            self._logger.info(
                f"File info: name={source.get('name')}, mimeType={source.get('mimeType')}"
            )
            copied = await client.copy_file(
                file_id=file_id,
                name=f"{source.get('name') or file_id}{self.EDITABLE_SUFFIX}",
                mime_type=GOOGLE_DOCS_MIME_TYPE,
            )
            await client.share_with_anyone(file_id=copied["id"], role="writer")
            self._logger.info(f"Permissions set for converted file: {copied['id']}")
            return copied

        copied = await self._execute_with_auth_retry(
            user_id,
            action="conversion",
            error_cls=ConversionError,
            call=_convert,
            context={"file_id": file_id},
        )
        converted = RemoteFile.model_validate(copied)
        if converted.view_url:
            converted.edit_url = derive_edit_url(converted.view_url)
        self._logger.info(f"File converted successfully. New file ID: {converted.id}")
        return converted

    async def delete_file(self, user_id: str, file_id: str) -> bool:
        """Remove a file from the user's Drive."""
        self._logger.info(f"Deleting file. User: {user_id}, File ID: {file_id}")

        async def _delete(client: Any) -> bool:
            await client.delete_file(file_id=file_id)
            return True

        deleted = await self._execute_with_auth_retry(
            user_id,
            action="deletion",
            error_cls=DeletionError,
            call=_delete,
            context={"file_id": file_id},
        )
        self._logger.info(f"File deleted successfully: {file_id}")
        return deleted

    async def upload_and_convert(
        self,
        user_id: str,
        file_path: str,
        file_name: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> RemoteFile:
        """Upload a local document and return its editable Google Docs copy."""
        uploaded = await self.upload_file(
            user_id, file_path, file_name=file_name, mime_type=mime_type
        )
        return await self.convert_to_editable_format(user_id, uploaded.id)

    async def _execute_with_auth_retry(
        self,
        user_id: str,
        *,
        action: str,
        error_cls: type[ProviderOperationError],
        call: Callable[[Any], Awaitable[T]],
        context: Optional[dict] = None,
    ) -> T:
        request = {"user_id": user_id, **(context or {})}
        await self._guard.refresh_if_needed(user_id)

        client = self._resolve_client(user_id)
        try:
            return await call(client)
        except Exception as exc:  # pylint: disable=broad-except
            if not is_auth_error(exc):
                self._fail(action, exc, request)
                raise error_cls(str(exc)) from exc
            first_error = exc

        self._logger.warn(
            f"Authentication error during {action}, attempting token refresh and retry",
            {"error": first_error, "request": request},
        )
        if not await self._guard.refresh_if_needed(user_id, force=True):
            reason = "Unable to refresh token"
            refresh_failure = self._guard.last_failure(user_id)
            if refresh_failure:
                reason = f"{reason} ({refresh_failure})"
            message = f"Authentication failed during {action}: {reason}: {first_error}"
            self._logger.error(message, {"request": request})
            raise AuthenticationFailedError(message) from first_error

        self._logger.info(f"Token refreshed, retrying {action}")
        retry_client = self._resolve_client(user_id)
        try:
            return await call(retry_client)
        except Exception as exc:  # pylint: disable=broad-except
            if is_auth_error(exc):
                message = f"Authentication failed during {action}: {exc}"
                self._logger.error(message, {"error": exc, "request": request})
                raise AuthenticationFailedError(message) from exc
            self._fail(action, exc, request)
            raise error_cls(str(exc)) from exc

    def _resolve_client(self, user_id: str) -> Any:
        client = self._registry.get_client(user_id)
        if client is None:
            self._logger.error(f"Drive client not initialized for user: {user_id}")
            raise SessionNotInitializedError(user_id)
        return client

    def _fail(self, action: str, exc: Exception, request: dict) -> None:
        self._logger.error(
            f"Drive {action} failed: {exc}", {"error": exc, "request": request}
        )


__all__ = ["DriveOperationsService", "derive_edit_url"]
