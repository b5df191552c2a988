"""In-memory stand-ins for the Google OAuth and Drive clients."""

from __future__ import annotations

import asyncio
from typing import Optional

import httplib2
from googleapiclient.errors import HttpError

from docbridge.services.sessions import CredentialSession


def make_http_error(status: int, message: str = "Invalid Credentials") -> HttpError:
    resp = httplib2.Response({"status": status})
    content = f'{{"error": {{"code": {status}, "message": "{message}"}}}}'.encode("utf-8")
    return HttpError(resp, content, uri="https://www.googleapis.com/drive/v3/files")


class DummyOAuthClient:
    def __init__(self, *, error: Optional[Exception] = None, expires_in: int = 3600) -> None:
        self.error = error
        self.expires_in = expires_in
        self.calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def refresh_token(self, refresh_token: str) -> tuple[str, int]:
        self.calls.append(refresh_token)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return f"refreshed-access-{len(self.calls)}", self.expires_in


class FakeDrive:
    """Shared Drive state; each client records the token it was built with."""

    def __init__(self) -> None:
        self.files: dict[str, dict] = {}
        self.permissions: list[tuple[str, dict]] = []
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, list[Exception]] = {}
        self._next_id = 1

    def fail(self, method: str, *errors: Exception) -> None:
        self.failures.setdefault(method, []).extend(errors)

    def add_file(self, name: str, mime_type: str) -> dict:
        file_id = f"f{self._next_id}"
        self._next_id += 1
        record = {
            "id": file_id,
            "name": name,
            "mimeType": mime_type,
            "webViewLink": f"https://drive.example.com/file/d/{file_id}/view",
        }
        self.files[file_id] = record
        return record

    def record(self, method: str, token: str) -> None:
        self.calls.append((method, token))
        pending = self.failures.get(method)
        if pending:
            raise pending.pop(0)

    def calls_to(self, method: str) -> list[str]:
        return [token for name, token in self.calls if name == method]

    def client_factory(self, session: CredentialSession) -> "FakeDriveClient":
        return FakeDriveClient(self, session.access_token)


class FakeDriveClient:
    def __init__(self, drive: FakeDrive, token: str) -> None:
        self._drive = drive
        self.token = token

    async def upload_file(self, *, file_path: str, file_name: str, mime_type: str) -> dict:
        self._drive.record("upload_file", self.token)
        return dict(self._drive.add_file(file_name, mime_type))

    async def get_file_metadata(self, *, file_id: str) -> dict:
        self._drive.record("get_file_metadata", self.token)
        if file_id not in self._drive.files:
            raise make_http_error(404, "File not found")
        source = self._drive.files[file_id]
        return {"id": file_id, "name": source["name"], "mimeType": source["mimeType"]}

    async def copy_file(self, *, file_id: str, name: str, mime_type: str) -> dict:
        self._drive.record("copy_file", self.token)
        return dict(self._drive.add_file(name, mime_type))

    async def share_with_anyone(self, *, file_id: str, role: str = "writer") -> dict:
        self._drive.record("share_with_anyone", self.token)
        self._drive.permissions.append((file_id, {"role": role, "type": "anyone"}))
        return {"id": "anyoneWithLink"}

    async def delete_file(self, *, file_id: str) -> None:
        self._drive.record("delete_file", self.token)
        if self._drive.files.pop(file_id, None) is None:
            raise make_http_error(404, "File not found")
