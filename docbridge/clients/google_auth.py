"""
Google OAuth utilities.

Exchanges stored refresh tokens for fresh access tokens.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Tuple

import httpx

from docbridge.core.config import GoogleSettings


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class GoogleOAuthClient:
    """Talk to the Google OAuth token endpoint."""

    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(self, google_settings: GoogleSettings, *, timeout: float = 10.0) -> None:
        self._google = google_settings
        self._timeout = timeout

    async def refresh_token(self, refresh_token: str) -> Tuple[str, int]:
        """
        Refresh the access token using a stored refresh token.

        Returns a tuple of (access_token, expires_in_seconds).
        """
        payload = {
            "client_id": self._google.client_id,
            "client_secret": self._google.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self.TOKEN_URL, data=payload)
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code != HTTPStatus.OK:
            raise OAuthTokenExchangeError(response.text)

        token_payload = response.json()
        access_token = token_payload.get("access_token")
        expires_in = token_payload.get("expires_in")

        if not access_token or not expires_in:
            raise OAuthTokenExchangeError("Incomplete refresh payload returned from Google.")

        return access_token, int(expires_in)


__all__ = ["GoogleOAuthClient", "OAuthTokenExchangeError"]
