"""
Per-user registry of delegated Google Drive credential sessions.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from docbridge.core.errors import InvalidCredentialsError
from docbridge.core.logging import DiagnosticLogger
from docbridge.schemas.drive import SessionCredentials


@dataclass
class CredentialSession:
    """Access/refresh token pair and expiry for one user."""

    user_id: str
    access_token: str = field(repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
    expiry: Optional[datetime] = None

    def expires_within(self, window: timedelta, *, now: Optional[datetime] = None) -> bool:
        """Return True when the expiry is unknown or falls inside ``window``."""
        if self.expiry is None:
            return True
        current = now or datetime.now(timezone.utc)
        return self.expiry - current < window


ClientFactory = Callable[[CredentialSession], Any]
CredentialsInput = Union[SessionCredentials, Mapping[str, Any]]


class SessionRegistry:
    """Own the session map and the set of users with a refresh in flight."""

    _DEFAULT_TOKEN_LIFETIME = timedelta(hours=1)

    def __init__(
        self,
        client_factory: ClientFactory,
        *,
        logger: Optional[DiagnosticLogger] = None,
        default_token_lifetime: timedelta = _DEFAULT_TOKEN_LIFETIME,
    ) -> None:
        self._client_factory = client_factory
        self._logger = logger or DiagnosticLogger("SessionRegistry")
        self._default_token_lifetime = default_token_lifetime
        self._sessions: dict[str, CredentialSession] = {}
        self._refreshing: set[str] = set()

    def init_session(
        self,
        user_id: str,
        credentials: CredentialsInput,
        *,
        preserve_refresh_token: bool = False,
    ) -> CredentialSession:
        """Create or replace the session for ``user_id``."""
        self._logger.info(f"Initializing Drive session for user: {user_id}")
        if not isinstance(credentials, SessionCredentials):
            try:
                credentials = SessionCredentials.model_validate(dict(credentials or {}))
            except ValidationError as exc:
                self._logger.error(
                    "Invalid credentials payload", {"user_id": user_id, "error": exc}
                )
                raise InvalidCredentialsError(
                    "Invalid credentials: accessToken is required"
                ) from exc

        access_token = credentials.access_token
        if not isinstance(access_token, str) or not access_token.strip():
            message = "Invalid credentials: accessToken is required"
            self._logger.error(message, {"user_id": user_id, "credentials": credentials})
            raise InvalidCredentialsError(message)

        refresh_token = credentials.refresh_token
        previous = self._sessions.get(user_id)
        if preserve_refresh_token and not refresh_token and previous is not None:
            refresh_token = previous.refresh_token

        expiry = credentials.expiry_date
        if expiry is None:
            # Real lifetime unknown; assume the configured default.
            expiry = datetime.now(timezone.utc) + self._default_token_lifetime
        elif expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)

        session = CredentialSession(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            expiry=expiry,
        )
        self._sessions[user_id] = session
        self._logger.info(
            f"Drive session stored for user: {user_id}",
            {
                "access_token": session.access_token,
                "refresh_token": session.refresh_token,
                "has_refresh_token": bool(session.refresh_token),
                "expiry": session.expiry,
            },
        )
        return session

    def get_session(self, user_id: str) -> Optional[CredentialSession]:
        session = self._sessions.get(user_id)
        if session is None:
            self._logger.warn(f"No Drive session found for user: {user_id}")
        return session

    def get_client(self, user_id: str) -> Any:
        """Build a Drive client bound to the session's current access token."""
        session = self.get_session(user_id)
        if session is None:
            return None
        return self._client_factory(session)

    def update_tokens(self, user_id: str, *, access_token: str, expiry: datetime) -> bool:
        """Swap in a refreshed access token; False if the session is gone."""
        session = self._sessions.get(user_id)
        if session is None:
            return False
        session.access_token = access_token
        session.expiry = expiry
        return True

    def remove_session(self, user_id: str) -> bool:
        self._refreshing.discard(user_id)
        return self._sessions.pop(user_id, None) is not None

    def try_begin_refresh(self, user_id: str) -> bool:
        """Mark a refresh in flight; False when one is already running."""
        if user_id in self._refreshing:
            return False
        self._refreshing.add(user_id)
        return True

    def end_refresh(self, user_id: str) -> None:
        self._refreshing.discard(user_id)

    def is_refreshing(self, user_id: str) -> bool:
        return user_id in self._refreshing

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = ["ClientFactory", "CredentialSession", "SessionRegistry"]
