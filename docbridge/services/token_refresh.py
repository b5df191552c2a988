"""
Keep per-user Drive access tokens fresh with at most one refresh in flight.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from docbridge.core.logging import DiagnosticLogger
from docbridge.services.sessions import SessionRegistry


class TokenRefresher(Protocol):
    async def refresh_token(self, refresh_token: str) -> tuple[str, int]: ...


class TokenRefreshGuard:
    """Refresh expiring tokens, skipping users whose refresh is already running."""

    _REFRESH_WINDOW = timedelta(minutes=5)

    def __init__(
        self,
        registry: SessionRegistry,
        oauth_client: TokenRefresher,
        *,
        logger: Optional[DiagnosticLogger] = None,
        refresh_window: timedelta = _REFRESH_WINDOW,
    ) -> None:
        self._registry = registry
        self._oauth = oauth_client
        self._logger = logger or DiagnosticLogger("TokenRefreshGuard")
        self._refresh_window = refresh_window
        self._last_failures: dict[str, str] = {}

    def last_failure(self, user_id: str) -> Optional[str]:
        """Message of the most recent failed refresh for ``user_id``, if any."""
        return self._last_failures.get(user_id)

    async def refresh_if_needed(self, user_id: str, *, force: bool = False) -> bool:
        """
        Refresh the user's access token when it is missing an expiry or about
        to expire. ``force`` skips the expiry check, e.g. after a 401.

        Returns True only when a refresh actually happened. Failures are
        logged and reported as False so the caller can still attempt its call.
        """
        session = self._registry.get_session(user_id)
        if session is None:
            return False

        if not session.refresh_token:
            self._logger.warn(f"No refresh token available for user: {user_id}")
            return False

        if not force and not session.expires_within(self._refresh_window):
            return False

        # Check-then-set must not straddle an await.
        if not self._registry.try_begin_refresh(user_id):
            self._logger.info(f"Token refresh already in progress for user: {user_id}")
            return False

        try:
            self._logger.info(f"Refreshing access token for user: {user_id}")
            refreshed_at = datetime.now(timezone.utc)
            access_token, expires_in = await self._oauth.refresh_token(session.refresh_token)
            expiry = refreshed_at + timedelta(seconds=expires_in)
            if not self._registry.update_tokens(user_id, access_token=access_token, expiry=expiry):
                self._logger.warn(f"Session removed during token refresh for user: {user_id}")
                return False
            self._last_failures.pop(user_id, None)
            self._logger.info(
                f"Token refreshed successfully for user: {user_id}",
                {"access_token": access_token, "expiry": expiry},
            )
            return True
        except Exception as exc:  # pylint: disable=broad-except
            self._last_failures[user_id] = str(exc)
            self._logger.error(
                f"Failed to refresh token for user: {user_id}",
                {"error": exc, "refresh_token": session.refresh_token},
            )
            return False
        finally:
            self._registry.end_refresh(user_id)


__all__ = ["TokenRefreshGuard", "TokenRefresher"]
