try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import pytest

from docbridge.clients.google_auth import OAuthTokenExchangeError
from docbridge.core.logging import DiagnosticLogger
from docbridge.services.sessions import SessionRegistry
from docbridge.services.token_refresh import TokenRefreshGuard

try:
    from ._fakes import DummyOAuthClient, FakeDrive
except ImportError:  # pragma: no cover - rootdir-relative collection
    from _fakes import DummyOAuthClient, FakeDrive  # type: ignore


def _build(oauth_client: DummyOAuthClient) -> tuple[SessionRegistry, TokenRefreshGuard]:
    registry = SessionRegistry(FakeDrive().client_factory)
    guard = TokenRefreshGuard(
        registry, oauth_client, logger=DiagnosticLogger("TokenRefreshGuard", debug=True)
    )
    return registry, guard


def _expiring() -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=2)


@pytest.mark.asyncio
async def test_no_session_returns_false() -> None:
    oauth_client = DummyOAuthClient()
    _, guard = _build(oauth_client)

    assert await guard.refresh_if_needed("unknown") is False
    assert oauth_client.calls == []


@pytest.mark.asyncio
async def test_no_refresh_token_returns_false_even_without_expiry() -> None:
    oauth_client = DummyOAuthClient()
    registry, guard = _build(oauth_client)
    registry.init_session("user-1", {"accessToken": "tok1"})
    registry.get_session("user-1").expiry = None

    assert await guard.refresh_if_needed("user-1") is False
    assert await guard.refresh_if_needed("user-1", force=True) is False
    assert oauth_client.calls == []


@pytest.mark.asyncio
async def test_fresh_token_skips_network_call() -> None:
    oauth_client = DummyOAuthClient()
    registry, guard = _build(oauth_client)
    registry.init_session(
        "user-1",
        {
            "accessToken": "tok1",
            "refreshToken": "r1",
            "expiryDate": datetime.now(timezone.utc) + timedelta(minutes=30),
        },
    )

    assert await guard.refresh_if_needed("user-1") is False
    assert oauth_client.calls == []
    assert registry.get_session("user-1").access_token == "tok1"


@pytest.mark.asyncio
async def test_expiring_token_is_refreshed_and_stored() -> None:
    oauth_client = DummyOAuthClient(expires_in=1800)
    registry, guard = _build(oauth_client)
    registry.init_session(
        "user-1", {"accessToken": "tok1", "refreshToken": "r1", "expiryDate": _expiring()}
    )

    assert await guard.refresh_if_needed("user-1") is True

    session = registry.get_session("user-1")
    assert oauth_client.calls == ["r1"]
    assert session.access_token == "refreshed-access-1"
    assert session.refresh_token == "r1"
    assert session.expiry > datetime.now(timezone.utc) + timedelta(minutes=29)
    assert registry.is_refreshing("user-1") is False


@pytest.mark.asyncio
async def test_force_refreshes_a_fresh_token() -> None:
    oauth_client = DummyOAuthClient()
    registry, guard = _build(oauth_client)
    registry.init_session("user-1", {"accessToken": "tok1", "refreshToken": "r1"})

    assert await guard.refresh_if_needed("user-1") is False
    assert await guard.refresh_if_needed("user-1", force=True) is True
    assert oauth_client.calls == ["r1"]


@pytest.mark.asyncio
async def test_concurrent_refresh_for_same_user_is_skipped() -> None:
    oauth_client = DummyOAuthClient()
    oauth_client.gate = asyncio.Event()
    registry, guard = _build(oauth_client)
    registry.init_session(
        "user-1", {"accessToken": "tok1", "refreshToken": "r1", "expiryDate": _expiring()}
    )

    first = asyncio.create_task(guard.refresh_if_needed("user-1"))
    await asyncio.sleep(0)
    assert registry.is_refreshing("user-1") is True

    second = await guard.refresh_if_needed("user-1", force=True)
    oauth_client.gate.set()

    assert second is False
    assert await first is True
    assert oauth_client.calls == ["r1"]
    assert registry.is_refreshing("user-1") is False


@pytest.mark.asyncio
async def test_concurrent_refresh_for_other_users_is_independent() -> None:
    oauth_client = DummyOAuthClient()
    registry, guard = _build(oauth_client)
    for user_id in ("user-1", "user-2"):
        registry.init_session(
            user_id, {"accessToken": "tok", "refreshToken": f"r-{user_id}", "expiryDate": _expiring()}
        )

    results = await asyncio.gather(
        guard.refresh_if_needed("user-1"), guard.refresh_if_needed("user-2")
    )

    assert results == [True, True]
    assert sorted(oauth_client.calls) == ["r-user-1", "r-user-2"]


@pytest.mark.asyncio
async def test_refresh_failure_is_downgraded_and_unlocks(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    oauth_client = DummyOAuthClient(error=OAuthTokenExchangeError("invalid_grant"))
    registry, guard = _build(oauth_client)
    registry.init_session(
        "user-1",
        {"accessToken": "secret-access", "refreshToken": "secret-refresh", "expiryDate": _expiring()},
    )

    assert await guard.refresh_if_needed("user-1") is False

    assert registry.is_refreshing("user-1") is False
    assert registry.get_session("user-1").access_token == "secret-access"
    assert guard.last_failure("user-1") == "invalid_grant"
    assert "Failed to refresh token for user: user-1" in caplog.text
    assert "secret-refresh" not in caplog.text
    assert "secret-access" not in caplog.text


@pytest.mark.asyncio
async def test_successful_refresh_clears_last_failure() -> None:
    oauth_client = DummyOAuthClient(error=OAuthTokenExchangeError("temporarily_unavailable"))
    registry, guard = _build(oauth_client)
    registry.init_session("user-1", {"accessToken": "tok1", "refreshToken": "r1"})

    assert await guard.refresh_if_needed("user-1", force=True) is False
    oauth_client.error = None
    assert await guard.refresh_if_needed("user-1", force=True) is True

    assert guard.last_failure("user-1") is None
