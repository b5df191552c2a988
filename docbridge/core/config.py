"""
Application configuration models and helpers.

Centralizes settings for the Drive session layer so the services, the
composition root and the environment check script share one surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class GoogleSettings(BaseSettings):
    """Configuration required for interacting with Google APIs."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    client_id: str = Field(..., alias="GOOGLE_CLIENT_ID")
    client_secret: str = Field(..., alias="GOOGLE_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., alias="GOOGLE_REDIRECT_URI")
    drive_root_folder_id: Optional[str] = Field(
        None,
        alias="GOOGLE_DRIVE_ROOT_FOLDER_ID",
        description="Optional parent folder for uploaded documents.",
    )


class SessionSettings(BaseSettings):
    """Token lifetime and refresh policy for per-user Drive sessions."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    refresh_window_seconds: int = Field(
        300,
        alias="TOKEN_REFRESH_WINDOW_SECONDS",
        description="Tokens expiring within this window are refreshed before use.",
    )
    default_token_lifetime_seconds: int = Field(
        3600,
        alias="DEFAULT_TOKEN_LIFETIME_SECONDS",
        description=(
            "Assumed lifetime for access tokens supplied without an expiry."
        ),
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        (
            "https://www.googleapis.com/auth/drive.file",
            "https://www.googleapis.com/auth/userinfo.email",
            "openid",
        ),
        alias="OAUTH_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class AppSettings(BaseSettings):
    """Root settings object for the document bridge."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    debug_mode: bool = Field(
        False,
        alias="DEBUG_MODE",
        description="Emit info-level diagnostics from the Drive session layer.",
    )
    sessions: SessionSettings = Field(default_factory=SessionSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GoogleSettings",
    "SessionSettings",
    "get_settings",
]
