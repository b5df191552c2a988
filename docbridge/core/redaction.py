"""Scrub secrets from structured log payloads."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any, Iterable

from pydantic import BaseModel

REDACTED = "[REDACTED]"

_IMMUTABLE_SCALARS = (str, bytes, int, float, bool, type(None), date, timedelta)

SENSITIVE_FIELDS = frozenset(
    {
        "access_token",
        "refresh_token",
        "id_token",
        "token",
        "client_secret",
        "authorization",
        "password",
    }
)


def _normalize_key(key: Any) -> str:
    """Map ``accessToken``, ``access-token`` and ``ACCESS_TOKEN`` to one form."""
    return str(key).replace("_", "").replace("-", "").lower()


def redact(value: Any, sensitive_fields: Iterable[str] = SENSITIVE_FIELDS) -> Any:
    """
    Return a deep copy of ``value`` with secret-bearing fields replaced.

    Mappings, sequences, pydantic models and dataclasses are walked
    recursively so nested credential objects are scrubbed too. The input is
    never mutated.
    """
    fields = frozenset(_normalize_key(name) for name in sensitive_fields)
    return _redact(value, fields)


def _redact(value: Any, fields: frozenset[str]) -> Any:
    if isinstance(value, BaseModel):
        return _redact(value.model_dump(), fields)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _redact(dataclasses.asdict(value), fields)
    if isinstance(value, Mapping):
        cleaned = {}
        for key, item in value.items():
            if _normalize_key(key) in fields and item:
                cleaned[key] = REDACTED
            else:
                cleaned[key] = _redact(item, fields)
        return cleaned
    if isinstance(value, tuple):
        return tuple(_redact(item, fields) for item in value)
    if isinstance(value, (list, set, frozenset)):
        return type(value)([_redact(item, fields) for item in value])
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if isinstance(value, _IMMUTABLE_SCALARS):
        return value
    return str(value)


__all__ = ["REDACTED", "SENSITIVE_FIELDS", "redact"]
