"""
Logging utilities for the Drive session layer.

Provides a consistent logging format and a diagnostic logger that gates
info-level chatter behind a debug flag and scrubs secrets from payloads.
"""

import json
import logging
import sys
from typing import Any, Optional

from docbridge.core.redaction import redact

_LEVELS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


class DiagnosticLogger:
    """Tag messages with a component prefix and severity, redacting payloads."""

    def __init__(self, component: str, *, debug: bool = False, name: Optional[str] = None) -> None:
        self.component = component
        self.debug = debug
        self._logger = logging.getLogger(name or f"docbridge.{component}")

    def log(self, message: str, level: str = "info", data: Any = None) -> None:
        """Emit ``message`` at ``level`` (info, warn or error) with optional data."""
        if level not in _LEVELS:
            raise ValueError(f"Unsupported log level: {level}")
        if level == "info" and not self.debug:
            return

        levelno = _LEVELS[level]
        self._logger.log(levelno, "[%s][%s] %s", self.component, level.upper(), message)
        if data is not None:
            sanitized = redact(data)
            self._logger.log(
                levelno,
                "[%s][DATA] %s",
                self.component,
                json.dumps(sanitized, default=str),
            )

    def info(self, message: str, data: Any = None) -> None:
        self.log(message, "info", data)

    def warn(self, message: str, data: Any = None) -> None:
        self.log(message, "warn", data)

    def error(self, message: str, data: Any = None) -> None:
        self.log(message, "error", data)


__all__ = ["DiagnosticLogger", "configure_logging"]
