"""Helpers for local document files headed to Drive."""

from __future__ import annotations

from pathlib import Path

_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
    ".txt": "text/plain",
    ".rtf": "application/rtf",
    ".odt": "application/vnd.oasis.opendocument.text",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(filename: str) -> str:
    """Map a document filename to the MIME type Drive expects."""
    return _MIME_TYPES.get(Path(filename).suffix.lower(), DEFAULT_MIME_TYPE)


__all__ = ["DEFAULT_MIME_TYPE", "get_mime_type"]
