"""Public schema exports."""

from .drive import RemoteFile, SessionCredentials

__all__ = ["RemoteFile", "SessionCredentials"]
