"""Domain models and exceptions for Google Drive integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from driveimage.core.errors import PlatformFault

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class DriveError(PlatformFault):
    """Base error raised for Google Drive failures."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class DriveAuthError(DriveError):
    """Raised when authentication with Google Drive fails."""


class DriveNotFound(DriveError):
    """Raised when the requested resource cannot be located in Google Drive."""


class DriveRetryableError(DriveError):
    """Raised for retryable I/O issues (network/server errors)."""


class DriveRequestError(DriveError):
    """Raised for non-retryable HTTP or protocol errors from Google Drive."""


@dataclass(slots=True)
class DriveFile:
    """A Drive entry as returned by ``files.list``."""

    id: str
    name: str
    mime_type: str | None = None
    size: int | None = None
    modified_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE


__all__ = [
    "FOLDER_MIME_TYPE",
    "DriveError",
    "DriveAuthError",
    "DriveNotFound",
    "DriveRetryableError",
    "DriveRequestError",
    "DriveFile",
]
