"""Google Drive service integration."""

from .client import GoogleDriveClient, GoogleDriveFolder
from .cli import app as gdrive_app

__all__ = [
    "GoogleDriveClient",
    "GoogleDriveFolder",
    "gdrive_app",
]
