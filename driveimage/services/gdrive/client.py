"""Primary client implementation for Google Drive."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

from driveimage.core.logger import get_logger

from .auth import AuthClient
from .config import GoogleDriveConfig, resolve_config
from .http import HttpClient
from .models import DriveFile, DriveNotFound, DriveRequestError
from .paths import ROOT_FOLDER, name_in_folder_query, normalize_folder_id
from .utils import ensure_directory, parse_datetime

LOGGER = get_logger()

FILE_FIELDS = "id,name,mimeType,size,modifiedTime"
LIST_FIELDS = f"nextPageToken,files({FILE_FIELDS})"


class GoogleDriveClient:
    """Read-only Drive v3 client: folder lookup, name search and download."""

    def __init__(
        self,
        config: GoogleDriveConfig,
        *,
        http_client: HttpClient | None = None,
        auth: AuthClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or LOGGER
        if http_client is None:
            self._http = HttpClient(config, auth_client=auth, logger=self._logger)
        else:
            self._http = http_client

    @classmethod
    def from_profile(cls, profile_name: str | None) -> "GoogleDriveClient":
        """Instantiate a client from ``profiles.yaml`` configuration plus env overrides."""

        config = resolve_config(profile_name)
        return cls(config)

    def get_file(self, file_id: str) -> DriveFile:
        """Fetch metadata for a file or folder."""

        response = self._http.request(
            "GET",
            f"/files/{normalize_folder_id(file_id)}",
            params={"fields": FILE_FIELDS, "supportsAllDrives": "true"},
        )
        payload = response.json()
        if not isinstance(payload, dict):
            raise DriveRequestError("Invalid metadata response", payload={"body": payload})
        return self._parse_item(payload)

    def resolve_folder(self, folder_id: str) -> DriveFile:
        """Return folder metadata, failing when the id does not point at a folder."""

        folder = self.get_file(folder_id)
        if normalize_folder_id(folder_id) != ROOT_FOLDER and not folder.is_folder:
            raise DriveNotFound(
                f"Drive item {folder_id} is not a folder",
                payload={"mimeType": folder.mime_type},
            )
        return folder

    def iter_by_name(self, folder_id: str, name: str) -> Iterator[DriveFile]:
        """Yield every non-trashed file named exactly ``name`` in ``folder_id``; folders are skipped.

        Entries are yielded in the order the API returns them, page by page.
        """

        params: dict[str, Any] = {
            "q": name_in_folder_query(name, folder_id),
            "fields": LIST_FIELDS,
            "pageSize": self._config.page_size,
            "spaces": "drive",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        while True:
            response = self._http.request("GET", "/files", params=params)
            data = response.json() if response.content else {}
            for raw in data.get("files") or []:
                if not isinstance(raw, dict):
                    continue
                item = self._parse_item(raw)
                if item.is_folder:
                    continue
                yield item
            page_token = data.get("nextPageToken")
            if not page_token:
                return
            params = {**params, "pageToken": page_token}

    def list_by_name(self, folder_id: str, name: str) -> list[DriveFile]:
        return list(self.iter_by_name(folder_id, name))

    def download_bytes(self, file_id: str) -> bytes:
        """Download file content into memory."""

        response = self._http.request(
            "GET",
            f"/files/{file_id}",
            params={"alt": "media", "supportsAllDrives": "true"},
        )
        content = response.content
        self._logger.debug("gdrive.client downloaded file_id=%s bytes=%d", file_id, len(content))
        return content

    def download_file(self, file_id: str, dest_path: str) -> str:
        """Download the specified file to ``dest_path`` and return the written path."""

        destination = Path(dest_path).expanduser()
        if destination.exists() and destination.is_dir():
            destination = destination / self.get_file(file_id).name
        ensure_directory(destination)
        destination.write_bytes(self.download_bytes(file_id))
        return str(destination)

    def close(self) -> None:
        """Release the underlying HTTP session."""

        self._http.session.close()

    # Internal helpers -------------------------------------------------

    def _parse_item(self, raw: dict[str, Any]) -> DriveFile:
        size = raw.get("size")
        return DriveFile(
            id=str(raw.get("id", "")),
            name=str(raw.get("name", "")),
            mime_type=raw.get("mimeType"),
            size=int(size) if size not in (None, "") else None,
            modified_at=parse_datetime(raw.get("modifiedTime")),
            extra=raw,
        )


class GoogleDriveFolder:
    """Image folder backed by a Drive folder id (``root`` selects My Drive)."""

    def __init__(self, client: GoogleDriveClient, folder_id: str) -> None:
        self._client = client
        self.folder_id = normalize_folder_id(folder_id)

    @classmethod
    def open(cls, client: GoogleDriveClient, folder_id: str) -> "GoogleDriveFolder":
        """Verify the folder exists before returning a handle to it."""

        folder = client.resolve_folder(folder_id)
        LOGGER.info("gdrive.folder opened folder_id=%s name=%s", folder_id, folder.name)
        return cls(client, folder_id)

    def find_by_name(self, name: str) -> Iterator[DriveFile]:
        return self._client.iter_by_name(self.folder_id, name)

    def fetch(self, entry: DriveFile) -> bytes:
        return self._client.download_bytes(entry.id)

    def close(self) -> None:
        self._client.close()


__all__ = ["GoogleDriveClient", "GoogleDriveFolder"]
