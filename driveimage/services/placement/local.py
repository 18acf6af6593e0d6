"""Image folder backed by a directory on disk."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

from driveimage.core.errors import PlatformFault

LOCAL_PREFIX = "local:"


def is_local_folder_id(folder_id: str) -> bool:
    return folder_id.strip().startswith(LOCAL_PREFIX)


class LocalFolder:
    """Directory whose files are matched by exact name (no recursion)."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()
        if not self.path.is_dir():
            raise PlatformFault(f"Local folder not found: {self.path}")

    @classmethod
    def from_folder_id(cls, folder_id: str) -> "LocalFolder":
        """Open a folder id of the form ``local:<path>``."""

        return cls(folder_id.strip()[len(LOCAL_PREFIX):])

    def find_by_name(self, name: str) -> Iterator[Path]:
        with os.scandir(self.path) as entries:
            matches = sorted(entry.path for entry in entries if entry.is_file() and entry.name == name)
        for match in matches:
            yield Path(match)

    def fetch(self, entry: Path) -> bytes:
        return entry.read_bytes()


__all__ = ["LOCAL_PREFIX", "LocalFolder", "is_local_folder_id"]
