"""Small helpers shared by the Google Drive client."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path


def ensure_directory(dest_path: str | os.PathLike[str]) -> None:
    """Create the parent directory of ``dest_path`` if missing."""

    Path(dest_path).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a Drive ``modifiedTime`` such as ``2024-05-01T09:30:12.345Z`` into an aware datetime.

    Unparseable values yield ``None``; the timestamp is informational only.
    """

    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


__all__ = ["ensure_directory", "parse_datetime"]
