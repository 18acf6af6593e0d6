"""Helpers for Google Drive identifiers and search queries."""

from __future__ import annotations

from .models import FOLDER_MIME_TYPE

ROOT_FOLDER = "root"
ROOT_ALIASES = {"root", "ROOT", "/", ""}


def normalize_folder_id(folder_id: str | None) -> str:
    """Translate a user provided folder reference into a Drive id (``root`` sentinel kept)."""

    if folder_id is None:
        return ROOT_FOLDER
    folder = folder_id.strip()
    if folder in ROOT_ALIASES:
        return ROOT_FOLDER
    return folder


def escape_query_value(value: str) -> str:
    """Escape a literal for use inside single quotes in a ``files.list`` query."""

    return value.replace("\\", "\\\\").replace("'", "\\'")


def name_in_folder_query(name: str, folder_id: str) -> str:
    """Build the query matching non-trashed files (never folders) named exactly ``name`` under ``folder_id``."""

    return (
        f"name = '{escape_query_value(name)}' "
        f"and '{escape_query_value(normalize_folder_id(folder_id))}' in parents "
        "and trashed = false "
        f"and mimeType != '{FOLDER_MIME_TYPE}'"
    )


__all__ = ["ROOT_FOLDER", "normalize_folder_id", "escape_query_value", "name_in_folder_query"]
