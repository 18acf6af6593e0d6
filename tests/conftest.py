from __future__ import annotations

import faulthandler
import io
import logging
import socket
import sys
from pathlib import Path
from typing import Any, Iterable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

faulthandler.enable()  # Ensure crashes emit tracebacks.
socket.setdefaulttimeout(10)

from PIL import Image as PILImage

import driveimage.core.logger as core_logger
from driveimage.services.placement.base import CellRange, ImageBlob


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep log files out of the project workspace."""

    app_logger = logging.getLogger("driveimage")
    app_logger.handlers.clear()
    monkeypatch.setattr(core_logger, "_work_dir", lambda: tmp_path / "work")
    monkeypatch.setattr(core_logger, "_LOGGER", None, raising=False)
    yield
    for handler in list(app_logger.handlers):
        handler.close()
    app_logger.handlers.clear()


def make_png(width: int, height: int, color: str = "red") -> bytes:
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeImage:
    def __init__(self, name: str, height: float, width: float, column: int, row: int) -> None:
        self.name = name
        self.height = height
        self.width = width
        self.column = column
        self.row = row
        self.x_offset = 0
        self.natural = (height, width)

    def resize(self, height: float, width: float) -> None:
        self.height = height
        self.width = width

    def set_x_offset(self, pixels: int) -> None:
        self.x_offset = pixels


class FakeSheet:
    """In-memory sheet: a dict of cell values plus per-row/column pixel sizes."""

    def __init__(
        self,
        cells: dict[tuple[int, int], Any] | None = None,
        *,
        row_heights: dict[int, float] | None = None,
        column_widths: dict[int, float] | None = None,
        image_sizes: dict[str, tuple[float, float]] | None = None,
    ) -> None:
        self.cells = dict(cells or {})
        self.row_heights = dict(row_heights or {})
        self.column_widths = dict(column_widths or {})
        self.image_sizes = dict(image_sizes or {})
        self.images: list[FakeImage] = []

    def values(self, cell_range: CellRange) -> list[list[Any]]:
        return [
            [self.cells.get((r, c)) for c in range(cell_range.column, cell_range.last_column + 1)]
            for r in range(cell_range.row, cell_range.last_row + 1)
        ]

    def is_blank(self, cell_range: CellRange) -> bool:
        return all(self.cells.get(cell) in (None, "") for cell in cell_range.cells())

    def row_height_px(self, row: int) -> float:
        return self.row_heights.get(row, 21)

    def column_width_px(self, column: int) -> float:
        return self.column_widths.get(column, 100)

    def insert_image(self, blob: ImageBlob, column: int, row: int) -> FakeImage:
        height, width = self.image_sizes.get(blob.data.decode("utf-8"), (50, 50))
        image = FakeImage(blob.name, height, width, column, row)
        self.images.append(image)
        return image


class FakeFolder:
    """Folder whose entries are ``(name, payload)`` pairs enumerated in list order."""

    def __init__(self, entries: Iterable[tuple[str, str]]) -> None:
        self.entries = list(entries)
        self.fetched: list[str] = []
        self.closed = False

    def find_by_name(self, name: str):
        for entry_name, payload in self.entries:
            if entry_name == name:
                yield (entry_name, payload)

    def fetch(self, entry: tuple[str, str]) -> bytes:
        self.fetched.append(entry[1])
        return entry[1].encode("utf-8")

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def png_bytes():
    return make_png
