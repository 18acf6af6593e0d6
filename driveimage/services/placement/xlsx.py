"""openpyxl-backed spreadsheet surface."""

from __future__ import annotations

import io
import math
import os
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, OneCellAnchor
from openpyxl.drawing.xdr import XDRPositiveSize2D
from openpyxl.utils.cell import column_index_from_string
from openpyxl.utils.units import DEFAULT_COLUMN_WIDTH, pixels_to_EMU
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.dimensions import ColumnDimension
from openpyxl.worksheet.worksheet import Worksheet

from driveimage.core.errors import PlatformFault
from driveimage.core.logger import get_logger

from .base import CellRange, ImageBlob

LOGGER = get_logger()

DEFAULT_ROW_HEIGHT_PT = 15.0
DEFAULT_COLUMN_WIDTH_PX = 64
# Excel's maximum digit width for the default Calibri 11 font
MAX_DIGIT_WIDTH_PX = 7


def points_to_px(points: float) -> float:
    return points * 96 / 72


def width_to_px(width: float) -> int:
    """Convert a stored column width (characters) to pixels."""

    return math.trunc(((256 * width + math.trunc(128 / MAX_DIGIT_WIDTH_PX)) / 256) * MAX_DIGIT_WIDTH_PX)


def _has_own_width(dimension: ColumnDimension) -> bool:
    # openpyxl fills a <col> without a width attribute (style only) with DEFAULT_COLUMN_WIDTH
    # and derives customWidth from it, so that value cannot be told apart from "unset".
    return bool(dimension.customWidth) and dimension.width != DEFAULT_COLUMN_WIDTH


class XlsxImage:
    """An image anchored to one cell; keeps the drawing anchor in sync with size/offset."""

    def __init__(self, image: XLImage, name: str, column: int, row: int) -> None:
        self._image = image
        self.name = name
        self.column = column
        self.row = row
        self.x_offset = 0
        self._sync_anchor()

    @property
    def image(self) -> XLImage:
        return self._image

    @property
    def height(self) -> float:
        return self._image.height

    @property
    def width(self) -> float:
        return self._image.width

    def resize(self, height: float, width: float) -> None:
        self._image.height = height
        self._image.width = width
        self._sync_anchor()

    def set_x_offset(self, pixels: int) -> None:
        self.x_offset = pixels
        self._sync_anchor()

    def _sync_anchor(self) -> None:
        marker = AnchorMarker(
            col=self.column - 1,
            colOff=pixels_to_EMU(self.x_offset),
            row=self.row - 1,
            rowOff=0,
        )
        size = XDRPositiveSize2D(pixels_to_EMU(self._image.width), pixels_to_EMU(self._image.height))
        self._image.anchor = OneCellAnchor(_from=marker, ext=size)


class XlsxSheet:
    """Spreadsheet surface over an openpyxl worksheet."""

    def __init__(self, worksheet: Worksheet) -> None:
        self._ws = worksheet
        self.images: list[XlsxImage] = []

    @property
    def worksheet(self) -> Worksheet:
        return self._ws

    @property
    def title(self) -> str:
        return self._ws.title

    def values(self, cell_range: CellRange) -> list[list[Any]]:
        return [
            list(row)
            for row in self._ws.iter_rows(
                min_row=cell_range.row,
                max_row=cell_range.last_row,
                min_col=cell_range.column,
                max_col=cell_range.last_column,
                values_only=True,
            )
        ]

    def is_blank(self, cell_range: CellRange) -> bool:
        for row in self.values(cell_range):
            for value in row:
                if value is not None and value != "":
                    return False
        return True

    def row_height_px(self, row: int) -> float:
        height = None
        if row in self._ws.row_dimensions:
            height = self._ws.row_dimensions[row].height
        if height is None:
            height = self._ws.sheet_format.defaultRowHeight or DEFAULT_ROW_HEIGHT_PT
        return points_to_px(float(height))

    def column_width_px(self, column: int) -> float:
        for dimension in self._ws.column_dimensions.values():
            lower = dimension.min or column_index_from_string(dimension.index)
            upper = dimension.max or lower
            if lower <= column <= upper and _has_own_width(dimension):
                return float(width_to_px(dimension.width))
        default_width = self._ws.sheet_format.defaultColWidth
        if default_width:
            return float(width_to_px(default_width))
        return float(DEFAULT_COLUMN_WIDTH_PX)

    def insert_image(self, blob: ImageBlob, column: int, row: int) -> XlsxImage:
        try:
            image = XLImage(io.BytesIO(blob.data))
        except Exception as exc:  # noqa: BLE001 - Pillow raises several types for bad data
            raise PlatformFault(f"Cannot read image data for {blob.name}: {exc}") from exc
        placed = XlsxImage(image, blob.name, column, row)
        self._ws.add_image(image)
        self.images.append(placed)
        return placed


class XlsxWorkbook:
    """Workbook opened from disk, saved back once placement succeeds."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise PlatformFault(f"Workbook not found: {self.path}")
        self._wb: Workbook = load_workbook(self.path)

    def sheet(self, name: str | None = None) -> XlsxSheet:
        if name is None:
            return XlsxSheet(self._wb.active)
        if name not in self._wb.sheetnames:
            raise PlatformFault(f"Sheet '{name}' not found in {self.path.name}")
        return XlsxSheet(self._wb[name])

    def save(self, path: str | Path | None = None) -> Path:
        target = Path(path) if path else self.path
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(target.name + ".tmp")
        self._wb.save(tmp_path)
        os.replace(tmp_path, target)
        LOGGER.info("placement.xlsx saved path=%s", target)
        return target


__all__ = ["XlsxImage", "XlsxSheet", "XlsxWorkbook", "points_to_px", "width_to_px"]
