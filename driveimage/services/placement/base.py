"""Data model and capability interfaces for image placement.

The placement algorithm only talks to the narrow protocols below, so any
spreadsheet or folder backend (openpyxl workbook, Drive folder, local
directory, in-memory fakes) can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from openpyxl.utils.cell import get_column_letter, range_boundaries


@dataclass(frozen=True, slots=True)
class CellRange:
    """Rectangular block of cells, 1-based like spreadsheet coordinates."""

    row: int
    column: int
    num_rows: int = 1
    num_columns: int = 1

    @classmethod
    def from_a1(cls, notation: str) -> "CellRange":
        """Parse ``A1`` or ``A1:B3`` notation (a sheet prefix such as ``Sheet1!`` is ignored)."""

        ref = notation.split("!")[-1].replace("$", "").strip()
        min_col, min_row, max_col, max_row = range_boundaries(ref)
        if None in (min_col, min_row, max_col, max_row):
            raise ValueError(f"Range must have explicit bounds: {notation}")
        return cls(
            row=min_row,
            column=min_col,
            num_rows=max_row - min_row + 1,
            num_columns=max_col - min_col + 1,
        )

    @property
    def last_row(self) -> int:
        return self.row + self.num_rows - 1

    @property
    def last_column(self) -> int:
        return self.column + self.num_columns - 1

    @property
    def a1(self) -> str:
        start = f"{get_column_letter(self.column)}{self.row}"
        if self.num_rows == 1 and self.num_columns == 1:
            return start
        return f"{start}:{get_column_letter(self.last_column)}{self.last_row}"

    def offset(self, rows: int, columns: int) -> "CellRange":
        return CellRange(self.row + rows, self.column + columns, self.num_rows, self.num_columns)

    def cells(self) -> Iterable[tuple[int, int]]:
        """Yield ``(row, column)`` pairs row by row."""

        for r in range(self.row, self.last_row + 1):
            for c in range(self.column, self.last_column + 1):
                yield r, c


@dataclass(slots=True)
class ImageBlob:
    """Image bytes plus the display name used for the inserted picture."""

    name: str
    data: bytes


@dataclass(frozen=True, slots=True)
class PlacementOptions:
    file_ext: str
    vertical: bool = True
    insert_after: bool = True

    @property
    def offset(self) -> int:
        return 1 if self.insert_after else -1


@dataclass(slots=True)
class Selection:
    """Validated selection: its bounds, orientation and ordered lookup keys."""

    range: CellRange
    vertical: bool
    keys: list[str]


@dataclass(slots=True)
class FileMatch:
    """Lookup outcome for one key; ``blob`` is set iff ``match_count >= 1``."""

    key: str
    match_count: int = 0
    blob: ImageBlob | None = None


@dataclass(frozen=True, slots=True)
class CellGeometry:
    height_px: float
    width_px: float


@dataclass(slots=True)
class PlacementResult:
    match_counts: dict[str, int] = field(default_factory=dict)
    fetch_seconds: float = 0.0
    total_seconds: float = 0.0
    inserted: int = 0

    def duplicates(self) -> dict[str, int]:
        """Keys that matched more than one file, in input order."""

        return {key: count for key, count in self.match_counts.items() if count > 1}

    def missing(self) -> list[str]:
        return [key for key, count in self.match_counts.items() if count == 0]


class PlacedImage(Protocol):
    """Handle on an image already inserted into a sheet."""

    @property
    def height(self) -> float: ...

    @property
    def width(self) -> float: ...

    def resize(self, height: float, width: float) -> None: ...

    def set_x_offset(self, pixels: int) -> None: ...


class SheetSurface(Protocol):
    """Spreadsheet capabilities needed by the resolver and the engine."""

    def values(self, cell_range: CellRange) -> list[list[Any]]: ...

    def is_blank(self, cell_range: CellRange) -> bool: ...

    def row_height_px(self, row: int) -> float: ...

    def column_width_px(self, column: int) -> float: ...

    def insert_image(self, blob: ImageBlob, column: int, row: int) -> PlacedImage: ...


class ImageFolder(Protocol):
    """Folder capabilities: enumerate entries by exact name and fetch their bytes."""

    def find_by_name(self, name: str) -> Iterable[Any]: ...

    def fetch(self, entry: Any) -> bytes: ...


__all__ = [
    "CellRange",
    "ImageBlob",
    "PlacementOptions",
    "Selection",
    "FileMatch",
    "CellGeometry",
    "PlacementResult",
    "PlacedImage",
    "SheetSurface",
    "ImageFolder",
]
