"""Selection resolution and image placement."""

from .base import (
    CellRange,
    ImageBlob,
    ImageFolder,
    PlacementOptions,
    PlacementResult,
    Selection,
    SheetSurface,
)
from .engine import PlacementEngine
from .selection import resolve_selection

__all__ = [
    "CellRange",
    "ImageBlob",
    "ImageFolder",
    "PlacementEngine",
    "PlacementOptions",
    "PlacementResult",
    "Selection",
    "SheetSurface",
    "resolve_selection",
]
