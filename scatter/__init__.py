"""
Scatter Thumbnail Generator Modules
"""

from .types import (
    CanvasFrame,
    TitleSpec,
    FontSizeRange,
    PlacedText,
    LayoutResult,
    Orientation,
    Zone,
    ZoneStrategy,
)
from .layout import LayoutEngine, layout_segments
from .renderer import Renderer
from .exporter import Exporter

__all__ = [
    "CanvasFrame",
    "TitleSpec",
    "FontSizeRange",
    "PlacedText",
    "LayoutResult",
    "Orientation",
    "Zone",
    "ZoneStrategy",
    "LayoutEngine",
    "layout_segments",
    "Renderer",
    "Exporter",
]
