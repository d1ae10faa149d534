"""
Layout types for Scatter Thumbnail Generator
Data structures shared by the scatter layout engine, renderer and API
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Dict, Any


class Zone(str, Enum):
    """Edge band of the canvas a segment is scattered into"""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


# Index order used by round-robin and block assignment
ZONE_ORDER = [Zone.TOP, Zone.BOTTOM, Zone.LEFT, Zone.RIGHT]


class Orientation(str, Enum):
    """Glyph stacking rule for a placed segment"""
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"  # One character per stacked line


class ZoneStrategy(str, Enum):
    """How segments are distributed over the four zones"""
    PROPORTIONAL = "proportional"  # 30% top, 30% bottom, 20% left, rest right
    SHUFFLED = "shuffled"  # Random permutation, round-robin over zones
    BLOCKS = "blocks"  # Contiguous blocks of ceil(N/4) in input order


@dataclass(frozen=True)
class CanvasFrame:
    """Canvas size in pixels"""
    width: int
    height: int

    @property
    def center(self) -> tuple:
        return self.width / 2, self.height / 2


@dataclass(frozen=True)
class TitleSpec:
    """Title geometry (color and weight are rendering concerns)"""
    lines: List[str]
    font_size: int

    @property
    def longest_line(self) -> int:
        """Character count of the longest line"""
        return max((len(line) for line in self.lines), default=0)


@dataclass(frozen=True)
class FontSizeRange:
    """Inclusive segment font size range"""
    min: int
    max: int


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in canvas pixels

    Attributes:
        left: Left edge (x)
        right: Right edge (x)
        top: Top edge (y)
        bottom: Bottom edge (y)
    """
    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# Region reserved around the title
ExclusionRect = Rect

# Estimated footprint of a text item
BoundingBox = Rect


@dataclass(frozen=True)
class PlacedText:
    """
    Output of the layout engine, consumed by the renderer

    x, y is the anchor: top-left of the text for horizontal items,
    top-left of the first glyph for vertical items.
    """
    text: str
    font_size: int
    x: float
    y: float
    orientation: Orientation

    @property
    def is_vertical(self) -> bool:
        return self.orientation == Orientation.VERTICAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "font_size": self.font_size,
            "x": self.x,
            "y": self.y,
            "orientation": self.orientation.value,
        }


@dataclass(frozen=True)
class PlacementDiagnostics:
    """
    How the search arrived at one placement

    Attributes:
        zone: Zone the segment was assigned to
        attempts: Candidates sampled before acceptance
        overlap_count: Overlaps with earlier placements at acceptance time
        exhausted: True when the attempt budget ran out (fallback accepted)
        title_overlap: True when the accepted box still touches the title
    """
    zone: Zone
    attempts: int
    overlap_count: int
    exhausted: bool
    title_overlap: bool


@dataclass
class LayoutResult:
    """Full result of one layout call"""
    placements: List[PlacedText]
    exclusion_rect: ExclusionRect
    diagnostics: List[PlacementDiagnostics] = field(default_factory=list)

    @property
    def exhausted_indices(self) -> List[int]:
        """Segment indices that fell back after exhausting their budget"""
        return [i for i, d in enumerate(self.diagnostics) if d.exhausted]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "exclusion_rect": self.exclusion_rect.to_dict(),
            "placements": [p.to_dict() for p in self.placements],
        }
