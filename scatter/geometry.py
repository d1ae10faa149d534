"""
Geometry helpers - title exclusion zone, text footprints and overlap tests

Text footprints use a fixed per-character heuristic (monospace approximation),
not real glyph metrics. Rendered text in proportional or CJK fonts will not
match these boxes exactly; positions depend on the heuristic, so swapping in
real text measurement would change every layout for a given seed.
"""

from typing import Iterable

from config import settings
from .types import CanvasFrame, TitleSpec, Orientation, Rect, ExclusionRect, BoundingBox


def calculate_exclusion_rect(
    title: TitleSpec,
    canvas: CanvasFrame,
    margin_x: float = None,
    margin_y: float = None,
    char_width_ratio: float = None,
    line_height_ratio: float = None
) -> ExclusionRect:
    """
    Calculate the rectangle reserved around the centered title

    Args:
        title: Title lines and font size (longest line sets the width)
        canvas: Canvas frame
        margin_x: Horizontal padding on each side (default from settings)
        margin_y: Vertical padding on each side (default from settings)
        char_width_ratio: Title character width per font size unit
        line_height_ratio: Title line height per font size unit

    Returns:
        Exclusion rect centered on the canvas midpoint
    """
    margin_x = settings.TITLE_MARGIN_X if margin_x is None else margin_x
    margin_y = settings.TITLE_MARGIN_Y if margin_y is None else margin_y
    char_width_ratio = settings.TITLE_CHAR_WIDTH_RATIO if char_width_ratio is None else char_width_ratio
    line_height_ratio = settings.TITLE_LINE_HEIGHT_RATIO if line_height_ratio is None else line_height_ratio

    center_x, center_y = canvas.center
    title_width = title.longest_line * title.font_size * char_width_ratio
    title_height = len(title.lines) * title.font_size * line_height_ratio

    return Rect(
        left=center_x - title_width / 2 - margin_x,
        right=center_x + title_width / 2 + margin_x,
        top=center_y - title_height / 2 - margin_y,
        bottom=center_y + title_height / 2 + margin_y,
    )


def estimate_bounding_box(
    x: float,
    y: float,
    text: str,
    font_size: int,
    orientation: Orientation,
    char_width_ratio: float = None,
    char_height_ratio: float = None
) -> BoundingBox:
    """
    Estimate the footprint of a text item from its character count

    Args:
        x: Anchor x (top-left)
        y: Anchor y (top-left)
        text: Text content
        font_size: Font size in pixels
        orientation: Horizontal (one line) or vertical (one char per line)
        char_width_ratio: Character width per font size unit
        char_height_ratio: Line height per font size unit

    Returns:
        Axis-aligned bounding box
    """
    char_width_ratio = settings.CHAR_WIDTH_RATIO if char_width_ratio is None else char_width_ratio
    char_height_ratio = settings.CHAR_HEIGHT_RATIO if char_height_ratio is None else char_height_ratio

    char_width = font_size * char_width_ratio
    char_height = font_size * char_height_ratio
    count = len(text)

    if orientation == Orientation.VERTICAL:
        width, height = char_width, count * char_height
    else:
        width, height = count * char_width, char_height

    return Rect(left=x, right=x + width, top=y, bottom=y + height)


def overlaps(a: Rect, b: Rect) -> bool:
    """Closed-interval intersection test (touching edges count as overlap)"""
    return not (
        a.right < b.left
        or a.left > b.right
        or a.bottom < b.top
        or a.top > b.bottom
    )


def overlaps_title(box: BoundingBox, exclusion_rect: ExclusionRect) -> bool:
    return overlaps(box, exclusion_rect)


def count_overlaps(box: BoundingBox, placed_boxes: Iterable[BoundingBox]) -> int:
    """Number of already-placed boxes the candidate intersects"""
    return sum(1 for placed in placed_boxes if overlaps(box, placed))
