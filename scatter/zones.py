"""
Zone assignment and zone band geometry
"""

import math
import random
from typing import List, Tuple

from .types import CanvasFrame, Zone, ZONE_ORDER, Orientation, ZoneStrategy

# Left/right bands are shallower than top/bottom bands
SIDE_BAND_DEPTH = 0.6

Band = Tuple[float, float, float, float]  # (x_min, x_max, y_min, y_max)


def _ceil_fraction(n: int, tenths: int) -> int:
    """ceil(n * tenths / 10) in integer arithmetic"""
    return -(-n * tenths // 10)


def _assign_proportional(count: int) -> List[Zone]:
    top = min(count, _ceil_fraction(count, 3))
    bottom = min(count - top, _ceil_fraction(count, 3))
    left = min(count - top - bottom, _ceil_fraction(count, 2))
    right = count - top - bottom - left

    return (
        [Zone.TOP] * top
        + [Zone.BOTTOM] * bottom
        + [Zone.LEFT] * left
        + [Zone.RIGHT] * right
    )


def _assign_shuffled(count: int, rng: random.Random) -> List[Zone]:
    permutation = list(range(count))
    rng.shuffle(permutation)

    zones = [Zone.TOP] * count
    for position, index in enumerate(permutation):
        zones[index] = ZONE_ORDER[position % 4]
    return zones


def _assign_blocks(count: int) -> List[Zone]:
    per_zone = math.ceil(count / 4)
    return [ZONE_ORDER[(index // per_zone) % 4] for index in range(count)]


def assign_zones(count: int, strategy: ZoneStrategy, rng: random.Random) -> List[Zone]:
    """
    Map each segment index to a zone

    Args:
        count: Number of segments
        strategy: Assignment strategy
        rng: Random source (only the shuffled strategy draws from it)

    Returns:
        Zone per segment, indexed like the input segments
    """
    if count <= 0:
        return []

    strategy = ZoneStrategy(strategy)
    if strategy == ZoneStrategy.PROPORTIONAL:
        return _assign_proportional(count)
    if strategy == ZoneStrategy.BLOCKS:
        return _assign_blocks(count)
    return _assign_shuffled(count, rng)


def choose_orientation(zone: Zone, rng: random.Random, vertical_probability: float = 1.0) -> Orientation:
    """
    Pick the glyph stacking rule for a zone

    Top/bottom are always horizontal. Left/right are vertical with
    vertical_probability; no random draw is made when it is 1.0 or more.
    """
    if zone in (Zone.TOP, Zone.BOTTOM):
        return Orientation.HORIZONTAL
    if vertical_probability >= 1.0:
        return Orientation.VERTICAL
    if rng.random() < vertical_probability:
        return Orientation.VERTICAL
    return Orientation.HORIZONTAL


def _clamp_range(low: float, high: float, limit: float) -> Tuple[float, float]:
    low = min(max(low, 0.0), limit)
    high = min(max(high, 0.0), limit)
    return (low, high) if low <= high else (high, low)


def zone_band(zone: Zone, canvas: CanvasFrame, padding: float, frame_thickness: float) -> Band:
    """
    Rectangle of anchor positions allowed for a zone

    Args:
        zone: Target zone
        canvas: Canvas frame
        padding: Distance from canvas edges
        frame_thickness: Depth of the top/bottom bands (side bands use 60%)

    Returns:
        (x_min, x_max, y_min, y_max), clamped to the canvas
    """
    width, height = canvas.width, canvas.height
    side_depth = frame_thickness * SIDE_BAND_DEPTH

    if zone == Zone.TOP:
        x_range = (padding, width - padding)
        y_range = (padding, padding + frame_thickness)
    elif zone == Zone.BOTTOM:
        x_range = (padding, width - padding)
        y_range = (height - padding - frame_thickness, height - padding)
    elif zone == Zone.LEFT:
        x_range = (padding, padding + side_depth)
        y_range = (padding, height - padding)
    else:
        x_range = (width - padding - side_depth, width - padding)
        y_range = (padding, height - padding)

    x_min, x_max = _clamp_range(x_range[0], x_range[1], width)
    y_min, y_max = _clamp_range(y_range[0], y_range[1], height)
    return x_min, x_max, y_min, y_max
