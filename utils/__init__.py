"""
Utility Functions
"""

from .image_utils import (
    load_image,
    save_image,
    encode_png,
    cover_scale,
    place_background,
)
from .text_utils import (
    split_segments,
    split_title,
)
from .exceptions import (
    LayoutConfigError,
    InvalidDimensionsError,
    InvalidFontRangeError,
)

__all__ = [
    "load_image",
    "save_image",
    "encode_png",
    "cover_scale",
    "place_background",
    "split_segments",
    "split_title",
    "LayoutConfigError",
    "InvalidDimensionsError",
    "InvalidFontRangeError",
]
