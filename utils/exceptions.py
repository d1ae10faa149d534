"""
Custom exceptions for Scatter Thumbnail Generator
"""


class LayoutConfigError(ValueError):
    """
    Raised when a layout call is given configuration it cannot work with.

    Failing to find an overlap-free slot is never an error; only invalid
    input is.
    """


class InvalidDimensionsError(LayoutConfigError):
    """
    Raised when the canvas width or height is not positive.
    """

    def __init__(self, width: int, height: int, message: str = None):
        self.width = width
        self.height = height
        self.message = message or f"Canvas dimensions must be positive, got {width}x{height}"
        super().__init__(self.message)


class InvalidFontRangeError(LayoutConfigError):
    """
    Raised when the segment font size range has min > max.

    The caller is expected to normalize the range before calling; the engine
    refuses to guess which bound was meant.
    """

    def __init__(self, min_size: int, max_size: int, message: str = None):
        self.min_size = min_size
        self.max_size = max_size
        self.message = message or f"Invalid font size range: min {min_size} > max {max_size}"
        super().__init__(self.message)
