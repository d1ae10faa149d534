"""
Renderer Module - Draw background, scattered segments and title with Pillow
"""

import numpy as np
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from loguru import logger
from PIL import Image, ImageDraw, ImageFont

from config import settings
from utils.image_utils import load_image, place_background
from .types import CanvasFrame, PlacedText


class Renderer:
    """
    Renders a thumbnail from a computed layout

    Draw order: background, segments, title highlight bands, title text.
    Each placement is drawn at its anchor exactly as given.
    """

    def __init__(self, font_path: Optional[Path] = None, fonts_dir: Optional[Path] = None):
        """
        Initialize Renderer

        Args:
            font_path: Font used when no family is requested
                (default: the DEFAULT_FONT family)
            fonts_dir: Directory holding the FONT_OPTIONS files (default: FONTS_DIR)
        """
        self.fonts_dir = Path(fonts_dir or settings.FONTS_DIR)
        self.font_path = Path(font_path or self.fonts_dir / settings.FONT_OPTIONS[settings.DEFAULT_FONT]["file"])
        self._fonts: Dict[Tuple[Path, int], ImageFont.ImageFont] = {}

        logger.info(f"Renderer initialized (font: {self.font_path.name})")

    def font_path_for(self, font: Optional[str] = None) -> Path:
        """
        Font file for a FONT_OPTIONS id

        Args:
            font: Font family id, or None for the renderer's default font

        Raises:
            ValueError: Unknown font id
        """
        if font is None:
            return self.font_path
        if font not in settings.FONT_OPTIONS:
            raise ValueError(f"Unknown font: {font}")
        return self.fonts_dir / settings.FONT_OPTIONS[font]["file"]

    def default_colors(self) -> Dict[str, Optional[str]]:
        """Color scheme from settings"""
        return {
            'background': settings.BACKGROUND_COLOR,
            'title': settings.TITLE_COLOR,
            'highlight': settings.HIGHLIGHT_COLOR,
            'segment': settings.SEGMENT_COLOR,
        }

    def create_thumbnail(
        self,
        canvas: CanvasFrame,
        title_lines: List[str],
        title_font_size: int,
        placements: List[PlacedText],
        colors: Optional[Dict[str, Optional[str]]] = None,
        background_image_path: Optional[Path] = None,
        image_offset: Tuple[float, float] = (0.0, 0.0),
        image_zoom: float = 1.0,
        font: Optional[str] = None
    ) -> np.ndarray:
        """
        Create complete thumbnail

        Args:
            canvas: Canvas frame
            title_lines: Title lines, drawn centered
            title_font_size: Title font size
            placements: Layout engine output
            colors: Color overrides (background, title, highlight, segment);
                highlight None disables the title band
            background_image_path: Optional background image
            image_offset: Background center shift from canvas center
            image_zoom: Background zoom on top of the cover scale
            font: FONT_OPTIONS id used for title and segments (default font if None)

        Returns:
            Rendered thumbnail as RGB numpy array
        """
        font_path = self.font_path_for(font)
        scheme = self.default_colors()
        if colors:
            scheme.update(colors)

        logger.info(
            f"Rendering {canvas.width}x{canvas.height} thumbnail with {len(placements)} segment(s)..."
        )

        # 1. Background
        canvas_pil = self._prepare_background(
            canvas, scheme['background'], background_image_path, image_offset, image_zoom
        )
        draw = ImageDraw.Draw(canvas_pil)

        # 2. Scattered segments
        for placement in placements:
            self._draw_segment(draw, placement, scheme['segment'], font_path)

        # 3. Title with highlight band
        self._draw_title(
            draw, canvas, title_lines, title_font_size, scheme['title'], scheme['highlight'], font_path
        )

        logger.info("Thumbnail rendering complete")

        return np.array(canvas_pil.convert('RGB'))

    def _prepare_background(
        self,
        canvas: CanvasFrame,
        color: str,
        image_path: Optional[Path],
        offset: Tuple[float, float],
        zoom: float
    ) -> Image.Image:
        """
        Solid color canvas, or an image scaled to cover it

        Args:
            canvas: Canvas frame
            color: Background color (also fills any uncovered area)
            image_path: Optional background image
            offset: Image center shift from canvas center
            zoom: Zoom factor on top of the cover scale

        Returns:
            RGB PIL image of canvas size
        """
        if image_path is None:
            return Image.new('RGB', (canvas.width, canvas.height), color)

        logger.debug(f"Preparing background from {image_path} (zoom={zoom}, offset={offset})")
        img = load_image(image_path)
        return place_background(img, (canvas.width, canvas.height), offset=offset, zoom=zoom, fill=color)

    def _draw_segment(
        self,
        draw: ImageDraw.ImageDraw,
        placement: PlacedText,
        color: str,
        font_path: Path
    ) -> None:
        """Draw one segment; vertical segments stack one character per line"""
        font = self._load_font(placement.font_size, font_path)

        if placement.is_vertical:
            advance = placement.font_size * settings.VERTICAL_CHAR_SPACING
            for i, char in enumerate(placement.text):
                draw.text((placement.x, placement.y + i * advance), char, font=font, fill=color)
        else:
            draw.text((placement.x, placement.y), placement.text, font=font, fill=color)

    def _draw_title(
        self,
        draw: ImageDraw.ImageDraw,
        canvas: CanvasFrame,
        lines: List[str],
        font_size: int,
        color: str,
        highlight_color: Optional[str],
        font_path: Path
    ) -> None:
        """
        Draw title lines centered on the canvas, each over a highlight band

        Args:
            draw: ImageDraw object
            canvas: Canvas frame
            lines: Title lines
            font_size: Title font size
            color: Title text color
            highlight_color: Band color, or None for no band
            font_path: Font file
        """
        font = self._load_font(font_size, font_path)
        center_x = canvas.width / 2
        line_height = font_size * settings.TITLE_LINE_HEIGHT_RATIO
        start_y = canvas.height / 2 - len(lines) * line_height / 2 + line_height / 2

        for index, line in enumerate(lines):
            line_y = start_y + index * line_height

            if highlight_color:
                draw.rectangle(
                    self.highlight_band(center_x, line_y, line, font_size),
                    fill=highlight_color,
                )

            draw.text((center_x, line_y), line, font=font, fill=color, anchor="mm")

    def highlight_band(
        self,
        center_x: float,
        line_y: float,
        line: str,
        font_size: int
    ) -> Tuple[float, float, float, float]:
        """
        Highlight band rectangle behind a title line

        Returns:
            (left, top, right, bottom)
        """
        line_width = len(line) * font_size * settings.HIGHLIGHT_WIDTH_RATIO
        band_height = font_size * settings.HIGHLIGHT_HEIGHT_RATIO
        left = center_x - line_width / 2 - settings.HIGHLIGHT_PADDING
        top = line_y - band_height / 2 + font_size * settings.HIGHLIGHT_OFFSET_RATIO
        return left, top, left + line_width + 2 * settings.HIGHLIGHT_PADDING, top + band_height

    def _load_font(self, size: int, font_path: Optional[Path] = None) -> ImageFont.ImageFont:
        """TrueType font at a size, cached per (file, size), falling back to Pillow's default font"""
        font_path = font_path or self.font_path
        key = (font_path, size)
        if key in self._fonts:
            return self._fonts[key]

        try:
            if not font_path.exists():
                logger.warning(f"Font not found: {font_path}, using default")
                font = ImageFont.load_default(size=size)
            else:
                font = ImageFont.truetype(str(font_path), size)
        except OSError as e:
            logger.warning(f"Failed to load font: {e}, using default")
            font = ImageFont.load_default(size=size)

        self._fonts[key] = font
        return font
