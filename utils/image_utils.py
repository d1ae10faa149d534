"""
Image utility functions for loading, saving and placing background images
"""

import cv2
import numpy as np
from pathlib import Path
from typing import Union, Tuple
from PIL import Image


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Load image from file path

    Args:
        image_path: Path to image file

    Returns:
        Image as numpy array in RGB format
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    # Load with OpenCV and convert BGR to RGB
    img = cv2.imread(str(image_path))
    if img is None:
        raise ValueError(f"Failed to load image: {image_path}")

    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def save_image(image: np.ndarray, output_path: Union[str, Path], quality: int = 95) -> None:
    """
    Save image to file

    Args:
        image: Image as numpy array (RGB format)
        output_path: Output file path
        quality: JPEG quality (1-100), ignored for PNG
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert RGB to BGR for OpenCV
    img_bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

    if output_path.suffix.lower() in ['.jpg', '.jpeg']:
        cv2.imwrite(str(output_path), img_bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    else:
        cv2.imwrite(str(output_path), img_bgr)


def encode_png(image: np.ndarray) -> bytes:
    """
    Encode an RGB image as PNG bytes

    Args:
        image: Image as numpy array (RGB format)

    Returns:
        PNG file content
    """
    img_bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    ok, buffer = cv2.imencode(".png", img_bgr)
    if not ok:
        raise ValueError("Failed to encode image as PNG")
    return buffer.tobytes()


def cover_scale(image_size: Tuple[int, int], canvas_size: Tuple[int, int], zoom: float = 1.0) -> float:
    """
    Scale factor that makes an image cover the canvas, times a zoom factor

    Args:
        image_size: (width, height) of the source image
        canvas_size: (width, height) of the canvas
        zoom: Extra zoom on top of the cover scale (1.0 = exact cover)

    Returns:
        Scale factor
    """
    img_w, img_h = image_size
    canvas_w, canvas_h = canvas_size
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"Invalid image size: {img_w}x{img_h}")

    return max(canvas_w / img_w, canvas_h / img_h) * zoom


def place_background(
    image: np.ndarray,
    canvas_size: Tuple[int, int],
    offset: Tuple[float, float] = (0.0, 0.0),
    zoom: float = 1.0,
    fill: Union[str, Tuple[int, int, int]] = "#ffffff"
) -> Image.Image:
    """
    Scale an image to cover the canvas and center it with an offset

    Args:
        image: Background image (RGB numpy array)
        canvas_size: (width, height) of the canvas
        offset: (x, y) shift of the image center from the canvas center
        zoom: Zoom factor on top of the cover scale
        fill: Color shown where a shifted image leaves the canvas uncovered

    Returns:
        RGB canvas-sized PIL image
    """
    canvas_w, canvas_h = canvas_size
    img_pil = Image.fromarray(image).convert("RGB")

    scale = cover_scale(img_pil.size, canvas_size, zoom)
    new_size = (max(1, round(img_pil.width * scale)), max(1, round(img_pil.height * scale)))
    img_pil = img_pil.resize(new_size, Image.LANCZOS)

    # Image center sits at canvas center + offset
    left = round(canvas_w / 2 + offset[0] - new_size[0] / 2)
    top = round(canvas_h / 2 + offset[1] - new_size[1] / 2)

    canvas = Image.new("RGB", (canvas_w, canvas_h), fill)
    canvas.paste(img_pil, (left, top))
    return canvas
