"""
Configuration settings for Scatter Thumbnail Generator
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Project paths
    PROJECT_ROOT: Path = Path(__file__).parent
    WORKSPACE_DIR: Path = PROJECT_ROOT / "workspace"
    OUT_DIR: Path = WORKSPACE_DIR / "out"
    BACKGROUNDS_DIR: Path = WORKSPACE_DIR / "backgrounds"
    ASSETS_DIR: Path = PROJECT_ROOT / "assets"
    FONTS_DIR: Path = ASSETS_DIR / "fonts"

    # Canvas presets
    ASPECT_RATIOS: dict = {
        "1:1": {"label": "1:1", "width": 1080, "height": 1080},
        "4:5": {"label": "4:5", "width": 1080, "height": 1350},
        "16:9": {"label": "16:9", "width": 1280, "height": 720},
    }
    DEFAULT_ASPECT_RATIO: str = "16:9"

    # Background image upload
    ALLOWED_EXTENSIONS: list[str] = [".jpg", ".jpeg", ".png", ".webp"]
    MAX_UPLOAD_SIZE_MB: int = 20

    # Layout engine - zone bands
    LAYOUT_PADDING: int = 30  # Pixels from canvas edge
    LAYOUT_FRAME_RATIO: float = 0.35  # Band depth as a fraction of canvas height

    # Layout engine - title exclusion zone
    TITLE_MARGIN_X: int = 100
    TITLE_MARGIN_Y: int = 80
    TITLE_CHAR_WIDTH_RATIO: float = 0.9
    TITLE_LINE_HEIGHT_RATIO: float = 1.2

    # Layout engine - bounding box heuristic (monospace approximation)
    CHAR_WIDTH_RATIO: float = 0.8
    CHAR_HEIGHT_RATIO: float = 1.2

    # Layout engine - search
    LAYOUT_STRATEGY: str = "shuffled"  # "shuffled", "proportional" or "blocks"
    LAYOUT_MAX_ATTEMPTS: int = 120
    LAYOUT_USE_GRID: bool = True
    GRID_ROWS: int = 3
    GRID_COLS: int = 4
    VERTICAL_PROBABILITY: float = 1.0  # Chance a left/right segment stacks vertically
    ALLOW_TITLE_OVERLAP_ON_EXHAUSTION: bool = False

    # Content defaults
    DEFAULT_TITLE: str = "#映画鑑賞記録2025"
    DEFAULT_SEGMENTS: list[str] = [
        "Design", "Creative", "Inspiration", "Ideas", "Style",
        "Modern", "Minimal", "Concept", "Vision", "Art",
    ]
    TITLE_FONT_SIZE: int = 100
    SEGMENT_MIN_SIZE: int = 30
    SEGMENT_MAX_SIZE: int = 66

    # Rendering settings
    # Font families, resolved against FONTS_DIR; one family is used for title and segments
    FONT_OPTIONS: dict = {
        "hiragino-kaku-gothic": {"label": "Hiragino Kaku Gothic ProN", "file": "HiraKakuProN-W6.otf"},
        "hiragino-mincho": {"label": "Hiragino Mincho ProN", "file": "HiraMinProN-W6.otf"},
        "noto-sans-jp": {"label": "Noto Sans JP", "file": "NotoSansJP-Bold.ttf"},
        "noto-serif-jp": {"label": "Noto Serif JP", "file": "NotoSerifJP-Bold.ttf"},
        "yu-gothic": {"label": "YuGothic", "file": "YuGothB.ttc"},
        "yu-mincho": {"label": "YuMincho", "file": "yumindb.ttf"},
    }
    DEFAULT_FONT: str = "noto-sans-jp"
    BACKGROUND_COLOR: str = "#ffffff"
    TITLE_COLOR: str = "#ffffff"
    HIGHLIGHT_COLOR: Optional[str] = "#48bb78"  # None = no highlight band
    SEGMENT_COLOR: str = "#ffffff"
    VERTICAL_CHAR_SPACING: float = 1.1  # Line advance for stacked glyphs
    HIGHLIGHT_WIDTH_RATIO: float = 0.85
    HIGHLIGHT_PADDING: int = 50
    HIGHLIGHT_HEIGHT_RATIO: float = 0.5
    HIGHLIGHT_OFFSET_RATIO: float = 0.2

    # Output settings
    OUTPUT_FORMAT: str = "png"

    # FastAPI settings
    API_TITLE: str = "Scatter Thumbnail Generator API"
    API_VERSION: str = "1.0.0"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

# Create directories if they don't exist
for directory in [
    settings.OUT_DIR,
    settings.BACKGROUNDS_DIR,
]:
    directory.mkdir(parents=True, exist_ok=True)
