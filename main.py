"""
Scatter Thumbnail Generator - FastAPI Application
"""

from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict
from pathlib import Path
from loguru import logger
from uuid import uuid4
import secrets
import sys
import time

from config import settings
from scatter import (
    CanvasFrame,
    TitleSpec,
    FontSizeRange,
    PlacedText,
    Orientation,
    ZoneStrategy,
    LayoutEngine,
    Renderer,
    Exporter,
)
from utils.exceptions import LayoutConfigError
from utils.text_utils import split_segments, split_title

# Configure logging
Path("logs").mkdir(exist_ok=True)
logger.remove()
logger.add(sys.stderr, level="INFO")
logger.add("logs/app.log", rotation="500 MB", retention="10 days", level="DEBUG")


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description="Scatter keyword thumbnails: a centered title with segments spread around the edges"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response Models
class PlacementModel(BaseModel):
    """One placed segment (anchor is top-left of the text or first glyph)"""
    text: str
    font_size: int = Field(..., gt=0)
    x: float
    y: float
    orientation: Orientation

    def to_placed_text(self) -> PlacedText:
        return PlacedText(
            text=self.text,
            font_size=self.font_size,
            x=self.x,
            y=self.y,
            orientation=self.orientation,
        )


class LayoutRequest(BaseModel):
    """Request model for computing a scatter layout"""
    title: str = Field(settings.DEFAULT_TITLE, description="Title text (use \\n for line breaks)")
    content: Optional[str] = Field(None, description="Segments, one per line")
    segments: Optional[List[str]] = Field(None, description="Segments as a list (overrides content)")
    aspect_ratio: str = Field(settings.DEFAULT_ASPECT_RATIO, description="Canvas preset: 1:1, 4:5, 16:9")
    width: Optional[int] = Field(None, description="Custom canvas width (requires height, overrides aspect_ratio)")
    height: Optional[int] = Field(None, description="Custom canvas height (requires width)")
    title_font_size: int = Field(settings.TITLE_FONT_SIZE, gt=0)
    segment_min_size: int = Field(settings.SEGMENT_MIN_SIZE, gt=0)
    segment_max_size: int = Field(settings.SEGMENT_MAX_SIZE, gt=0)
    strategy: ZoneStrategy = Field(ZoneStrategy(settings.LAYOUT_STRATEGY), description="Zone strategy")
    seed: Optional[int] = Field(None, description="Random seed (generated and returned if omitted)")

    @model_validator(mode="after")
    def check_dimensions(self):
        if (self.width is None) != (self.height is None):
            raise ValueError("width and height must be given together")
        return self


class LayoutResponse(BaseModel):
    """Response model for a computed layout"""
    seed: int
    width: int
    height: int
    exclusion_rect: Dict[str, float]
    placements: List[PlacementModel]
    exhausted: List[int] = []


class GenerateRequest(LayoutRequest):
    """Request model for thumbnail generation"""
    background_color: str = Field(settings.BACKGROUND_COLOR)
    title_color: str = Field(settings.TITLE_COLOR)
    highlight_color: Optional[str] = Field(settings.HIGHLIGHT_COLOR, description="None disables the title band")
    segment_color: str = Field(settings.SEGMENT_COLOR)
    background: Optional[str] = Field(None, description="Filename returned by /upload-background")
    image_offset_x: float = 0.0
    image_offset_y: float = 0.0
    image_zoom: float = Field(1.0, gt=0)
    font: str = Field(settings.DEFAULT_FONT, description="Font family id from /fonts")
    placements: Optional[List[PlacementModel]] = Field(
        None, description="Re-render this layout instead of computing a new one"
    )

    @field_validator("font")
    @classmethod
    def check_font(cls, value: str) -> str:
        if value not in settings.FONT_OPTIONS:
            raise ValueError(f"Unknown font: {value}. Available: {', '.join(settings.FONT_OPTIONS)}")
        return value


class GenerateResponse(BaseModel):
    """Response model for thumbnail generation"""
    success: bool
    thumbnail_path: Optional[str] = None
    filename: Optional[str] = None
    seed: Optional[int] = None
    placements: Optional[List[PlacementModel]] = None
    metadata: Optional[dict] = None
    error: Optional[str] = None


class StatusResponse(BaseModel):
    """Status response model"""
    status: str
    message: str


class UploadResponse(BaseModel):
    """Response model for background upload"""
    success: bool
    filename: Optional[str] = None
    error: Optional[str] = None


def resolve_canvas(aspect_ratio: str, width: Optional[int] = None, height: Optional[int] = None) -> CanvasFrame:
    """
    Canvas from explicit dimensions or an aspect ratio preset

    Raises:
        KeyError: Unknown aspect ratio preset
    """
    if width is not None and height is not None:
        return CanvasFrame(width=width, height=height)

    preset = settings.ASPECT_RATIOS[aspect_ratio]
    return CanvasFrame(width=preset["width"], height=preset["height"])


def resolve_segments(request: LayoutRequest) -> List[str]:
    """Caller-side filtering: trimmed, non-empty segments"""
    if request.segments is not None:
        return [s.strip() for s in request.segments if s.strip()]
    if request.content is not None:
        return split_segments(request.content)
    return list(settings.DEFAULT_SEGMENTS)


# Pipeline class
class ThumbnailPipeline:
    """
    Complete thumbnail generation pipeline: layout -> render -> export
    """

    def __init__(self):
        """Initialize pipeline components"""
        self.layout_engine = LayoutEngine()
        self.renderer = Renderer()
        self.exporter = Exporter()
        self.backgrounds_dir = settings.BACKGROUNDS_DIR

        logger.info("Thumbnail Pipeline initialized")

    def layout(self, request: LayoutRequest) -> LayoutResponse:
        """
        Compute a layout (the "change layout" action)

        Raises:
            LayoutConfigError: Invalid canvas or font range
            KeyError: Unknown aspect ratio preset
        """
        canvas = resolve_canvas(request.aspect_ratio, request.width, request.height)
        seed = request.seed if request.seed is not None else secrets.randbelow(2**31)

        result = self.layout_engine.layout(
            canvas,
            TitleSpec(lines=split_title(request.title), font_size=request.title_font_size),
            resolve_segments(request),
            FontSizeRange(min=request.segment_min_size, max=request.segment_max_size),
            strategy=request.strategy,
            seed=seed,
        )

        return LayoutResponse(
            seed=seed,
            width=canvas.width,
            height=canvas.height,
            exclusion_rect=result.exclusion_rect.to_dict(),
            placements=[PlacementModel(**p.to_dict()) for p in result.placements],
            exhausted=result.exhausted_indices,
        )

    def render(self, request: GenerateRequest):
        """
        Lay out (unless placements are given) and render

        Returns:
            (thumbnail array, seed or None, placements)
        """
        seed = None
        if request.placements is not None:
            placements = request.placements
        else:
            layout = self.layout(request)
            seed, placements = layout.seed, layout.placements

        background_path = None
        if request.background:
            background_path = self._resolve_background(request.background)

        canvas = resolve_canvas(request.aspect_ratio, request.width, request.height)
        thumbnail = self.renderer.create_thumbnail(
            canvas,
            split_title(request.title),
            request.title_font_size,
            [p.to_placed_text() for p in placements],
            colors={
                'background': request.background_color,
                'title': request.title_color,
                'highlight': request.highlight_color,
                'segment': request.segment_color,
            },
            background_image_path=background_path,
            image_offset=(request.image_offset_x, request.image_offset_y),
            image_zoom=request.image_zoom,
            font=request.font,
        )
        return thumbnail, seed, placements

    def generate(self, request: GenerateRequest) -> dict:
        """
        Run complete thumbnail generation pipeline

        Args:
            request: Generation request

        Returns:
            Result dictionary
        """
        start_time = time.time()

        try:
            logger.info(f"Starting thumbnail generation: '{request.title}'")

            thumbnail, seed, placements = self.render(request)

            metadata = {
                'title': request.title,
                'aspect_ratio': request.aspect_ratio,
                'seed': seed,
                'strategy': request.strategy.value,
                'font': request.font,
                'placements': [p.to_placed_text().to_dict() for p in placements],
            }
            output_path = self.exporter.export(thumbnail, request.title, metadata=metadata)

            logger.info(f"Thumbnail generated in {time.time() - start_time:.2f}s: {output_path.name}")

            return {
                'success': True,
                'thumbnail_path': str(output_path),
                'filename': output_path.name,
                'seed': seed,
                'placements': placements,
                'metadata': metadata,
            }

        except (LayoutConfigError, KeyError, FileNotFoundError):
            # Client errors are mapped to HTTP status codes by the endpoint
            raise

        except Exception as e:
            logger.exception(f"Pipeline failed: {e}")
            return {
                'success': False,
                'error': str(e),
            }

    def _resolve_background(self, filename: str) -> Path:
        """Uploaded background by bare filename"""
        path = self.backgrounds_dir / filename
        if Path(filename).name != filename or not path.is_file():
            raise FileNotFoundError(f"Background not found: {filename}")
        return path


# Global pipeline instance
pipeline = ThumbnailPipeline()


def _client_error(e: Exception) -> HTTPException:
    if isinstance(e, KeyError):
        return HTTPException(status_code=422, detail=f"Unknown aspect ratio: {e.args[0]}")
    if isinstance(e, FileNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=422, detail=str(e))


# API Endpoints
@app.get("/health", response_model=StatusResponse)
async def health():
    """Health check endpoint"""
    return StatusResponse(
        status="healthy",
        message="All systems operational"
    )


@app.get("/aspect-ratios")
async def get_aspect_ratios():
    """Canvas presets"""
    return [{"id": ratio_id, **preset} for ratio_id, preset in settings.ASPECT_RATIOS.items()]


@app.get("/fonts")
async def get_fonts():
    """Font families usable for title and segments"""
    return [
        {"id": font_id, "label": option["label"], "default": font_id == settings.DEFAULT_FONT}
        for font_id, option in settings.FONT_OPTIONS.items()
    ]


@app.post("/layout", response_model=LayoutResponse)
async def compute_layout(request: LayoutRequest):
    """
    Compute a new scatter layout without rendering

    Args:
        request: Layout request

    Returns:
        Seed, exclusion rect and placements
    """
    try:
        return pipeline.layout(request)
    except (LayoutConfigError, KeyError) as e:
        raise _client_error(e)


@app.post("/generate", response_model=GenerateResponse)
async def generate_thumbnail(request: GenerateRequest):
    """
    Generate and export a thumbnail

    Args:
        request: Generation request

    Returns:
        Generation result
    """
    try:
        result = pipeline.generate(request)
    except (LayoutConfigError, KeyError, FileNotFoundError) as e:
        raise _client_error(e)

    if result['success']:
        return GenerateResponse(**result)
    else:
        raise HTTPException(status_code=500, detail=result.get('error', 'Unknown error'))


@app.post("/preview")
async def preview_thumbnail(request: GenerateRequest):
    """
    Render a thumbnail and return the PNG directly, without saving it
    """
    try:
        thumbnail, seed, _ = pipeline.render(request)
    except (LayoutConfigError, KeyError, FileNotFoundError) as e:
        raise _client_error(e)

    headers = {"X-Layout-Seed": str(seed)} if seed is not None else None
    return Response(
        content=pipeline.exporter.to_png_bytes(thumbnail),
        media_type="image/png",
        headers=headers
    )


@app.post("/upload-background", response_model=UploadResponse)
async def upload_background(file: UploadFile = File(...)):
    """
    Store a background image for later /generate calls

    Args:
        file: Image file (jpg, png, webp)

    Returns:
        Stored filename
    """
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{suffix}'. Allowed: {', '.join(settings.ALLOWED_EXTENSIONS)}"
        )

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.MAX_UPLOAD_SIZE_MB} MB")

    filename = f"{uuid4().hex}{suffix}"
    pipeline.backgrounds_dir.mkdir(parents=True, exist_ok=True)
    (pipeline.backgrounds_dir / filename).write_bytes(content)
    logger.info(f"Stored background {file.filename} as {filename}")

    return UploadResponse(success=True, filename=filename)


@app.get("/thumbnail/{filename}")
async def get_thumbnail(filename: str):
    """
    Get thumbnail file

    Args:
        filename: Thumbnail filename

    Returns:
        Image file
    """
    file_path = pipeline.exporter.resolve(filename)

    if file_path is None:
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    return FileResponse(
        file_path,
        media_type="image/png",
        filename=filename
    )


@app.get("/thumbnails", response_model=List[str])
async def list_thumbnails():
    """
    List all generated thumbnails

    Returns:
        List of thumbnail filenames
    """
    return [thumb.name for thumb in pipeline.exporter.list_thumbnails()]


@app.delete("/thumbnail/{filename}", response_model=StatusResponse)
async def delete_thumbnail(filename: str):
    """
    Delete a thumbnail and its metadata

    Args:
        filename: Thumbnail filename
    """
    if not pipeline.exporter.delete(filename):
        raise HTTPException(status_code=404, detail="Thumbnail not found")

    return StatusResponse(status="deleted", message=f"Deleted {filename}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True
    )
