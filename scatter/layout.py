"""
Layout Engine - Scatter keyword segments around a centered title
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from config import settings
from utils.exceptions import InvalidDimensionsError, InvalidFontRangeError
from .geometry import (
    calculate_exclusion_rect,
    estimate_bounding_box,
    overlaps_title,
    count_overlaps,
)
from .grid import GridOccupancyTracker
from .types import (
    CanvasFrame,
    TitleSpec,
    FontSizeRange,
    ExclusionRect,
    BoundingBox,
    PlacedText,
    PlacementDiagnostics,
    LayoutResult,
    Rect,
    Zone,
    ZoneStrategy,
)
from .zones import Band, assign_zones, choose_orientation, zone_band


@dataclass
class _Candidate:
    x: float
    y: float
    box: BoundingBox
    overlap_count: int = 0


@dataclass
class _SearchState:
    """Mutable state owned by a single layout call"""
    grid: GridOccupancyTracker
    placed_boxes: List[BoundingBox] = field(default_factory=list)


class LayoutEngine:
    """
    Places text segments in four edge zones around the title

    Each segment gets a bounded random search: sample inside its zone band,
    reject candidates touching the title, accept the first candidate that
    overlaps nothing already placed, otherwise fall back to the best one seen.
    The result is best-effort; overlaps are tolerated, never raised.

    The engine holds configuration only. All search state lives in the
    layout() call, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        strategy: Optional[str] = None,
        max_attempts: Optional[int] = None,
        use_grid: Optional[bool] = None,
        grid_rows: Optional[int] = None,
        grid_cols: Optional[int] = None,
        padding: Optional[float] = None,
        frame_ratio: Optional[float] = None,
        title_margin_x: Optional[float] = None,
        title_margin_y: Optional[float] = None,
        vertical_probability: Optional[float] = None,
        allow_title_overlap_on_exhaustion: Optional[bool] = None
    ):
        """
        Initialize Layout Engine

        Every argument defaults to the matching value in settings.

        Args:
            strategy: Zone strategy ("shuffled", "proportional", "blocks")
            max_attempts: Candidates sampled per segment before falling back
            use_grid: Bias sampling toward the least-populated grid cell
            grid_rows: Occupancy grid rows
            grid_cols: Occupancy grid columns
            padding: Distance of zone bands from the canvas edges
            frame_ratio: Top/bottom band depth as a fraction of canvas height
            title_margin_x: Horizontal padding around the title
            title_margin_y: Vertical padding around the title
            vertical_probability: Chance a left/right segment stacks vertically
            allow_title_overlap_on_exhaustion: Accept a title-overlapping
                candidate when no title-clear one was found
        """
        self.strategy = ZoneStrategy(strategy or settings.LAYOUT_STRATEGY)
        self.max_attempts = settings.LAYOUT_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.use_grid = settings.LAYOUT_USE_GRID if use_grid is None else use_grid
        self.grid_rows = settings.GRID_ROWS if grid_rows is None else grid_rows
        self.grid_cols = settings.GRID_COLS if grid_cols is None else grid_cols
        self.padding = settings.LAYOUT_PADDING if padding is None else padding
        self.frame_ratio = settings.LAYOUT_FRAME_RATIO if frame_ratio is None else frame_ratio
        self.title_margin_x = settings.TITLE_MARGIN_X if title_margin_x is None else title_margin_x
        self.title_margin_y = settings.TITLE_MARGIN_Y if title_margin_y is None else title_margin_y
        self.vertical_probability = (
            settings.VERTICAL_PROBABILITY if vertical_probability is None else vertical_probability
        )
        self.allow_title_overlap_on_exhaustion = (
            settings.ALLOW_TITLE_OVERLAP_ON_EXHAUSTION
            if allow_title_overlap_on_exhaustion is None
            else allow_title_overlap_on_exhaustion
        )

        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.grid_rows < 1 or self.grid_cols < 1:
            raise ValueError(
                f"Grid needs at least one row and column, got {self.grid_rows}x{self.grid_cols}"
            )

        logger.info(
            f"LayoutEngine initialized (strategy={self.strategy.value}, "
            f"attempts={self.max_attempts}, grid={self.grid_rows}x{self.grid_cols} "
            f"{'on' if self.use_grid else 'off'})"
        )

    def layout(
        self,
        canvas: CanvasFrame,
        title: TitleSpec,
        segments: Sequence[str],
        font_range: FontSizeRange,
        strategy: Optional[str] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None
    ) -> LayoutResult:
        """
        Lay out segments around the title

        Args:
            canvas: Canvas frame
            title: Title lines and font size
            segments: Non-empty, trimmed segment strings (caller-filtered)
            font_range: Inclusive font size range for segments
            strategy: Zone strategy override for this call
            seed: Seed for a fresh random source (ignored when rng is given)
            rng: Random source to draw from

        Returns:
            LayoutResult with one placement per segment, in input order

        Raises:
            InvalidDimensionsError: Canvas width or height is not positive
            InvalidFontRangeError: font_range.min > font_range.max
        """
        self._validate(canvas, font_range)

        exclusion_rect = calculate_exclusion_rect(
            title, canvas, margin_x=self.title_margin_x, margin_y=self.title_margin_y
        )

        segments = list(segments)
        if not segments:
            return LayoutResult(placements=[], exclusion_rect=exclusion_rect)

        if rng is None:
            rng = random.Random(seed)

        zones = assign_zones(len(segments), ZoneStrategy(strategy or self.strategy), rng)
        state = _SearchState(grid=GridOccupancyTracker(canvas, self.grid_rows, self.grid_cols))

        placements = []
        diagnostics = []
        for index, text in enumerate(segments):
            placement, diagnostic = self._place_segment(
                text, zones[index], canvas, exclusion_rect, font_range, rng, state
            )
            placements.append(placement)
            diagnostics.append(diagnostic)

        exhausted = sum(1 for d in diagnostics if d.exhausted)
        logger.info(
            f"Laid out {len(placements)} segment(s) on {canvas.width}x{canvas.height}"
            + (f" ({exhausted} fell back after exhausting attempts)" if exhausted else "")
        )

        return LayoutResult(
            placements=placements,
            exclusion_rect=exclusion_rect,
            diagnostics=diagnostics,
        )

    def _validate(self, canvas: CanvasFrame, font_range: FontSizeRange) -> None:
        if canvas.width <= 0 or canvas.height <= 0:
            raise InvalidDimensionsError(canvas.width, canvas.height)
        if font_range.min > font_range.max:
            raise InvalidFontRangeError(font_range.min, font_range.max)

    def _place_segment(
        self,
        text: str,
        zone: Zone,
        canvas: CanvasFrame,
        exclusion_rect: ExclusionRect,
        font_range: FontSizeRange,
        rng: random.Random,
        state: _SearchState
    ) -> Tuple[PlacedText, PlacementDiagnostics]:
        """
        Bounded retry search for one segment

        Title-overlapping candidates never compete for "best"; among the
        rest the lowest overlap count wins, first found on ties.
        """
        font_size = rng.randint(font_range.min, font_range.max)
        orientation = choose_orientation(zone, rng, self.vertical_probability)

        band = zone_band(zone, canvas, self.padding, canvas.height * self.frame_ratio)
        if self.use_grid:
            target_cell = state.grid.least_populated_cell(zone, rng)
            band = _intersect_band(band, state.grid.cell_bounds(target_cell))

        best: Optional[_Candidate] = None
        best_title_overlap: Optional[_Candidate] = None
        last: Optional[_Candidate] = None
        accepted: Optional[_Candidate] = None
        attempts = 0

        while attempts < self.max_attempts:
            attempts += 1
            x, y = self._sample_candidate(band, rng)
            box = estimate_bounding_box(x, y, text, font_size, orientation)
            last = _Candidate(x, y, box)

            if overlaps_title(box, exclusion_rect):
                if self.allow_title_overlap_on_exhaustion:
                    last.overlap_count = count_overlaps(box, state.placed_boxes)
                    if best_title_overlap is None or last.overlap_count < best_title_overlap.overlap_count:
                        best_title_overlap = last
                continue

            last.overlap_count = count_overlaps(box, state.placed_boxes)
            if best is None or last.overlap_count < best.overlap_count:
                best = last

            if last.overlap_count == 0:
                accepted = last
                break

        exhausted = accepted is None
        if exhausted:
            if best is not None:
                accepted = best
            elif self.allow_title_overlap_on_exhaustion:
                accepted = best_title_overlap
            else:
                accepted = self._push_clear_of_title(last, zone, canvas, exclusion_rect, state)
            logger.warning(
                f"Segment '{text}' ({zone.value}) exhausted {self.max_attempts} attempts, "
                f"accepting fallback with {accepted.overlap_count} overlap(s)"
            )

        title_overlap = overlaps_title(accepted.box, exclusion_rect)
        state.placed_boxes.append(accepted.box)
        cell = state.grid.record(accepted.x, accepted.y, zone)

        logger.debug(
            f"Placed '{text}' in {zone.value} at ({accepted.x:.1f}, {accepted.y:.1f}) "
            f"size={font_size} {orientation.value} cell={cell} attempts={attempts}"
        )

        placement = PlacedText(
            text=text,
            font_size=font_size,
            x=accepted.x,
            y=accepted.y,
            orientation=orientation,
        )
        diagnostic = PlacementDiagnostics(
            zone=zone,
            attempts=attempts,
            overlap_count=accepted.overlap_count,
            exhausted=exhausted,
            title_overlap=title_overlap,
        )
        return placement, diagnostic

    def _sample_candidate(self, band: Band, rng: random.Random) -> Tuple[float, float]:
        """Uniform random anchor inside a band"""
        x_min, x_max, y_min, y_max = band
        return rng.uniform(x_min, x_max), rng.uniform(y_min, y_max)

    def _push_clear_of_title(
        self,
        candidate: _Candidate,
        zone: Zone,
        canvas: CanvasFrame,
        exclusion_rect: ExclusionRect,
        state: _SearchState
    ) -> _Candidate:
        """
        Move a candidate just outside the title on its zone's side

        The anchor is clamped to the canvas, so on a canvas too small to fit
        the box beside the title the result may still overlap it.
        """
        box = candidate.box
        x, y = candidate.x, candidate.y

        if zone == Zone.TOP:
            y = exclusion_rect.top - box.height - 1
        elif zone == Zone.BOTTOM:
            y = exclusion_rect.bottom + 1
        elif zone == Zone.LEFT:
            x = exclusion_rect.left - box.width - 1
        else:
            x = exclusion_rect.right + 1

        x = min(max(x, 0.0), float(canvas.width))
        y = min(max(y, 0.0), float(canvas.height))

        moved = _Candidate(
            x=x,
            y=y,
            box=Rect(left=x, right=x + box.width, top=y, bottom=y + box.height),
        )
        moved.overlap_count = count_overlaps(moved.box, state.placed_boxes)
        return moved


def _intersect_band(band: Band, cell: Band) -> Band:
    """Band clipped to a grid cell, per axis; empty axes keep the full band"""
    x_min, x_max = max(band[0], cell[0]), min(band[1], cell[1])
    if x_min > x_max:
        x_min, x_max = band[0], band[1]

    y_min, y_max = max(band[2], cell[2]), min(band[3], cell[3])
    if y_min > y_max:
        y_min, y_max = band[2], band[3]

    return x_min, x_max, y_min, y_max


def layout_segments(
    canvas: CanvasFrame,
    title: TitleSpec,
    segments: Sequence[str],
    font_range: FontSizeRange,
    strategy: Optional[str] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    engine: Optional[LayoutEngine] = None
) -> List[PlacedText]:
    """
    Compute scattered placements for segments around a title

    Convenience wrapper over LayoutEngine.layout() that returns only the
    placements.
    """
    engine = engine or LayoutEngine()
    result = engine.layout(
        canvas, title, segments, font_range, strategy=strategy, seed=seed, rng=rng
    )
    return result.placements
