"""
Tests for LayoutEngine and layout_segments
"""
import random
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import pytest

from scatter import (
    CanvasFrame,
    TitleSpec,
    FontSizeRange,
    Orientation,
    Zone,
    ZoneStrategy,
    layout_segments,
)
from scatter.geometry import estimate_bounding_box, overlaps_title
from scatter.grid import GridOccupancyTracker
from utils.exceptions import InvalidDimensionsError, InvalidFontRangeError, LayoutConfigError


def _box(placement):
    return estimate_bounding_box(
        placement.x, placement.y, placement.text, placement.font_size, placement.orientation
    )


class TestCardinality:
    """One placement per segment, in input order"""

    @pytest.mark.parametrize("strategy", list(ZoneStrategy))
    def test_texts_match_input_order(self, engine, canvas, title, font_range, segments, strategy):
        placements = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=11).placements

        assert [p.text for p in placements] == segments

    def test_duplicate_segments_kept(self, engine, canvas, title, font_range):
        segments = ["Art", "Art", "Art"]
        placements = engine.layout(canvas, title, segments, font_range, seed=2).placements

        assert [p.text for p in placements] == segments

    def test_empty_segment_list(self, engine, canvas, title, font_range, exploding_rng):
        """Empty input returns an empty list without sampling"""
        result = engine.layout(canvas, title, [], font_range, rng=exploding_rng)

        assert result.placements == []
        assert result.diagnostics == []


class TestBounds:
    """Anchors stay on the canvas"""

    @pytest.mark.parametrize("strategy", list(ZoneStrategy))
    @pytest.mark.parametrize("seed", range(5))
    def test_anchors_inside_canvas(self, engine, canvas, title, font_range, segments, strategy, seed):
        placements = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=seed).placements

        for p in placements:
            assert 0 <= p.x <= canvas.width
            assert 0 <= p.y <= canvas.height

    @pytest.mark.parametrize("size", [(1080, 1080), (1080, 1350), (200, 100), (50, 50)])
    def test_other_canvas_sizes(self, engine, title, font_range, segments, size):
        canvas = CanvasFrame(*size)
        placements = engine.layout(canvas, title, segments, font_range, seed=4).placements

        assert len(placements) == len(segments)
        for p in placements:
            assert 0 <= p.x <= canvas.width
            assert 0 <= p.y <= canvas.height


class TestDeterminism:
    """Seeded calls are reproducible"""

    @pytest.mark.parametrize("strategy", list(ZoneStrategy))
    def test_same_seed_same_output(self, engine, canvas, title, font_range, segments, strategy):
        first = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=1234).placements
        second = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=1234).placements

        assert first == second

    def test_seed_equals_injected_rng(self, engine, canvas, title, font_range, segments):
        by_seed = engine.layout(canvas, title, segments, font_range, seed=77).placements
        by_rng = engine.layout(canvas, title, segments, font_range, rng=random.Random(77)).placements

        assert by_seed == by_rng

    def test_different_seeds_differ(self, engine, canvas, title, font_range, segments):
        first = engine.layout(canvas, title, segments, font_range, seed=1).placements
        second = engine.layout(canvas, title, segments, font_range, seed=2).placements

        assert first != second

    def test_global_random_untouched(self, engine, canvas, title, font_range, segments):
        """The module-level random state is never consumed"""
        random.seed(5)
        expected = random.random()

        random.seed(5)
        engine.layout(canvas, title, segments, font_range, seed=3)
        assert random.random() == expected

    def test_calls_do_not_share_state(self, engine, canvas, title, font_range, segments):
        """Interleaved and concurrent calls on one engine do not interfere"""
        baseline = engine.layout(canvas, title, segments, font_range, seed=8).placements
        engine.layout(canvas, title, segments[:3], font_range, seed=9)
        assert engine.layout(canvas, title, segments, font_range, seed=8).placements == baseline

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(
                lambda _: engine.layout(canvas, title, segments, font_range, seed=8).placements,
                range(8)
            ))
        assert all(r == baseline for r in results)

    def test_wrapper_matches_engine(self, engine, canvas, title, font_range, segments):
        placements = layout_segments(canvas, title, segments, font_range, "proportional", seed=6, engine=engine)
        result = engine.layout(canvas, title, segments, font_range, strategy="proportional", seed=6)

        assert placements == result.placements


class TestTitleAvoidance:
    """Boxes avoid the exclusion rect unless the attempt budget ran out"""

    @pytest.mark.parametrize("strategy", list(ZoneStrategy))
    @pytest.mark.parametrize("seed", range(5))
    def test_boxes_clear_title(self, engine, canvas, title, font_range, segments, strategy, seed):
        result = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=seed)

        for placement, diagnostic in zip(result.placements, result.diagnostics):
            if diagnostic.exhausted:
                continue
            assert not overlaps_title(_box(placement), result.exclusion_rect)
            assert not diagnostic.title_overlap

    def test_forced_exhaustion_is_flagged(self, make_engine, canvas, font_range, segments):
        """A title covering the whole canvas exhausts every segment"""
        engine = make_engine(max_attempts=5)
        huge = TitleSpec(lines=["X" * 20] * 6, font_size=200)

        result = engine.layout(canvas, huge, segments, font_range, seed=1)

        assert len(result.placements) == len(segments)
        assert result.exhausted_indices == list(range(len(segments)))
        assert all(d.attempts == 5 for d in result.diagnostics)
        assert all(d.title_overlap for d in result.diagnostics)
        for p in result.placements:
            assert 0 <= p.x <= canvas.width
            assert 0 <= p.y <= canvas.height

    def test_exhaustion_with_title_overlap_allowed(self, make_engine, canvas, font_range, segments):
        engine = make_engine(max_attempts=3, allow_title_overlap_on_exhaustion=True)
        huge = TitleSpec(lines=["X" * 20] * 6, font_size=200)

        result = engine.layout(canvas, huge, segments, font_range, seed=1)

        assert len(result.placements) == len(segments)
        assert all(d.exhausted and d.title_overlap for d in result.diagnostics)

    def test_fallback_pushes_clear_of_title(self, make_engine, font_range):
        """Without title overlap allowed, the fallback moves beside the title"""
        canvas = CanvasFrame(width=1280, height=720)
        # Exclusion rect covers the top band entirely but leaves room above it
        title = TitleSpec(lines=["X" * 20], font_size=100)
        engine = make_engine(
            strategy="proportional", max_attempts=1, use_grid=False,
            padding=300, frame_ratio=0.05, title_margin_y=0
        )

        result = engine.layout(canvas, title, ["A"], FontSizeRange(30, 30), seed=0)
        placement, diagnostic = result.placements[0], result.diagnostics[0]

        assert diagnostic.exhausted
        assert not diagnostic.title_overlap
        assert _box(placement).bottom < result.exclusion_rect.top


class TestOverlapTolerance:
    """Accepted placements overlap nothing unless the budget ran out"""

    @pytest.mark.parametrize("seed", range(5))
    def test_no_overlaps_without_exhaustion(self, engine, canvas, title, font_range, segments, seed):
        result = engine.layout(canvas, title, segments, font_range, seed=seed)

        for diagnostic in result.diagnostics:
            if not diagnostic.exhausted:
                assert diagnostic.overlap_count == 0

    def test_crowded_canvas_falls_back_silently(self, make_engine, title):
        """Too many segments for the space: no error, best candidates kept"""
        engine = make_engine(max_attempts=10)
        canvas = CanvasFrame(width=400, height=300)
        segments = [f"segment{i}" for i in range(30)]

        result = engine.layout(canvas, title, segments, FontSizeRange(40, 60), seed=3)

        assert len(result.placements) == 30
        assert result.exhausted_indices


class TestGridBalance:
    """Grid biasing spreads each zone's placements along its edge"""

    @pytest.mark.parametrize("strategy", ["proportional", "shuffled"])
    @pytest.mark.parametrize("seed", range(10))
    def test_each_zone_balanced_on_its_edge(self, engine, canvas, title, font_range, segments, strategy, seed):
        """Ten segments: every zone gets at most K of them, so its edge differs by at most one"""
        result = engine.layout(canvas, title, segments, font_range, strategy=strategy, seed=seed)

        tracker = GridOccupancyTracker(canvas, rows=3, cols=4)
        for p, d in zip(result.placements, result.diagnostics):
            tracker.record(p.x, p.y, d.zone)

        per_zone = Counter(d.zone for d in result.diagnostics)
        for zone in Zone:
            counts = tracker.edge_counts(zone)
            assert sum(counts) == per_zone[zone]
            if per_zone[zone] <= len(counts):
                assert max(counts) - min(counts) <= 1, (zone, counts)

    def test_corner_placements_do_not_skew_other_edges(self, engine, canvas, title, font_range):
        """Side segments in corner cells leave the top edge spread intact"""
        segments = [f"w{i}" for i in range(10)]
        result = engine.layout(canvas, title, segments, font_range, strategy="proportional", seed=0)

        top = [p for p, d in zip(result.placements, result.diagnostics) if d.zone == Zone.TOP]
        assert len(top) == 3
        assert len({int(p.x // 320) for p in top}) == 3

    def test_top_segments_spread_across_columns(self, make_engine, canvas, title, font_range):
        """Four top segments land in four different columns"""
        engine = make_engine(strategy="proportional")
        # 30% of 10 -> first 3 segments go top; use 13 so ceil(3.9) = 4
        segments = [f"w{i}" for i in range(13)]

        result = engine.layout(canvas, title, segments, font_range, seed=21)
        top = [p for p, d in zip(result.placements, result.diagnostics) if d.zone == Zone.TOP]

        assert len(top) == 4
        assert len({int(p.x // 320) for p in top}) == 4


class TestAssignmentAndSizing:
    """Zone counts, orientation and font sizes"""

    def test_proportional_zone_counts(self, engine, canvas, title):
        """8 single characters: 3 top, 3 bottom, 2 left, 0 right"""
        segments = list("ABCDEFGH")
        result = engine.layout(canvas, title, segments, FontSizeRange(30, 66),
                               strategy=ZoneStrategy.PROPORTIONAL, seed=0)

        counts = Counter(d.zone for d in result.diagnostics)
        assert counts == {Zone.TOP: 3, Zone.BOTTOM: 3, Zone.LEFT: 2}

    def test_orientation_follows_zone(self, engine, canvas, title, font_range, segments):
        result = engine.layout(canvas, title, segments, font_range, seed=5)

        for placement, diagnostic in zip(result.placements, result.diagnostics):
            expected = (
                Orientation.VERTICAL if diagnostic.zone in (Zone.LEFT, Zone.RIGHT)
                else Orientation.HORIZONTAL
            )
            assert placement.orientation == expected

    def test_font_sizes_in_range(self, engine, canvas, title, font_range, segments):
        placements = engine.layout(canvas, title, segments, font_range, seed=5).placements

        assert all(30 <= p.font_size <= 66 for p in placements)
        assert all(isinstance(p.font_size, int) for p in placements)

    def test_fixed_font_size(self, engine, canvas, title, segments):
        placements = engine.layout(canvas, title, segments, FontSizeRange(42, 42), seed=5).placements

        assert {p.font_size for p in placements} == {42}


class TestValidation:
    """Invalid configuration fails before any sampling"""

    def test_invalid_font_range(self, engine, canvas, title, segments, exploding_rng):
        with pytest.raises(InvalidFontRangeError) as excinfo:
            engine.layout(canvas, title, segments, FontSizeRange(min=50, max=10), rng=exploding_rng)

        assert excinfo.value.min_size == 50
        assert excinfo.value.max_size == 10

    @pytest.mark.parametrize("size", [(0, 720), (1280, 0), (-1, 720), (1280, -5)])
    def test_invalid_dimensions(self, engine, title, font_range, segments, exploding_rng, size):
        with pytest.raises(InvalidDimensionsError):
            engine.layout(CanvasFrame(*size), title, segments, font_range, rng=exploding_rng)

    def test_validation_applies_to_empty_input(self, engine, title, font_range):
        with pytest.raises(LayoutConfigError):
            engine.layout(CanvasFrame(0, 0), title, [], font_range)

    def test_errors_are_value_errors(self, engine, canvas, title, segments):
        with pytest.raises(ValueError):
            engine.layout(canvas, title, segments, FontSizeRange(min=2, max=1))

    def test_invalid_attempt_budget(self, make_engine):
        with pytest.raises(ValueError):
            make_engine(max_attempts=0)

    @pytest.mark.parametrize("dims", [{"grid_rows": 0}, {"grid_cols": 0}])
    def test_invalid_grid_dimensions(self, make_engine, dims):
        """An explicit zero is rejected, not replaced by the default"""
        with pytest.raises(ValueError):
            make_engine(**dims)
