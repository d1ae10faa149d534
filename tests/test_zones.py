"""
Tests for zone assignment, orientation and zone bands
"""
import random
from collections import Counter

import pytest

from scatter.types import CanvasFrame, Zone, Orientation, ZoneStrategy
from scatter.zones import assign_zones, choose_orientation, zone_band


class TestProportionalSplit:
    """Tests for the 30/30/20/remainder split"""

    def test_eight_segments(self, exploding_rng):
        """ceil(2.4)=3 top, 3 bottom, ceil(1.6)=2 left, nothing left for right"""
        zones = assign_zones(8, ZoneStrategy.PROPORTIONAL, exploding_rng)

        assert Counter(zones) == {Zone.TOP: 3, Zone.BOTTOM: 3, Zone.LEFT: 2}
        assert zones == [Zone.TOP] * 3 + [Zone.BOTTOM] * 3 + [Zone.LEFT] * 2

    def test_ten_segments_exact_tenths(self, exploding_rng):
        """30% of 10 is exactly 3, not 4"""
        zones = assign_zones(10, ZoneStrategy.PROPORTIONAL, exploding_rng)

        assert Counter(zones) == {Zone.TOP: 3, Zone.BOTTOM: 3, Zone.LEFT: 2, Zone.RIGHT: 2}

    def test_single_segment(self, exploding_rng):
        assert assign_zones(1, ZoneStrategy.PROPORTIONAL, exploding_rng) == [Zone.TOP]

    def test_three_segments_capped(self, exploding_rng):
        """Blocks never exceed the segment count"""
        zones = assign_zones(3, ZoneStrategy.PROPORTIONAL, exploding_rng)

        assert zones == [Zone.TOP, Zone.BOTTOM, Zone.LEFT]

    def test_empty(self, exploding_rng):
        assert assign_zones(0, ZoneStrategy.PROPORTIONAL, exploding_rng) == []


class TestShuffledRoundRobin:
    """Tests for the shuffled round-robin strategy"""

    @pytest.mark.parametrize("count", [4, 7, 10, 13])
    def test_balanced_counts(self, count):
        """Zone sizes differ by at most one"""
        zones = assign_zones(count, ZoneStrategy.SHUFFLED, random.Random(3))
        sizes = [Counter(zones)[zone] for zone in Zone]

        assert len(zones) == count
        assert max(sizes) - min(sizes) <= 1

    def test_seeded_is_reproducible(self):
        first = assign_zones(10, ZoneStrategy.SHUFFLED, random.Random(99))
        second = assign_zones(10, ZoneStrategy.SHUFFLED, random.Random(99))
        assert first == second

    def test_accepts_string_strategy(self):
        zones = assign_zones(4, "shuffled", random.Random(1))
        assert sorted(zones) == sorted(Zone)


class TestBlocks:
    """Tests for contiguous blocks of ceil(N/4)"""

    def test_eight_segments(self, exploding_rng):
        zones = assign_zones(8, ZoneStrategy.BLOCKS, exploding_rng)
        assert zones == [Zone.TOP] * 2 + [Zone.BOTTOM] * 2 + [Zone.LEFT] * 2 + [Zone.RIGHT] * 2

    def test_five_segments(self, exploding_rng):
        zones = assign_zones(5, ZoneStrategy.BLOCKS, exploding_rng)
        assert zones == [Zone.TOP, Zone.TOP, Zone.BOTTOM, Zone.BOTTOM, Zone.LEFT]


class TestOrientation:
    """Tests for choose_orientation"""

    @pytest.mark.parametrize("zone", [Zone.TOP, Zone.BOTTOM])
    def test_top_bottom_horizontal(self, zone, exploding_rng):
        assert choose_orientation(zone, exploding_rng, 0.7) == Orientation.HORIZONTAL

    @pytest.mark.parametrize("zone", [Zone.LEFT, Zone.RIGHT])
    def test_sides_vertical_without_draw(self, zone, exploding_rng):
        """The strict rule makes no random draw"""
        assert choose_orientation(zone, exploding_rng, 1.0) == Orientation.VERTICAL

    def test_zero_probability_always_horizontal(self):
        rng = random.Random(0)
        results = {choose_orientation(Zone.LEFT, rng, 0.0) for _ in range(50)}
        assert results == {Orientation.HORIZONTAL}

    def test_loose_rule_mixes(self):
        rng = random.Random(0)
        results = Counter(choose_orientation(Zone.RIGHT, rng, 0.7) for _ in range(500))
        assert results[Orientation.VERTICAL] > results[Orientation.HORIZONTAL] > 0


class TestZoneBand:
    """Tests for zone_band geometry"""

    def test_bands_on_16_9(self, canvas):
        thickness = 720 * 0.35

        assert zone_band(Zone.TOP, canvas, 30, thickness) == pytest.approx((30, 1250, 30, 30 + thickness))
        assert zone_band(Zone.BOTTOM, canvas, 30, thickness) == pytest.approx((30, 1250, 690 - thickness, 690))
        assert zone_band(Zone.LEFT, canvas, 30, thickness) == pytest.approx((30, 30 + thickness * 0.6, 30, 690))
        assert zone_band(Zone.RIGHT, canvas, 30, thickness) == pytest.approx((1250 - thickness * 0.6, 1250, 30, 690))

    @pytest.mark.parametrize("zone", list(Zone))
    def test_small_canvas_clamped(self, zone):
        """Padding larger than the canvas still yields in-canvas ranges"""
        small = CanvasFrame(width=40, height=20)
        x_min, x_max, y_min, y_max = zone_band(zone, small, 30, 20 * 0.35)

        assert 0 <= x_min <= x_max <= 40
        assert 0 <= y_min <= y_max <= 20
