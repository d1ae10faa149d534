"""
Shared pytest fixtures for Scatter Thumbnail Generator tests
"""
import random

import pytest

from scatter import CanvasFrame, TitleSpec, FontSizeRange, LayoutEngine


class ExplodingRandom(random.Random):
    """Random source that fails the test if anything draws from it"""

    def random(self):
        raise AssertionError("random source was used")

    def uniform(self, a, b):
        raise AssertionError("random source was used")

    def randint(self, a, b):
        raise AssertionError("random source was used")

    def choice(self, seq):
        raise AssertionError("random source was used")

    def shuffle(self, x):
        raise AssertionError("random source was used")


@pytest.fixture
def canvas() -> CanvasFrame:
    """16:9 canvas"""
    return CanvasFrame(width=1280, height=720)


@pytest.fixture
def title() -> TitleSpec:
    return TitleSpec(lines=["TEST"], font_size=100)


@pytest.fixture
def font_range() -> FontSizeRange:
    return FontSizeRange(min=30, max=66)


@pytest.fixture
def segments():
    return [
        "Design", "Creative", "Inspiration", "Ideas", "Style",
        "Modern", "Minimal", "Concept", "Vision", "Art",
    ]


@pytest.fixture
def make_engine():
    """
    Build a LayoutEngine with explicit defaults so .env overrides
    cannot change test outcomes
    """
    def _make(**overrides):
        options = dict(
            strategy="shuffled",
            max_attempts=120,
            use_grid=True,
            grid_rows=3,
            grid_cols=4,
            padding=30,
            frame_ratio=0.35,
            title_margin_x=100,
            title_margin_y=80,
            vertical_probability=1.0,
            allow_title_overlap_on_exhaustion=False,
        )
        options.update(overrides)
        return LayoutEngine(**options)

    return _make


@pytest.fixture
def engine(make_engine) -> LayoutEngine:
    return make_engine()


@pytest.fixture
def exploding_rng() -> ExplodingRandom:
    return ExplodingRandom()
