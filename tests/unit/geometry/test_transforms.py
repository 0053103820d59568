"""Unit tests for coordinate transforms.

Tests display -> native box mapping and dimension scaling.
"""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pixelfit.geometry import (
    NativeBox,
    Region,
    Size,
    region_display_to_native,
    scale_dimensions,
    scale_factors,
)


class TestScaleFactors:
    """Tests for scale_factors."""

    def test_uniform_scale(self) -> None:
        display = Size(width=200, height=200)
        factors = scale_factors(display, Size(width=400, height=400))
        assert factors == (2.0, 2.0)

    def test_independent_axes(self) -> None:
        display = Size(width=500, height=200)
        factors = scale_factors(display, Size(width=1000, height=300))
        assert factors == (2.0, 1.5)


class TestRegionDisplayToNative:
    """Tests for region_display_to_native."""

    def test_double_resolution(self) -> None:
        box = region_display_to_native(
            Region(x=0, y=0, width=100, height=100),
            Size(width=200, height=200),
            Size(width=400, height=400),
        )
        assert box == NativeBox(x=0, y=0, width=200, height=200)

    def test_fractional_result_is_not_rounded(self) -> None:
        box = region_display_to_native(
            Region(x=1, y=1, width=3, height=3),
            Size(width=3, height=3),
            Size(width=4, height=4),
        )
        assert box.x == pytest.approx(4 / 3)
        assert box.width == pytest.approx(4.0)

    def test_identity_when_display_equals_native(self) -> None:
        size = Size(width=640, height=480)
        box = region_display_to_native(Region(x=5, y=6, width=7, height=8), size, size)
        assert box.to_tuple() == (5.0, 6.0, 7.0, 8.0)

    @given(
        x=st.integers(min_value=0, max_value=500),
        y=st.integers(min_value=0, max_value=500),
        width=st.integers(min_value=1, max_value=500),
        height=st.integers(min_value=1, max_value=500),
        native_width=st.integers(min_value=1, max_value=20000),
        native_height=st.integers(min_value=1, max_value=20000),
    )
    def test_box_inside_display_maps_inside_native(
        self,
        x: int,
        y: int,
        width: int,
        height: int,
        native_width: int,
        native_height: int,
    ) -> None:
        region = Region(x=x, y=y, width=width, height=height)
        display = Size(width=x + width, height=y + height)
        native = Size(width=native_width, height=native_height)

        box = region_display_to_native(region, display, native)

        assert box.right == pytest.approx(native_width)
        assert box.bottom == pytest.approx(native_height)


class TestScaleDimensions:
    """Tests for scale_dimensions."""

    def test_floor_by_default(self) -> None:
        assert scale_dimensions(1000, 750, 0.333) == (333, 249)

    def test_round_up(self) -> None:
        assert scale_dimensions(1000, 750, 0.333, round_up=True) == (333, 250)

    def test_never_below_one_pixel(self) -> None:
        assert scale_dimensions(10, 10, 0.01) == (1, 1)

    @given(
        width=st.integers(min_value=1, max_value=10000),
        height=st.integers(min_value=1, max_value=10000),
        factor=st.floats(min_value=0.01, max_value=4.0),
    )
    def test_floor_and_ceil_bracket_exact_value(
        self, width: int, height: int, factor: float
    ) -> None:
        low = scale_dimensions(width, height, factor)
        high = scale_dimensions(width, height, factor, round_up=True)
        assert low[0] <= high[0]
        assert low[0] == max(1, math.floor(width * factor))
        assert high[1] == max(1, math.ceil(height * factor))
