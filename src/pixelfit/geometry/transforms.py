"""Coordinate transformation utilities for pixelfit.

Coordinate Systems:
    - Native: pixel coordinates of the decoded source raster
    - Display: pixel coordinates of the scaled on-screen preview

Transform Direction Conventions:
    - display -> native: multiply by native/display scale factor
    - native dimensions -> scaled dimensions: multiply by a linear factor

No rounding happens when mapping boxes into native space; the resampler
consumes the fractional box directly.
"""

from __future__ import annotations

import math

from pixelfit.geometry.primitives import NativeBox, Region, Size

__all__ = [
    "region_display_to_native",
    "scale_dimensions",
    "scale_factors",
]


def scale_factors(display: Size, native: Size) -> tuple[float, float]:
    """Return the (x, y) factors mapping display pixels to native pixels."""
    return (native.width / display.width, native.height / display.height)


def region_display_to_native(
    region: Region,
    display: Size,
    native: Size,
) -> NativeBox:
    """Map a display-space crop box onto the native raster.

    Each of x, y, width and height is multiplied by the respective axis
    scale factor.

    Args:
        region: Crop box in display-space pixels.
        display: Dimensions of the display space the box was drawn on.
        native: Dimensions of the source raster.

    Returns:
        NativeBox describing the source sampling rectangle.

    Example:
        >>> region_display_to_native(
        ...     Region(x=0, y=0, width=100, height=100),
        ...     Size(width=200, height=200),
        ...     Size(width=400, height=400),
        ... ).to_tuple()
        (0.0, 0.0, 200.0, 200.0)
    """
    scale_x, scale_y = scale_factors(display, native)
    return NativeBox(
        x=region.x * scale_x,
        y=region.y * scale_y,
        width=region.width * scale_x,
        height=region.height * scale_y,
    )


def scale_dimensions(
    width: int,
    height: int,
    factor: float,
    *,
    round_up: bool = False,
) -> tuple[int, int]:
    """Scale both dimensions by the same linear factor.

    Args:
        width: Width in pixels.
        height: Height in pixels.
        factor: Linear scale factor applied to each axis.
        round_up: Use ceiling instead of floor rounding.

    Returns:
        (width, height) with each axis at least 1 pixel.
    """
    rounder = math.ceil if round_up else math.floor
    return (
        max(1, int(rounder(width * factor))),
        max(1, int(rounder(height * factor))),
    )
