"""Geometry primitives for pixelfit.

This module provides immutable Pydantic models for sizes and rectangles.
Two coordinate spaces are in play:

- Display space: pixels of the on-screen scaled preview. Crop boxes drawn
  by a user live here; centring and dragging leave them on fractional
  coordinates.
- Native space: pixels of the decoded source raster. Display-space boxes
  are mapped here at crop time without rounding.

All coordinates follow the convention where (0, 0) is the top-left corner.
"""

from __future__ import annotations

import math
from typing import Self

from pydantic import BaseModel, Field


class Size(BaseModel, frozen=True):
    """A 2D size representing width and height.

    Both dimensions must be strictly positive (> 0).

    Attributes:
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    def to_tuple(self) -> tuple[int, int]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[int, int]) -> Self:
        """Create Size from (width, height) tuple."""
        return cls(width=size[0], height=size[1])


class Region(BaseModel, frozen=True):
    """A rectangular crop box in display-space pixels (may be fractional).

    The region is defined as:
    - Top-left: (x, y)
    - Bottom-right: (x + width, y + height) [exclusive]

    Attributes:
        x: Left edge X coordinate (>= 0).
        y: Top edge Y coordinate (>= 0).
        width: Horizontal extent in pixels (> 0).
        height: Vertical extent in pixels (> 0).
    """

    x: float = Field(..., ge=0, description="Left edge X coordinate")
    y: float = Field(..., ge=0, description="Top edge Y coordinate")
    width: float = Field(..., gt=0, description="Width in pixels")
    height: float = Field(..., gt=0, description="Height in pixels")

    @property
    def right(self) -> float:
        """Return the X coordinate of the right edge (exclusive)."""
        return self.x + self.width

    @property
    def bottom(self) -> float:
        """Return the Y coordinate of the bottom edge (exclusive)."""
        return self.y + self.height

    def canvas_size(self) -> Size:
        """Return the whole-pixel output canvas for this box.

        Fractional extents are truncated, never below 1 pixel.
        """
        return Size(
            width=max(1, math.floor(self.width)),
            height=max(1, math.floor(self.height)),
        )

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_tuple(cls, bbox: tuple[float, float, float, float]) -> Self:
        """Create Region from (x, y, width, height) tuple."""
        return cls(x=bbox[0], y=bbox[1], width=bbox[2], height=bbox[3])


class NativeBox(BaseModel, frozen=True):
    """A sampling rectangle in native (source raster) coordinates.

    Produced by scaling a display-space Region; coordinates are floats so
    that the resampler can honour sub-pixel offsets.
    """

    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def to_pil_box(self) -> tuple[float, float, float, float]:
        """Convert to Pillow's (left, upper, right, lower) box convention."""
        return (self.x, self.y, self.right, self.bottom)
