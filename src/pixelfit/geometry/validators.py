"""Geometry validation utilities for pixelfit.

This module provides bounds checking and region clamping for crop boxes
drawn in display space, before they are mapped onto the source raster.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from pixelfit.exceptions import InvalidRegionError
from pixelfit.geometry.primitives import Region, Size

RegionLike = Region | Mapping[str, float] | Sequence[float]
SizeLike = Size | Mapping[str, int] | Sequence[int]


def coerce_region(value: RegionLike) -> Region:
    """Build a Region from a model, mapping or (x, y, width, height) tuple.

    Raises:
        InvalidRegionError: If the values are negative, non-positive in
            size, or otherwise not a rectangle.
    """
    if isinstance(value, Region):
        return value
    try:
        if isinstance(value, Mapping):
            return Region.model_validate(dict(value))
        return Region.from_tuple(tuple(value))  # type: ignore[arg-type]
    except (ValidationError, ValueError, IndexError, TypeError) as e:
        raise InvalidRegionError(f"Invalid crop region {value!r}: {e}") from e


def coerce_size(value: SizeLike) -> Size:
    """Build a Size from a model, mapping or (width, height) tuple.

    Raises:
        InvalidRegionError: If either dimension is not positive.
    """
    if isinstance(value, Size):
        return value
    try:
        if isinstance(value, Mapping):
            return Size.model_validate(dict(value))
        return Size.from_tuple(tuple(value))  # type: ignore[arg-type]
    except (ValidationError, ValueError, IndexError, TypeError) as e:
        raise InvalidRegionError(f"Invalid display dimensions {value!r}: {e}") from e


class GeometryValidator:
    """Validator for crop boxes against display-space bounds.

    The validator is stateless and operates purely on the inputs provided
    to each method.
    """

    def validate(
        self,
        region: Region,
        bounds: Size,
        *,
        strict: bool = True,
    ) -> bool:
        """Validate that a region is within bounds.

        Checks that:
        1. region.right <= bounds.width
        2. region.bottom <= bounds.height

        Note: Region x, y are already constrained to >= 0 by Pydantic.

        Args:
            region: The region to validate.
            bounds: The display-space dimensions the region was drawn on.
            strict: If True, raise InvalidRegionError on failure.
                If False, return False instead.

        Returns:
            True if the region is valid within bounds.

        Raises:
            InvalidRegionError: If strict=True and region exceeds bounds.
        """
        is_valid = region.right <= bounds.width and region.bottom <= bounds.height

        if not is_valid and strict:
            violations: list[str] = []
            if region.right > bounds.width:
                violations.append(
                    f"right edge ({region.right:g}) exceeds width ({bounds.width})"
                )
            if region.bottom > bounds.height:
                violations.append(
                    f"bottom edge ({region.bottom:g}) exceeds height ({bounds.height})"
                )
            raise InvalidRegionError(
                f"Region out of bounds: {'; '.join(violations)}",
                region=region.to_tuple(),
                bounds=bounds.to_tuple(),
            )

        return is_valid

    def clamp_region(self, region: Region, bounds: Size) -> Region:
        """Clamp a region to valid bounds.

        Used when a crop box is laid out or dragged so that part of it
        would fall outside the preview. The clamping strategy ensures:

        1. x, y are within [0, bounds - 1]
        2. width, height respect the clamped origin
        3. Minimum dimension of 1px is preserved

        Args:
            region: The region to clamp.
            bounds: The maximum allowed dimensions.

        Returns:
            A new Region clamped to valid bounds.

        Example:
            >>> validator = GeometryValidator()
            >>> bounds = Size(width=600, height=400)
            >>> clamped = validator.clamp_region(
            ...     Region(x=500, y=0, width=200, height=100), bounds
            ... )
            >>> clamped.right
            600
        """
        clamped_x = max(0, min(region.x, bounds.width - 1))
        clamped_y = max(0, min(region.y, bounds.height - 1))

        max_remaining_width = bounds.width - clamped_x
        max_remaining_height = bounds.height - clamped_y

        clamped_width = max(1, min(region.width, max_remaining_width))
        clamped_height = max(1, min(region.height, max_remaining_height))

        return Region(
            x=clamped_x,
            y=clamped_y,
            width=clamped_width,
            height=clamped_height,
        )
