"""Preview layout helpers for interactive cropping.

These functions lay out and edit a crop box in display space on a scaled
preview of the image. region_physical_size reads the print size back off
a box after it has been moved, resized or clamped.
"""

from __future__ import annotations

import math
from enum import Enum

from pixelfit.config import settings
from pixelfit.geometry.primitives import Region, Size
from pixelfit.geometry.validators import GeometryValidator
from pixelfit.units import PhysicalDimension, Unit

MIN_CROP_BOX = 10.0  # Smallest side a corner drag may leave, in display pixels


def display_scale(image_size: Size, container: Size) -> float:
    """Return the uniform scale that fits image_size inside container."""
    return min(
        container.width / image_size.width,
        container.height / image_size.height,
    )


def fit_to_container(image_size: Size, container: Size) -> Size:
    """Scale image_size to fit container, preserving aspect ratio.

    The image may be scaled up when it is smaller than the container.

    Example:
        >>> fit_to_container(
        ...     Size(width=4000, height=3000), Size(width=600, height=600)
        ... )
        Size(width=600, height=450)
    """
    scale = display_scale(image_size, container)
    return Size(
        width=max(1, math.floor(image_size.width * scale)),
        height=max(1, math.floor(image_size.height * scale)),
    )


def centered_crop_region(
    width: PhysicalDimension,
    height: PhysicalDimension,
    image_size: Size,
    display: Size,
    validator: GeometryValidator | None = None,
) -> Region:
    """Lay out a crop box of a physical size centred on the preview.

    The physical size is converted to native pixels, scaled into display
    space and centred on the displayed image. A box larger than the image
    is clamped to the display bounds.

    Args:
        width: Physical crop width.
        height: Physical crop height.
        image_size: Native dimensions of the image.
        display: Dimensions of the preview the box is drawn on.
        validator: Validator used for clamping.

    Returns:
        Region in display-space pixels.
    """
    validator = validator or GeometryValidator()
    scale = display_scale(image_size, display)

    box_width = width.to_pixels() * scale
    box_height = height.to_pixels() * scale
    offset_x = (image_size.width * scale - box_width) / 2
    offset_y = (image_size.height * scale - box_height) / 2

    region = Region(
        x=max(0, math.floor(offset_x)),
        y=max(0, math.floor(offset_y)),
        width=max(1, round(box_width)),
        height=max(1, round(box_height)),
    )
    return validator.clamp_region(region, display)


def move_region(region: Region, dx: float, dy: float, bounds: Size) -> Region:
    """Translate a crop box, keeping it entirely inside bounds."""
    width = min(region.width, bounds.width)
    height = min(region.height, bounds.height)
    return Region(
        x=max(0, min(bounds.width - width, region.x + dx)),
        y=max(0, min(bounds.height - height, region.y + dy)),
        width=width,
        height=height,
    )


class Handle(str, Enum):
    """Corner of a crop box that can be dragged to resize it."""

    top_left = "top_left"
    top_right = "top_right"
    bottom_left = "bottom_left"
    bottom_right = "bottom_right"


def resize_region(  # noqa: PLR0913
    region: Region,
    handle: Handle,
    dx: float,
    dy: float,
    bounds: Size,
    min_size: float = MIN_CROP_BOX,
) -> Region:
    """Drag one corner of a crop box by (dx, dy).

    The opposite corner stays put. Each side keeps at least min_size
    pixels, then the box is cut back to the bounds.

    Args:
        region: Crop box inside bounds.
        handle: Corner being dragged.
        dx: Horizontal drag distance in display pixels.
        dy: Vertical drag distance in display pixels.
        bounds: Dimensions of the preview.
        min_size: Smallest width and height the drag may produce.

    Returns:
        The resized Region.

    Example:
        >>> resize_region(
        ...     Region(x=100, y=100, width=50, height=50),
        ...     Handle.bottom_right,
        ...     20,
        ...     -45,
        ...     Size(width=600, height=450),
        ... ).to_tuple()
        (100.0, 100.0, 70.0, 10.0)
    """
    left, top, right, bottom = region.x, region.y, region.right, region.bottom

    if handle in (Handle.top_left, Handle.bottom_left):
        left = min(left + dx, right - min_size)
    else:
        right = max(right + dx, left + min_size)

    if handle in (Handle.top_left, Handle.top_right):
        top = min(top + dy, bottom - min_size)
    else:
        bottom = max(bottom + dy, top + min_size)

    left = max(0.0, left)
    top = max(0.0, top)
    right = min(float(bounds.width), right)
    bottom = min(float(bounds.height), bottom)
    return Region(x=left, y=top, width=right - left, height=bottom - top)


def region_physical_size(
    region: Region,
    image_size: Size,
    display: Size,
    unit: Unit = "inch",
    dpi: int = settings.CROP_DPI,
) -> tuple[PhysicalDimension, PhysicalDimension]:
    """Convert a display-space box back into a physical width and height.

    Used after a box is resized or clamped, so the reported print size
    matches what will actually be cropped.

    Args:
        region: Crop box in display pixels.
        image_size: Native dimensions of the image.
        display: Dimensions of the preview the box is drawn on.
        unit: Unit of the returned dimensions.
        dpi: Print resolution of the returned dimensions.

    Returns:
        (width, height) as PhysicalDimension.
    """
    scale = display_scale(image_size, display)
    return (
        PhysicalDimension.from_pixels(region.width / scale, unit=unit, dpi=dpi),
        PhysicalDimension.from_pixels(region.height / scale, unit=unit, dpi=dpi),
    )
