"""Geometry module for pixelfit.

This package provides coordinate primitives, validation, display-to-native
transforms, preview layout and crop overlay rendering.

Key Components:
    - Primitives: Size, Region (display space), NativeBox (native space)
    - Validators: Bounds checking and region clamping
    - Transforms: Display -> native coordinate mapping
    - Layout: Preview fitting, physical crop placement, move and resize
    - Overlays: Crop preview rendering

Example:
    from pixelfit.geometry import GeometryValidator, Region, Size

    region = Region(x=10, y=20, width=300, height=200)
    display = Size(width=600, height=450)
    GeometryValidator().validate(region, display)  # Raises if invalid
"""

from pixelfit.geometry.layout import (
    Handle,
    centered_crop_region,
    display_scale,
    fit_to_container,
    move_region,
    region_physical_size,
    resize_region,
)
from pixelfit.geometry.overlay import (
    CropOverlayRenderer,
    CropOverlayStyle,
    PreviewService,
)
from pixelfit.geometry.primitives import NativeBox, Region, Size
from pixelfit.geometry.transforms import (
    region_display_to_native,
    scale_dimensions,
    scale_factors,
)
from pixelfit.geometry.validators import (
    GeometryValidator,
    coerce_region,
    coerce_size,
)

__all__ = [
    "CropOverlayRenderer",
    "CropOverlayStyle",
    "GeometryValidator",
    "Handle",
    "NativeBox",
    "PreviewService",
    "Region",
    "Size",
    "centered_crop_region",
    "coerce_region",
    "coerce_size",
    "display_scale",
    "fit_to_container",
    "move_region",
    "region_display_to_native",
    "region_physical_size",
    "resize_region",
    "scale_dimensions",
    "scale_factors",
]
