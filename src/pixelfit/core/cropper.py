"""Display-space crop extraction for pixelfit.

A crop box is drawn on a scaled preview of the image (display space).
RegionCropper maps it onto the decoded raster (native space) and encodes
just that box in one pass: the output canvas has the display-space box
dimensions truncated to whole pixels, while the sampling rectangle is the
scaled native box.

Quality is fixed at maximum. There is no iteration and no retry, so the
same arguments always produce the same bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pixelfit.codec.types import (
    EncodedResult,
    EncodeRequest,
    Raster,
    RasterCodecProtocol,
)
from pixelfit.geometry.primitives import NativeBox, Region, Size
from pixelfit.geometry.transforms import region_display_to_native
from pixelfit.geometry.validators import (
    GeometryValidator,
    RegionLike,
    SizeLike,
    coerce_region,
    coerce_size,
)

logger = logging.getLogger(__name__)

CROP_QUALITY = 1.0


@dataclass(frozen=True)
class CropPlan:
    """Resolved parameters for a single crop encode.

    Attributes:
        region: Validated display-space crop box.
        display: Display-space dimensions the box was drawn on.
        source_box: The box mapped into native raster coordinates.
    """

    region: Region
    display: Size
    source_box: NativeBox

    def to_request(self) -> EncodeRequest:
        canvas = self.region.canvas_size()
        return EncodeRequest(
            width=canvas.width,
            height=canvas.height,
            quality=CROP_QUALITY,
            source_region=self.source_box,
        )


class RegionCropper:
    """Extracts and re-encodes a display-space crop box from a raster.

    Example:
        >>> cropper = RegionCropper(PillowCodec())
        >>> result = cropper.crop(
        ...     raster,
        ...     Region(x=0, y=0, width=100, height=100),
        ...     Size(width=200, height=200),
        ... )
        >>> (result.width, result.height)
        (100, 100)
    """

    __slots__ = ("_codec", "_validator")

    def __init__(
        self,
        codec: RasterCodecProtocol,
        validator: GeometryValidator | None = None,
    ) -> None:
        self._codec = codec
        self._validator = validator or GeometryValidator()

    def plan(
        self,
        raster: Raster,
        region: RegionLike,
        display_size: SizeLike,
    ) -> CropPlan:
        """Validate the crop box and map it into native space.

        Raises:
            InvalidRegionError: If the box is negative, empty, or extends
                past the display-space bounds.
        """
        crop_region = coerce_region(region)
        display = coerce_size(display_size)
        self._validator.validate(crop_region, display)

        source_box = region_display_to_native(crop_region, display, raster.native_size)
        return CropPlan(region=crop_region, display=display, source_box=source_box)

    def crop(
        self,
        raster: Raster,
        region: RegionLike,
        display_size: SizeLike,
    ) -> EncodedResult:
        """Crop raster to the display-space region with a single encode.

        Args:
            raster: Decoded source image.
            region: Crop box in display-space pixels.
            display_size: Dimensions of the display space the box refers to.

        Returns:
            EncodedResult whose canvas is region.width x region.height,
            each truncated to whole pixels.

        Raises:
            InvalidRegionError: If the region violates display bounds.
            EncodeError: If the codec fails.
        """
        plan = self.plan(raster, region, display_size)
        logger.info(
            "Cropping display box %s of %s -> native box %s",
            plan.region.to_tuple(),
            plan.display.to_tuple(),
            plan.source_box.to_tuple(),
        )
        return self._codec.encode(raster, plan.to_request())
