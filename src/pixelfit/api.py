"""Public byte-in/byte-out operations for pixelfit.

These are the entry points a UI or the CLI consumes. Each call decodes
the input once, runs one pipeline and returns the encoded output; no
state is kept between calls.

Example:
    from pixelfit.api import crop_to_region, parse_file_size, resize_to_target_size

    smaller = resize_to_target_size(data, parse_file_size("500 KB"))
    cropped = crop_to_region(
        data,
        {"x": 0, "y": 0, "width": 100, "height": 100},
        {"width": 200, "height": 200},
    )
"""

from __future__ import annotations

from pixelfit.codec import PillowCodec, RasterCodecProtocol
from pixelfit.core.cropper import RegionCropper
from pixelfit.core.size_targeting import (
    CancellationToken,
    SizeTargetingEngine,
    TargetingOutcome,
)
from pixelfit.exceptions import InvalidTargetError
from pixelfit.geometry.validators import RegionLike, SizeLike
from pixelfit.sizes import format_file_size, parse_file_size
from pixelfit.units import convert_units
from pixelfit.utils.logging import operation_context

__all__ = [
    "convert_units",
    "crop_to_region",
    "format_file_size",
    "parse_file_size",
    "resize_to_target_size",
    "resize_with_outcome",
]


def resize_with_outcome(
    file_bytes: bytes,
    target_size_bytes: float,
    *,
    max_iterations: int | None = None,
    codec: RasterCodecProtocol | None = None,
    cancel_token: CancellationToken | None = None,
    image_name: str | None = None,
) -> TargetingOutcome:
    """Decode file_bytes and run the size-targeting search.

    Raises:
        InvalidTargetError: If target_size_bytes <= 0.
        DecodeError: If file_bytes is not a readable image.
        EncodeError: If an encode attempt fails.
        OperationCancelledError: If cancel_token is set mid-search.
    """
    if target_size_bytes <= 0:
        raise InvalidTargetError(target_size_bytes)

    engine = SizeTargetingEngine(codec or PillowCodec())
    with operation_context(image_name=image_name):
        raster = engine.codec.decode(file_bytes)
        return engine.run(
            raster,
            target_size_bytes,
            max_iterations,
            cancel_token=cancel_token,
        )


def resize_to_target_size(
    file_bytes: bytes,
    target_size_bytes: float,
    *,
    max_iterations: int | None = None,
    codec: RasterCodecProtocol | None = None,
    cancel_token: CancellationToken | None = None,
) -> bytes:
    """Re-encode an image so its size approximates target_size_bytes.

    Args:
        file_bytes: Encoded input image.
        target_size_bytes: Desired output size in bytes (> 0).
        max_iterations: Cap on encode attempts; settings.MAX_ITERATIONS
            when None.
        codec: Codec override, PillowCodec by default.
        cancel_token: Optional token to abandon the search.

    Returns:
        Encoded output bytes in the input's format.
    """
    outcome = resize_with_outcome(
        file_bytes,
        target_size_bytes,
        max_iterations=max_iterations,
        codec=codec,
        cancel_token=cancel_token,
    )
    return outcome.result.payload


def crop_to_region(
    file_bytes: bytes,
    crop_region: RegionLike,
    display_dimensions: SizeLike,
    *,
    codec: RasterCodecProtocol | None = None,
) -> bytes:
    """Crop an image to a box drawn on a scaled preview.

    Args:
        file_bytes: Encoded input image.
        crop_region: Box in display-space pixels, as a Region, a mapping
            with x/y/width/height, or an (x, y, width, height) tuple.
        display_dimensions: Display-space size the box was drawn on, as a
            Size, a mapping with width/height, or a (width, height) tuple.
        codec: Codec override, PillowCodec by default.

    Returns:
        Encoded crop whose canvas equals the box's display-space size.

    Raises:
        InvalidRegionError: If the box violates the display bounds.
        DecodeError: If file_bytes is not a readable image.
        EncodeError: If the crop cannot be encoded.
    """
    codec = codec or PillowCodec()
    cropper = RegionCropper(codec)
    with operation_context():
        raster = codec.decode(file_bytes)
        return cropper.crop(raster, crop_region, display_dimensions).payload
