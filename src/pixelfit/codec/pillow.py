"""Pillow-backed raster codec.

Output keeps the input's format, mirroring a browser canvas re-encoding
to the uploaded file's MIME type. Formats Pillow cannot write fall back
to PNG.
"""

from __future__ import annotations

import logging
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from pixelfit.codec.types import EncodedResult, EncodeRequest, Raster
from pixelfit.exceptions import DecodeError, EncodeError

logger = logging.getLogger(__name__)

# Formats whose encoders honour a quality setting (Pillow accepts 1-100)
LOSSY_FORMATS: frozenset[str] = frozenset({"JPEG", "WEBP", "AVIF"})

# Formats that cannot carry an alpha channel or palette
_RGB_ONLY_FORMATS: frozenset[str] = frozenset({"JPEG"})

# Containers Pillow reads under one name but writes under another
_FORMAT_ALIASES = {"MPO": "JPEG", "JPG": "JPEG"}

_FALLBACK_FORMAT = "PNG"

_QUALITY_MIN = 1
_QUALITY_MAX = 100


def to_encoder_quality(quality: float) -> int:
    """Map a [0, 1] quality onto Pillow's 1-100 integer scale."""
    return max(_QUALITY_MIN, min(_QUALITY_MAX, round(quality * _QUALITY_MAX)))


def _output_format(source_format: str | None) -> str:
    fmt = (source_format or "").upper()
    fmt = _FORMAT_ALIASES.get(fmt, fmt)
    Image.init()
    if fmt not in Image.SAVE:
        if fmt:
            logger.warning(
                "No writer for format %s, falling back to %s", fmt, _FALLBACK_FORMAT
            )
        return _FALLBACK_FORMAT
    return fmt


class PillowCodec:
    """RasterCodecProtocol implementation using Pillow.

    Usage:
        codec = PillowCodec()
        raster = codec.decode(Path("photo.jpg").read_bytes())
        result = codec.encode(raster, EncodeRequest(800, 600, quality=0.8))
    """

    __slots__ = ("_resample",)

    def __init__(
        self, resample: Image.Resampling = Image.Resampling.LANCZOS
    ) -> None:
        self._resample = resample

    def decode(self, data: bytes) -> Raster:
        """Decode bytes into a Raster with EXIF orientation applied.

        Raises:
            DecodeError: If the buffer is empty or not a readable image.
        """
        if not data:
            raise DecodeError("Input buffer is empty")

        try:
            with Image.open(BytesIO(data)) as opened:
                source_format = opened.format
                opened.load()
                image = ImageOps.exif_transpose(opened)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Unsupported or malformed image: {e}") from e
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeError(f"Failed to decode image: {e}") from e

        return Raster(
            image=image,
            native_width=image.width,
            native_height=image.height,
            format=_output_format(source_format),
            source=data,
        )

    def encode(self, raster: Raster, request: EncodeRequest) -> EncodedResult:
        """Resample the raster to the request's canvas and encode it.

        When request.source_region is set, only that native-space box is
        sampled; extraction and resampling happen in a single pass.

        Raises:
            EncodeError: If resampling or encoding fails.
        """
        fmt = _output_format(raster.format)
        try:
            image = self._render(raster, request)
            if fmt in _RGB_ONLY_FORMATS and image.mode not in ("RGB", "L", "CMYK"):
                image = image.convert("RGB")

            params: dict[str, object] = {}
            if fmt in LOSSY_FORMATS:
                params["quality"] = to_encoder_quality(request.quality)

            buffer = BytesIO()
            image.save(buffer, format=fmt, **params)
        except (OSError, ValueError, MemoryError, KeyError) as e:
            raise EncodeError(
                f"Failed to encode image: {e}",
                image_format=fmt,
                size=request.size,
                quality=request.quality,
            ) from e

        return EncodedResult(
            payload=buffer.getvalue(),
            width=request.width,
            height=request.height,
            quality=request.quality,
        )

    def _render(self, raster: Raster, request: EncodeRequest) -> Image.Image:
        image: Image.Image = raster.image
        if request.source_region is not None:
            return image.resize(
                request.size,
                resample=self._resample,
                box=request.source_region.to_pil_box(),
            )
        if request.size == (raster.native_width, raster.native_height):
            return image
        return image.resize(request.size, resample=self._resample)
