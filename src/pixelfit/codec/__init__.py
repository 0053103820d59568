"""Raster codec layer for pixelfit.

The engines depend only on RasterCodecProtocol. PillowCodec is the
default implementation used by the public API and the CLI.

Key Components:
    - Raster: decoded image plus the bytes it came from
    - EncodeRequest: output dimensions, quality and optional source box
    - EncodedResult: immutable encoded payload
    - PillowCodec: Pillow-backed decode/encode

Example:
    from pixelfit.codec import EncodeRequest, PillowCodec

    codec = PillowCodec()
    raster = codec.decode(data)
    result = codec.encode(raster, EncodeRequest(width=640, height=480, quality=0.8))
    print(result.size_bytes)
"""

from pixelfit.codec.pillow import LOSSY_FORMATS, PillowCodec, to_encoder_quality
from pixelfit.codec.types import (
    EncodedResult,
    EncodeRequest,
    Raster,
    RasterCodecProtocol,
)

__all__ = [
    "LOSSY_FORMATS",
    "EncodeRequest",
    "EncodedResult",
    "PillowCodec",
    "Raster",
    "RasterCodecProtocol",
    "to_encoder_quality",
]
