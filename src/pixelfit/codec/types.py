"""Type definitions for the raster codec layer.

The size-targeting and cropping engines never touch pixels directly: they
drive a codec through RasterCodecProtocol, varying only output dimensions,
quality and the source sampling box.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from pixelfit.geometry.primitives import NativeBox, Size


@dataclass(frozen=True)
class Raster:
    """A decoded image, read-only to every operation.

    Attributes:
        image: Codec-owned pixel surface (a PIL Image for PillowCodec).
        native_width: Width of the decoded image in pixels.
        native_height: Height of the decoded image in pixels.
        format: Encoder format name used for output (e.g., "JPEG", "PNG").
        source: The encoded bytes the raster was decoded from.
    """

    image: Any
    native_width: int
    native_height: int
    format: str
    source: bytes

    @property
    def native_size(self) -> Size:
        """Return native dimensions as a Size."""
        return Size(width=self.native_width, height=self.native_height)

    @property
    def source_size_bytes(self) -> int:
        """Size of the original encoded buffer in bytes."""
        return len(self.source)


@dataclass(frozen=True)
class EncodeRequest:
    """Parameters for a single encode attempt.

    Attributes:
        width: Output canvas width in pixels (> 0).
        height: Output canvas height in pixels (> 0).
        quality: Encoder quality in [0, 1]. Ignored by lossless formats.
        source_region: Native-space box to sample from. The whole raster
            is sampled when None.
    """

    width: int
    height: int
    quality: float
    source_region: NativeBox | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Output dimensions must be positive, got {self.width}x{self.height}"
            )
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"quality must be in [0, 1], got {self.quality}")

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass(frozen=True)
class EncodedResult:
    """Immutable output of one encode attempt.

    Attributes:
        payload: Encoded image bytes.
        width: Output width in pixels.
        height: Output height in pixels.
        quality: Quality the payload was encoded with, or None when the
            payload is the untouched source buffer.
    """

    payload: bytes
    width: int
    height: int
    quality: float | None

    @property
    def size_bytes(self) -> int:
        """Return the encoded size in bytes."""
        return len(self.payload)


class RasterCodecProtocol(Protocol):
    """Protocol for the decode/encode primitive the engines depend on.

    This protocol allows for dependency injection and testing with
    fake codecs that never allocate real pixel buffers.
    """

    def decode(self, data: bytes) -> Raster:
        """Decode an encoded buffer into a Raster.

        Raises:
            DecodeError: On malformed or unsupported input.
        """
        ...

    def encode(self, raster: Raster, request: EncodeRequest) -> EncodedResult:
        """Encode a raster (or a box of it) at the requested size and quality.

        Raises:
            EncodeError: If the surface cannot be allocated or the encoder
                rejects the parameters.
        """
        ...
