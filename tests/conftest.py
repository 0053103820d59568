"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator
from io import BytesIO

import pytest
import structlog
from PIL import Image

from pixelfit.codec.types import EncodedResult, EncodeRequest, Raster
from pixelfit.config import Settings
from pixelfit.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset bound log context between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(LOG_LEVEL="DEBUG", LOG_FORMAT="console")


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


class SizeModelCodec:
    """Fake codec whose output size is bytes_per_pixel * w * h * quality.

    Never touches pixels; records every request it receives.
    """

    def __init__(self, bytes_per_pixel: float = 2.0) -> None:
        self.bytes_per_pixel = bytes_per_pixel
        self.requests: list[EncodeRequest] = []

    def decode(self, data: bytes) -> Raster:
        raise NotImplementedError

    def encode(self, raster: Raster, request: EncodeRequest) -> EncodedResult:
        self.requests.append(request)
        size = request.width * request.height * request.quality
        size_bytes = max(1, int(size * self.bytes_per_pixel))
        return EncodedResult(
            payload=b"\x00" * size_bytes,
            width=request.width,
            height=request.height,
            quality=request.quality,
        )


class ScriptedCodec:
    """Fake codec that returns a fixed sequence of output sizes."""

    def __init__(self, sizes: list[int]) -> None:
        self.sizes = sizes
        self.requests: list[EncodeRequest] = []

    def decode(self, data: bytes) -> Raster:
        raise NotImplementedError

    def encode(self, raster: Raster, request: EncodeRequest) -> EncodedResult:
        size_bytes = self.sizes[min(len(self.requests), len(self.sizes) - 1)]
        self.requests.append(request)
        return EncodedResult(
            payload=b"\x00" * size_bytes,
            width=request.width,
            height=request.height,
            quality=request.quality,
        )


@pytest.fixture
def make_raster() -> Callable[..., Raster]:
    """Build a pixel-less Raster with a source buffer of the given size."""

    def _make(
        width: int = 1000,
        height: int = 1000,
        source_bytes: int = 2_000_000,
        image_format: str = "JPEG",
    ) -> Raster:
        return Raster(
            image=None,
            native_width=width,
            native_height=height,
            format=image_format,
            source=b"\x00" * source_bytes,
        )

    return _make


@pytest.fixture
def make_image_bytes() -> Callable[..., bytes]:
    """Encode a noisy test image so lossy encoders have real work to do."""

    def _make(
        width: int = 320,
        height: int = 240,
        image_format: str = "JPEG",
        quality: int = 95,
        mode: str = "RGB",
    ) -> bytes:
        noise = Image.effect_noise((width, height), 64).convert(mode)
        buffer = BytesIO()
        params = {"quality": quality} if image_format == "JPEG" else {}
        noise.save(buffer, format=image_format, **params)
        return buffer.getvalue()

    return _make


@pytest.fixture
def jpeg_bytes(make_image_bytes: Callable[..., bytes]) -> bytes:
    """A 320x240 noisy JPEG."""
    return make_image_bytes()


@pytest.fixture
def size_model_codec() -> SizeModelCodec:
    """A fake codec producing 2 bytes per pixel at full quality."""
    return SizeModelCodec(bytes_per_pixel=2.0)


@pytest.fixture
def scripted_codec() -> Callable[[list[int]], ScriptedCodec]:
    """Factory for fake codecs that replay a list of output sizes."""
    return ScriptedCodec
