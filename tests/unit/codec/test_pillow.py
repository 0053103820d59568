"""Tests for pixelfit.codec.pillow module."""

from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from pixelfit.codec import EncodeRequest, PillowCodec, Raster, to_encoder_quality
from pixelfit.exceptions import DecodeError, EncodeError
from pixelfit.geometry import NativeBox

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8"


def _open(payload: bytes) -> Image.Image:
    image = Image.open(BytesIO(payload))
    image.load()
    return image


@pytest.fixture
def codec() -> PillowCodec:
    return PillowCodec()


class TestToEncoderQuality:
    """Tests for to_encoder_quality mapping."""

    @pytest.mark.parametrize(
        ("quality", "expected"),
        [
            (0.0, 1),
            (0.004, 1),
            (0.5, 50),
            (0.9, 90),
            (1.0, 100),
        ],
    )
    def test_maps_unit_interval_to_pillow_scale(
        self, quality: float, expected: int
    ) -> None:
        assert to_encoder_quality(quality) == expected


class TestPillowCodecDecode:
    """Tests for PillowCodec.decode."""

    def test_decodes_jpeg(self, codec: PillowCodec, jpeg_bytes: bytes) -> None:
        raster = codec.decode(jpeg_bytes)
        assert raster.format == "JPEG"
        assert (raster.native_width, raster.native_height) == (320, 240)
        assert raster.source is jpeg_bytes
        assert raster.source_size_bytes == len(jpeg_bytes)

    def test_decodes_png_with_alpha(
        self, codec: PillowCodec, make_image_bytes: Callable[..., bytes]
    ) -> None:
        raster = codec.decode(make_image_bytes(64, 48, image_format="PNG", mode="RGBA"))
        assert raster.format == "PNG"
        assert raster.image.mode == "RGBA"
        assert raster.native_size.to_tuple() == (64, 48)

    def test_applies_exif_orientation(self, codec: PillowCodec) -> None:
        image = Image.new("RGB", (40, 20), (200, 10, 10))
        exif = Image.Exif()
        exif[0x0112] = 6  # Rotate 90 CW
        buffer = BytesIO()
        image.save(buffer, format="JPEG", exif=exif.tobytes())

        raster = codec.decode(buffer.getvalue())
        assert (raster.native_width, raster.native_height) == (20, 40)

    def test_empty_buffer_raises(self, codec: PillowCodec) -> None:
        with pytest.raises(DecodeError, match="empty"):
            codec.decode(b"")

    def test_garbage_raises(self, codec: PillowCodec) -> None:
        with pytest.raises(DecodeError, match="Unsupported or malformed"):
            codec.decode(b"definitely not an image")

    def test_truncated_image_raises(
        self, codec: PillowCodec, jpeg_bytes: bytes
    ) -> None:
        with pytest.raises(DecodeError):
            codec.decode(jpeg_bytes[:200])


class TestPillowCodecEncode:
    """Tests for PillowCodec.encode."""

    def test_keeps_source_format(self, codec: PillowCodec, jpeg_bytes: bytes) -> None:
        raster = codec.decode(jpeg_bytes)
        result = codec.encode(raster, EncodeRequest(width=160, height=120, quality=0.8))

        assert result.payload.startswith(JPEG_SIGNATURE)
        assert (result.width, result.height) == (160, 120)
        assert result.quality == 0.8
        assert _open(result.payload).size == (160, 120)

    def test_lower_quality_produces_smaller_jpeg(
        self, codec: PillowCodec, jpeg_bytes: bytes
    ) -> None:
        raster = codec.decode(jpeg_bytes)
        low = codec.encode(raster, EncodeRequest(width=320, height=240, quality=0.3))
        high = codec.encode(raster, EncodeRequest(width=320, height=240, quality=0.95))
        assert low.size_bytes < high.size_bytes

    def test_smaller_dimensions_produce_smaller_output(
        self, codec: PillowCodec, jpeg_bytes: bytes
    ) -> None:
        raster = codec.decode(jpeg_bytes)
        small = codec.encode(raster, EncodeRequest(width=80, height=60, quality=0.9))
        full = codec.encode(raster, EncodeRequest(width=320, height=240, quality=0.9))
        assert small.size_bytes < full.size_bytes

    def test_png_ignores_quality(
        self, codec: PillowCodec, make_image_bytes: Callable[..., bytes]
    ) -> None:
        raster = codec.decode(make_image_bytes(64, 48, image_format="PNG"))
        low = codec.encode(raster, EncodeRequest(width=64, height=48, quality=0.1))
        high = codec.encode(raster, EncodeRequest(width=64, height=48, quality=1.0))
        assert low.payload.startswith(PNG_SIGNATURE)
        assert low.payload == high.payload

    def test_png_keeps_alpha(
        self, codec: PillowCodec, make_image_bytes: Callable[..., bytes]
    ) -> None:
        raster = codec.decode(make_image_bytes(64, 48, image_format="PNG", mode="RGBA"))
        result = codec.encode(raster, EncodeRequest(width=32, height=24, quality=0.5))
        assert _open(result.payload).mode == "RGBA"

    def test_alpha_is_dropped_for_jpeg(self, codec: PillowCodec) -> None:
        raster = Raster(
            image=Image.new("RGBA", (50, 40), (10, 20, 30, 128)),
            native_width=50,
            native_height=40,
            format="JPEG",
            source=b"src",
        )
        result = codec.encode(raster, EncodeRequest(width=50, height=40, quality=0.9))
        output = _open(result.payload)
        assert output.format == "JPEG"
        assert output.mode == "RGB"

    def test_mpo_is_written_as_jpeg(self, codec: PillowCodec) -> None:
        raster = Raster(
            image=Image.new("RGB", (20, 20)),
            native_width=20,
            native_height=20,
            format="MPO",
            source=b"src",
        )
        result = codec.encode(raster, EncodeRequest(width=20, height=20, quality=0.9))
        assert _open(result.payload).format == "JPEG"

    def test_unwritable_format_falls_back_to_png(self, codec: PillowCodec) -> None:
        raster = Raster(
            image=Image.new("RGB", (20, 20)),
            native_width=20,
            native_height=20,
            format="NOT-A-FORMAT",
            source=b"src",
        )
        result = codec.encode(raster, EncodeRequest(width=10, height=10, quality=0.9))
        assert result.payload.startswith(PNG_SIGNATURE)

    def test_source_region_samples_only_the_box(self, codec: PillowCodec) -> None:
        image = Image.new("RGB", (200, 100), (0, 0, 255))
        image.paste((0, 255, 0), (100, 0, 200, 100))
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        raster = codec.decode(buffer.getvalue())

        request = EncodeRequest(
            width=25,
            height=25,
            quality=1.0,
            source_region=NativeBox(x=100, y=0, width=100, height=100),
        )
        output = _open(codec.encode(raster, request).payload).convert("RGB")

        assert output.size == (25, 25)
        red, green, blue = output.getpixel((12, 12))
        assert green >= 253
        assert red <= 2
        assert blue <= 2

    def test_does_not_mutate_raster(
        self, codec: PillowCodec, jpeg_bytes: bytes
    ) -> None:
        raster = codec.decode(jpeg_bytes)
        before = raster.image.tobytes()
        codec.encode(raster, EncodeRequest(width=100, height=100, quality=0.5))
        assert raster.image.tobytes() == before
        assert raster.image.size == (320, 240)

    def test_encoder_failure_raises_encode_error(self, codec: PillowCodec) -> None:
        image = MagicMock()
        image.save.side_effect = OSError("disk full")
        raster = Raster(
            image=image,
            native_width=10,
            native_height=10,
            format="PNG",
            source=b"src",
        )

        with pytest.raises(EncodeError, match="disk full") as exc_info:
            codec.encode(raster, EncodeRequest(width=10, height=10, quality=0.7))

        assert exc_info.value.image_format == "PNG"
        assert exc_info.value.size == (10, 10)
        assert "quality=0.700" in str(exc_info.value)
