"""Crop preview overlay rendering for pixelfit.

The overlay is a pure function of the preview size and the crop box: it
is rebuilt from scratch on every change and composited onto a scaled copy
of the image, never drawn into a shared surface.

The overlay shades everything outside the crop box, outlines the box,
marks its four corner handles and optionally labels it with its physical
dimensions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from pixelfit.geometry.primitives import Region, Size
from pixelfit.geometry.validators import GeometryValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropOverlayStyle:
    """Configuration for the crop overlay's visual styling.

    Attributes:
        shade_color: RGBA fill for the area outside the crop box.
        border_color: RGBA color of the crop box outline and handles.
        border_width: Width of the outline in pixels.
        handle_size: Side of the square corner handles in pixels.
        label_color: RGBA color of the dimension label.
        font_size: Font size for the dimension label.
        label_offset: Distance from the box's bottom edge to the label
            baseline in pixels.
        strict_font_check: If True, raise error if no TrueType font is found.
    """

    shade_color: tuple[int, int, int, int] = (0, 0, 0, 128)  # 50% black
    border_color: tuple[int, int, int, int] = (14, 165, 233, 255)  # Sky blue
    border_width: int = 2
    handle_size: int = 8
    label_color: tuple[int, int, int, int] = (255, 255, 255, 255)
    font_size: int = 12
    label_offset: int = 15
    strict_font_check: bool = False


class CropOverlayRenderer:
    """Renders transparent crop overlays for a preview image."""

    def __init__(self, style: CropOverlayStyle | None = None) -> None:
        self.style = style or CropOverlayStyle()

    def render(
        self,
        preview_size: Size,
        region: Region,
        label: str | None = None,
    ) -> Image.Image:
        """Render an RGBA overlay for a crop box.

        Args:
            preview_size: Dimensions of the preview in display pixels.
            region: Crop box in display pixels.
            label: Optional text drawn centred under the box.

        Returns:
            RGBA PIL Image of preview_size.

        Raises:
            RuntimeError: If strict_font_check is True and no valid font found.
        """
        width, height = preview_size.to_tuple()
        overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)

        # Shade the four bands around the box
        shade = self.style.shade_color
        bands = [
            (0, 0, width, region.y),
            (0, region.bottom, width, height),
            (0, region.y, region.x, region.bottom),
            (region.right, region.y, width, region.bottom),
        ]
        for left, top, right, bottom in bands:
            if right > left and bottom > top:
                draw.rectangle((left, top, right - 1, bottom - 1), fill=shade)

        draw.rectangle(
            (region.x, region.y, region.right - 1, region.bottom - 1),
            outline=self.style.border_color,
            width=self.style.border_width,
        )

        half = self.style.handle_size / 2
        for cx, cy in (
            (region.x, region.y),
            (region.right, region.y),
            (region.x, region.bottom),
            (region.right, region.bottom),
        ):
            draw.rectangle(
                (cx - half, cy - half, cx + half, cy + half),
                fill=self.style.border_color,
            )

        if label:
            font = self._get_font()
            draw.text(
                (region.x + region.width / 2, region.bottom + self.style.label_offset),
                label,
                fill=self.style.label_color,
                font=font,
                anchor="ms",  # middle-baseline
            )

        return overlay

    def _get_font(self) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """Get font for labels, with fallback to default.

        Raises:
            RuntimeError: If strict_font_check is True and no TrueType font found.
        """
        try:
            return ImageFont.truetype("DejaVuSans.ttf", self.style.font_size)
        except OSError:
            try:
                return ImageFont.truetype("Arial.ttf", self.style.font_size)
            except OSError:
                if self.style.strict_font_check:
                    raise RuntimeError(
                        "No TrueType fonts available (DejaVuSans.ttf, Arial.ttf). "
                        "Strict font check is enabled. Install system fonts."
                    ) from None
                logger.warning(
                    "No TrueType fonts available (DejaVuSans.ttf, Arial.ttf). "
                    "Using default font for crop labels."
                )
                return ImageFont.load_default()


class PreviewService:
    """Builds crop previews by compositing an overlay onto a scaled image."""

    def __init__(
        self,
        renderer: CropOverlayRenderer | None = None,
        validator: GeometryValidator | None = None,
    ) -> None:
        self.renderer = renderer or CropOverlayRenderer()
        self.validator = validator or GeometryValidator()

    def create_preview(
        self,
        image: Image.Image,
        display: Size,
        region: Region,
        label: str | None = None,
    ) -> Image.Image:
        """Scale image to display size and overlay the crop box.

        Raises:
            InvalidRegionError: If region extends past the display bounds.
        """
        self.validator.validate(region, display)

        scaled = image.resize(display.to_tuple(), resample=Image.Resampling.LANCZOS)
        if scaled.mode != "RGBA":
            scaled = scaled.convert("RGBA")

        overlay = self.renderer.render(display, region, label)
        return Image.alpha_composite(scaled, overlay).convert("RGB")
