"""Physical unit conversions between pixels, inches and centimeters.

All functions are pure and exact inverses of each other for a given DPI.
No rounding is applied; callers round when they need whole pixels.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Literal, Self

from pydantic import BaseModel, Field

from pixelfit.config import settings

CM_PER_INCH = 2.54

Unit = Literal["inch", "cm"]


def _check_dpi(dpi: float) -> None:
    if dpi <= 0:
        raise ValueError(f"dpi must be positive, got {dpi}")


def pixels_to_inches(pixels: float, dpi: float = settings.DEFAULT_DPI) -> float:
    _check_dpi(dpi)
    return pixels / dpi


def inches_to_pixels(inches: float, dpi: float = settings.DEFAULT_DPI) -> float:
    _check_dpi(dpi)
    return inches * dpi


def pixels_to_cm(pixels: float, dpi: float = settings.DEFAULT_DPI) -> float:
    _check_dpi(dpi)
    return (pixels / dpi) * CM_PER_INCH


def cm_to_pixels(cm: float, dpi: float = settings.DEFAULT_DPI) -> float:
    _check_dpi(dpi)
    return (cm / CM_PER_INCH) * dpi


convert_units = SimpleNamespace(
    pixels_to_inches=pixels_to_inches,
    inches_to_pixels=inches_to_pixels,
    pixels_to_cm=pixels_to_cm,
    cm_to_pixels=cm_to_pixels,
)


class PhysicalDimension(BaseModel, frozen=True):
    """A length in print units at a given resolution.

    Attributes:
        value: Length in the given unit (> 0).
        unit: "inch" or "cm".
        dpi: Dots per inch used to turn the length into pixels (> 0).
    """

    value: float = Field(..., gt=0)
    unit: Unit = "inch"
    dpi: int = Field(default=settings.CROP_DPI, gt=0)

    def to_pixels(self) -> float:
        """Return the exact (unrounded) pixel length."""
        if self.unit == "inch":
            return inches_to_pixels(self.value, self.dpi)
        return cm_to_pixels(self.value, self.dpi)

    @classmethod
    def from_pixels(
        cls, pixels: float, unit: Unit = "inch", dpi: int = settings.DEFAULT_DPI
    ) -> Self:
        """Build a dimension from a pixel length, inverting to_pixels()."""
        if unit == "inch":
            value = pixels_to_inches(pixels, dpi)
        else:
            value = pixels_to_cm(pixels, dpi)
        return cls(value=value, unit=unit, dpi=dpi)

    def __str__(self) -> str:
        label = "in" if self.unit == "inch" else "cm"
        return f"{self.value:g} {label} @ {self.dpi} dpi"
