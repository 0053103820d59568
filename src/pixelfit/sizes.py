"""Human-readable byte sizes.

format_file_size() and parse_file_size() are deliberately not exact
inverses: formatting rounds to a fixed number of decimals, so
parse_file_size(format_file_size(n)) only approximates n.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pixelfit.config import settings

_K = 1024
_UNITS = ("Bytes", "KB", "MB", "GB")

# Checked in this order; the first token found in the lowered string wins.
_MULTIPLIERS = (
    ("kb", _K),
    ("mb", _K**2),
    ("gb", _K**3),
)

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def format_file_size(num_bytes: float, decimals: int = 2) -> str:
    """Format a byte count using the largest fitting unit.

    Args:
        num_bytes: Size in bytes (>= 0).
        decimals: Maximum decimal places; negative values are treated as 0.
            Trailing zeros are dropped.

    Returns:
        A string such as "1.5 KB" or "0 Bytes".

    Raises:
        ValueError: If num_bytes is negative.

    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if num_bytes < 0:
        raise ValueError(f"num_bytes must be non-negative, got {num_bytes}")
    if num_bytes == 0:
        return "0 Bytes"

    dm = max(decimals, 0)
    index = 0
    while index < len(_UNITS) - 1 and num_bytes >= _K ** (index + 1):
        index += 1

    text = f"{num_bytes / _K**index:.{dm}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {_UNITS[index]}"


def parse_file_size(text: str) -> float:
    """Parse a size string such as "5 MB" into bytes.

    The leading number is read and a case-insensitive "kb", "mb" or "gb"
    anywhere in the string picks the multiplier. Strings without a unit
    token are taken as bytes. Unparseable input yields 0 rather than an
    error, so callers must validate a 0.0 result themselves.

    Example:
        >>> parse_file_size("1.5 KB")
        1536.0
    """
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return 0.0
    value = float(match.group(1))

    lowered = text.lower()
    for token, multiplier in _MULTIPLIERS:
        if token in lowered:
            return value * multiplier
    return value


def deviation_percent(actual_bytes: int, target_bytes: float) -> float:
    """Return |actual - target| as a percentage of target."""
    if target_bytes <= 0:
        raise ValueError(f"target_bytes must be positive, got {target_bytes}")
    return abs(actual_bytes - target_bytes) / target_bytes * 100


@dataclass(frozen=True)
class SizeReport:
    """Summary of a size-targeting run for display to a user.

    Attributes:
        original_bytes: Size of the input buffer.
        target_bytes: Requested size.
        result_bytes: Size of the returned buffer.
    """

    original_bytes: int
    target_bytes: float
    result_bytes: int

    @property
    def deviation(self) -> float:
        """Deviation of the result from the target, in percent."""
        return deviation_percent(self.result_bytes, self.target_bytes)

    def is_acceptable(
        self, threshold_percent: float = settings.DEVIATION_WARNING_PERCENT
    ) -> bool:
        return self.deviation <= threshold_percent

    def summary(self) -> str:
        original = format_file_size(self.original_bytes)
        result = format_file_size(self.result_bytes)
        if self.is_acceptable():
            return f"Resized from {original} to {result}"
        return (
            f"Resized from {original} to {result} "
            f"({self.deviation:.0f}% deviation from target)"
        )
