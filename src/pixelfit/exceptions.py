"""Custom exceptions for pixelfit operations.

These exceptions provide context-rich error handling for resize and crop
operations, wrapping low-level Pillow errors with meaningful messages.
"""

from __future__ import annotations


class PixelfitError(Exception):
    """Base exception for all pixelfit errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return self.message


class InvalidTargetError(PixelfitError):
    """Raised when a requested target byte size is not positive."""

    def __init__(self, target_bytes: float) -> None:
        self.target_bytes = target_bytes
        super().__init__(f"Target size must be positive, got {target_bytes} bytes")


class InvalidRegionError(PixelfitError):
    """Raised when a crop rectangle is out of bounds or degenerate.

    Attributes:
        region: (x, y, width, height) of the rejected rectangle, if known.
        bounds: (width, height) of the display space it was checked against.
    """

    def __init__(
        self,
        message: str,
        *,
        region: tuple[float, float, float, float] | None = None,
        bounds: tuple[float, float] | None = None,
    ) -> None:
        self.region = region
        self.bounds = bounds
        super().__init__(message)

    def _format_message(self) -> str:
        parts = []
        if self.region is not None:
            parts.append(f"region={self.region}")
        if self.bounds is not None:
            parts.append(f"bounds={self.bounds}")
        if not parts:
            return self.message
        return f"{self.message} ({', '.join(parts)})"


class CodecError(PixelfitError):
    """Base exception for raster decode/encode failures.

    This error is non-recoverable within a single operation: the engines
    surface it to the caller immediately without retrying.
    """

    def __init__(self, message: str, *, image_format: str | None = None) -> None:
        self.image_format = image_format
        super().__init__(message)

    def _format_message(self) -> str:
        if self.image_format:
            return f"{self.message} (format={self.image_format})"
        return self.message


class DecodeError(CodecError):
    """Raised when input bytes cannot be decoded into a raster.

    This error is raised when:
    - The buffer is empty or truncated
    - The image format is not recognised
    - Pillow fails to load the pixel data
    """


class EncodeError(CodecError):
    """Raised when a raster cannot be encoded with the requested parameters.

    This error is raised when:
    - The output surface cannot be allocated
    - The encoder rejects the dimensions or quality
    - The source format has no available writer
    """

    def __init__(
        self,
        message: str,
        *,
        image_format: str | None = None,
        size: tuple[int, int] | None = None,
        quality: float | None = None,
    ) -> None:
        self.size = size
        self.quality = quality
        super().__init__(message, image_format=image_format)

    def _format_message(self) -> str:
        parts = [self.message]
        if self.image_format:
            parts.append(f"format={self.image_format}")
        if self.size is not None:
            parts.append(f"size={self.size}")
        if self.quality is not None:
            parts.append(f"quality={self.quality:.3f}")

        if len(parts) == 1:
            return parts[0]
        return f"{parts[0]} ({', '.join(parts[1:])})"


class OperationCancelledError(PixelfitError):
    """Raised when a caller cancels an in-flight operation."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Operation cancelled after {attempts} encode attempt(s)")
