"""Size-targeting re-encode search for pixelfit.

This module drives a lossy encoder toward a target byte size without
access to its internal rate control. The only levers are output
dimensions and encoder quality; every attempt is a full encode whose
measured size decides the next attempt's parameters.

Regimes (selected once, from the source buffer size S0):
    - Passthrough: S0 already within the tolerance band. The source
      buffer is returned untouched, no encode happens.
    - Growth (S0 <= target): one encode at maximum quality with each axis
      scaled by sqrt(target / S0). The estimate is not verified.
    - Shrink (S0 > target): a bounded loop of encode attempts. Far from
      the target, dimensions shrink (at most 30% per step); close to it,
      quality is fine-tuned (never below 0.5); after undershooting,
      quality rises by 5% and both dimensions are divided by the size
      ratio, capped at 1.2.

The loop returns the first attempt inside the tolerance band, otherwise
the attempt closest to the target. Non-convergence is never an error.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from enum import Enum

from structlog.contextvars import bound_contextvars

from pixelfit.codec.types import (
    EncodedResult,
    EncodeRequest,
    Raster,
    RasterCodecProtocol,
)
from pixelfit.config import settings
from pixelfit.exceptions import InvalidTargetError, OperationCancelledError
from pixelfit.geometry.transforms import scale_dimensions

logger = logging.getLogger(__name__)

# Shrink-regime policy constants
FAR_FROM_TARGET_FRACTION = 0.5  # Overshoot beyond this fraction of target
MIN_SHRINK_STEP = 0.7  # Dimensions shrink by at most 30% per attempt
UNDERSHOOT_DIVISOR_CAP = 1.2  # Undershoot divides dimensions by at most this
MIN_QUALITY = 0.5
MAX_QUALITY = 1.0
QUALITY_BASE_STEP = 0.95
QUALITY_RATIO_GAIN = 0.1
QUALITY_GROW_STEP = 1.05


class Regime(str, Enum):
    """Strategy chosen for a size-targeting call."""

    passthrough = "passthrough"
    growth = "growth"
    shrink = "shrink"


class CancellationToken:
    """Thread-safe flag a caller sets to abandon an in-flight search.

    The engine checks the token before every encode attempt.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class SearchState:
    """Parameters and best match carried between shrink-regime attempts.

    Attributes:
        width: Output width for the next encode.
        height: Output height for the next encode.
        quality: Encoder quality for the next encode.
        iteration: Number of encode attempts planned so far.
        best_result: Attempt closest to the target so far.
        best_diff: |best_result.size_bytes - target|, inf before any attempt.
    """

    width: int
    height: int
    quality: float
    iteration: int = 0
    best_result: EncodedResult | None = None
    best_diff: float = math.inf

    @classmethod
    def initial(cls, raster: Raster, quality: float) -> SearchState:
        return cls(
            width=raster.native_width,
            height=raster.native_height,
            quality=quality,
        )

    def to_request(self) -> EncodeRequest:
        return EncodeRequest(width=self.width, height=self.height, quality=self.quality)

    def record(self, result: EncodedResult, target_bytes: float) -> SearchState:
        """Return a state remembering result if it strictly beats the best.

        Ties keep the earlier result.
        """
        diff = abs(result.size_bytes - target_bytes)
        if diff < self.best_diff:
            return replace(self, best_result=result, best_diff=diff)
        return self


def plan_next_step(
    state: SearchState,
    current_size: int,
    target_bytes: float,
) -> SearchState:
    """Choose the parameters of the next shrink-regime attempt.

    Args:
        state: Parameters used for the attempt that produced current_size.
        current_size: Measured size of the latest output in bytes.
        target_bytes: Requested size in bytes.

    Returns:
        A new SearchState with adjusted parameters and iteration + 1.
    """
    ratio = math.sqrt(target_bytes / current_size)
    size_difference = current_size - target_bytes

    width, height, quality = state.width, state.height, state.quality

    if size_difference > 0:
        if size_difference > target_bytes * FAR_FROM_TARGET_FRACTION:
            width, height = scale_dimensions(width, height, max(ratio, MIN_SHRINK_STEP))
        else:
            factor = QUALITY_BASE_STEP + (ratio - 1) * QUALITY_RATIO_GAIN
            quality = max(quality * factor, MIN_QUALITY)
    else:
        divisor = min(ratio, UNDERSHOOT_DIVISOR_CAP)
        width = max(1, math.floor(width / divisor))
        height = max(1, math.floor(height / divisor))
        quality = min(quality * QUALITY_GROW_STEP, MAX_QUALITY)

    return replace(
        state,
        width=width,
        height=height,
        quality=quality,
        iteration=state.iteration + 1,
    )


def is_within_tolerance(
    size_bytes: int, target_bytes: float, tolerance: float
) -> bool:
    """Check whether size_bytes lies in target +/- tolerance * target."""
    return abs(size_bytes - target_bytes) <= target_bytes * tolerance


def growth_dimensions(
    raster: Raster, source_bytes: int, target_bytes: float
) -> tuple[int, int]:
    """Estimate output dimensions for a larger target (ceil-rounded)."""
    scale = math.sqrt(target_bytes / max(source_bytes, 1))
    return scale_dimensions(
        raster.native_width, raster.native_height, scale, round_up=True
    )


@dataclass(frozen=True)
class TargetingOutcome:
    """Result of a size-targeting call with diagnostics.

    Attributes:
        result: The encoded output returned to the caller.
        regime: Strategy that produced it.
        attempts: Number of encode calls made.
        converged: True if the result lies within the tolerance band.
    """

    result: EncodedResult
    regime: Regime
    attempts: int
    converged: bool


class SizeTargetingEngine:
    """Re-encodes a raster so its byte size approximates a target.

    Each call owns its own SearchState; an engine instance holds no
    per-call state and may serve concurrent calls on different rasters.

    Example:
        >>> engine = SizeTargetingEngine(PillowCodec())
        >>> raster = engine.codec.decode(data)
        >>> result = engine.target_size(raster, 500_000)
        >>> print(f"{result.width}x{result.height}: {result.size_bytes} bytes")
    """

    __slots__ = ("_codec", "_initial_quality", "_max_iterations", "_tolerance")

    def __init__(
        self,
        codec: RasterCodecProtocol,
        *,
        max_iterations: int = settings.MAX_ITERATIONS,
        initial_quality: float = settings.INITIAL_QUALITY,
        tolerance: float = settings.SIZE_TOLERANCE,
    ) -> None:
        """Initialize the engine.

        Args:
            codec: Decode/encode primitive implementing RasterCodecProtocol.
            max_iterations: Default cap on shrink-regime encode attempts.
            initial_quality: Starting quality for the shrink regime.
            tolerance: Half-width of the acceptance band as a fraction of
                the target.
        """
        self._codec = codec
        self._max_iterations = max_iterations
        self._initial_quality = initial_quality
        self._tolerance = tolerance

    @property
    def codec(self) -> RasterCodecProtocol:
        return self._codec

    def target_size(
        self,
        raster: Raster,
        target_bytes: float,
        max_iterations: int | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> EncodedResult:
        """Re-encode raster toward target_bytes and return the output.

        Raises:
            InvalidTargetError: If target_bytes <= 0.
            EncodeError: If any encode attempt fails.
            OperationCancelledError: If cancel_token is set mid-search.
        """
        return self.run(
            raster, target_bytes, max_iterations, cancel_token=cancel_token
        ).result

    def run(
        self,
        raster: Raster,
        target_bytes: float,
        max_iterations: int | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> TargetingOutcome:
        """Same as target_size() but also reports regime and attempt count."""
        if target_bytes <= 0:
            raise InvalidTargetError(target_bytes)
        limit = self._max_iterations if max_iterations is None else max_iterations
        if limit < 0:
            raise ValueError(f"max_iterations must be >= 0, got {limit}")

        source_bytes = raster.source_size_bytes
        logger.info(
            "Targeting %d bytes from %d bytes (%dx%d)",
            target_bytes,
            source_bytes,
            raster.native_width,
            raster.native_height,
        )

        if is_within_tolerance(source_bytes, target_bytes, self._tolerance):
            logger.info("Source already within tolerance, returning it unchanged")
            passthrough = EncodedResult(
                payload=raster.source,
                width=raster.native_width,
                height=raster.native_height,
                quality=None,
            )
            return TargetingOutcome(passthrough, Regime.passthrough, 0, True)

        if source_bytes <= target_bytes:
            return self._grow(raster, source_bytes, target_bytes, cancel_token)
        return self._shrink(raster, target_bytes, limit, cancel_token)

    def _grow(
        self,
        raster: Raster,
        source_bytes: int,
        target_bytes: float,
        cancel_token: CancellationToken | None,
    ) -> TargetingOutcome:
        _check_cancelled(cancel_token, attempts=0)
        width, height = growth_dimensions(raster, source_bytes, target_bytes)
        request = EncodeRequest(width=width, height=height, quality=MAX_QUALITY)

        result = self._codec.encode(raster, request)
        logger.info(
            "Growth estimate %dx%d produced %d bytes",
            width,
            height,
            result.size_bytes,
        )
        converged = is_within_tolerance(
            result.size_bytes, target_bytes, self._tolerance
        )
        return TargetingOutcome(result, Regime.growth, 1, converged)

    def _shrink(
        self,
        raster: Raster,
        target_bytes: float,
        max_iterations: int,
        cancel_token: CancellationToken | None,
    ) -> TargetingOutcome:
        state = SearchState.initial(raster, self._initial_quality)
        current_size = raster.source_size_bytes

        while state.iteration < max_iterations:
            _check_cancelled(cancel_token, attempts=state.iteration)

            state = plan_next_step(state, current_size, target_bytes)

            with bound_contextvars(attempt=state.iteration):
                result = self._codec.encode(raster, state.to_request())
                logger.debug(
                    "Attempt %d: %dx%d q=%.3f -> %d bytes",
                    state.iteration,
                    state.width,
                    state.height,
                    state.quality,
                    result.size_bytes,
                )
            current_size = result.size_bytes
            state = state.record(result, target_bytes)

            if is_within_tolerance(current_size, target_bytes, self._tolerance):
                logger.info(
                    "Converged after %d attempt(s): %d bytes",
                    state.iteration,
                    current_size,
                )
                return TargetingOutcome(result, Regime.shrink, state.iteration, True)

        best = state.best_result
        if best is None:
            # No attempt was allowed; encode the initial parameters once
            best = self._codec.encode(raster, state.to_request())
            return TargetingOutcome(best, Regime.shrink, 1, False)

        logger.info(
            "No convergence after %d attempt(s), best match %d bytes",
            state.iteration,
            best.size_bytes,
        )
        return TargetingOutcome(best, Regime.shrink, state.iteration, False)


def _check_cancelled(token: CancellationToken | None, *, attempts: int) -> None:
    if token is not None and token.cancelled:
        logger.info("Cancelled after %d attempt(s)", attempts)
        raise OperationCancelledError(attempts)
