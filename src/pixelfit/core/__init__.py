"""Core algorithms for pixelfit.

This package contains the two image pipelines built on the raster codec.

Public API:
    - SizeTargetingEngine: Iterative re-encode search toward a byte size.
    - SearchState: Immutable per-attempt state of the shrink search.
    - plan_next_step: Pure step function of the shrink search.
    - CancellationToken: Caller-owned flag checked between attempts.
    - TargetingOutcome / Regime: Result diagnostics.
    - RegionCropper: Display-space crop extraction.
    - CropPlan: Validated crop parameters.
"""

from pixelfit.core.cropper import CropPlan, RegionCropper
from pixelfit.core.size_targeting import (
    CancellationToken,
    Regime,
    SearchState,
    SizeTargetingEngine,
    TargetingOutcome,
    plan_next_step,
)

__all__ = [
    "CancellationToken",
    "CropPlan",
    "Regime",
    "RegionCropper",
    "SearchState",
    "SizeTargetingEngine",
    "TargetingOutcome",
    "plan_next_step",
]
