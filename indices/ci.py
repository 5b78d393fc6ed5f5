"""
indices/ci.py

Contamination Index (CI).

    CI = max_i (Mi / Si)

The single worst concentration-to-standard ratio among all metals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from indices.base import BaseIndexModel, ConcentrationSample
from indices.hei import MetalRatio, metal_ratios
from standards.registry import StandardsProfile


@dataclass(frozen=True)
class CIResult:
    ci: float
    details: tuple[MetalRatio, ...]


class CIModel(BaseIndexModel):
    """Maximum per-metal ratio; 0.0 for an all-zero sample."""

    def compute(
        self,
        sample: ConcentrationSample | None,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> CIResult:
        details = metal_ratios(sample, profile)
        ci = max((detail.ratio for detail in details), default=0.0)
        return CIResult(ci=max(ci, 0.0), details=details)


def compute_ci(
    sample: ConcentrationSample | None,
    profile: StandardsProfile | Mapping[Any, Any] | None = None,
) -> CIResult:
    """Module-level shortcut for :meth:`CIModel.compute`."""
    return CIModel().compute(sample, profile)
