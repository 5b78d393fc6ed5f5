"""
indices/hei.py

Heavy metal Evaluation Index (HEI).

    HEI = Σ (Mi / Si)

An unweighted sum of concentration-to-standard ratios over all eight metals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from indices.base import (
    BaseIndexModel,
    ConcentrationSample,
    ensure_finite,
    finite_sum,
    resolve_profile,
    resolve_sample,
)
from standards.registry import MetalKey, StandardsProfile


@dataclass(frozen=True)
class MetalRatio:
    """
    Concentration-to-standard ratio for one metal.
    """

    key: MetalKey
    si: float
    mi: float
    ratio: float


def metal_ratios(
    sample: ConcentrationSample | None,
    profile: StandardsProfile | Mapping[Any, Any] | None = None,
) -> tuple[MetalRatio, ...]:
    """Return ``Mi / Si`` for every metal in :class:`MetalKey` order."""
    standards = resolve_profile(profile)
    concentrations = resolve_sample(sample)
    return tuple(
        MetalRatio(
            key=metal,
            si=standards.limits[metal],
            mi=concentrations[metal],
            ratio=ensure_finite(concentrations[metal] / standards.limits[metal], label=f"{metal.value} ratio"),
        )
        for metal in MetalKey
    )


@dataclass(frozen=True)
class HEIResult:
    hei: float
    details: tuple[MetalRatio, ...]


class HEIModel(BaseIndexModel):
    """Sum of per-metal ratios."""

    def compute(
        self,
        sample: ConcentrationSample | None,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> HEIResult:
        details = metal_ratios(sample, profile)
        return HEIResult(hei=finite_sum((detail.ratio for detail in details), label="HEI"), details=details)


def compute_hei(
    sample: ConcentrationSample | None,
    profile: StandardsProfile | Mapping[Any, Any] | None = None,
) -> HEIResult:
    """Module-level shortcut for :meth:`HEIModel.compute`."""
    return HEIModel().compute(sample, profile)
