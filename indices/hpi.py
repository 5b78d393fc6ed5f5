"""
indices/hpi.py

Heavy metal Pollution Index (HPI).

Formulas
--------
Wi  = 1 / Si                      unit weight, inverse to the standard
Qi  = 100 * (Mi - Ii) / (Si - Ii) sub-index; Ii = 0 for heavy metals,
                                  so Qi = 100 * Mi / Si
HPI = Σ(Wi * Qi) / Σ Wi

Si is the profile limit and Mi the measured concentration (mg/L, 0 when
absent). Sums use ``math.fsum`` so the result does not depend on the order
metals are evaluated in, and a sample sitting exactly at every limit scores
exactly 100.
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
class MetalContribution:
    """
    Per-metal HPI breakdown.
    """

    key: MetalKey
    si: float
    mi: float
    wi: float
    qi: float
    contribution: float


@dataclass(frozen=True)
class HPIResult:
    """
    HPI value with its weighted sums and per-metal details.

    ``details`` is sorted by descending ``contribution``; ties keep
    :class:`MetalKey` order.
    """

    hpi: float
    sum_w: float
    sum_wq: float
    details: tuple[MetalContribution, ...]

    def top_contributors(self, limit: int = 3) -> tuple[MetalContribution, ...]:
        """Return up to *limit* leading details that contribute more than 0."""
        return tuple(detail for detail in self.details[: max(0, limit)] if detail.contribution > 0)


class HPIModel(BaseIndexModel):
    """Weighted arithmetic mean of per-metal sub-indices."""

    def compute(
        self,
        sample: ConcentrationSample | None,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> HPIResult:
        """Compute HPI for *sample* against *profile*.

        Returns:
            HPIResult with ``hpi == 0.0`` when the total weight is zero.
        """
        standards = resolve_profile(profile)
        concentrations = resolve_sample(sample)

        details: list[MetalContribution] = []
        weights: list[float] = []
        weighted_ratios: list[float] = []
        for metal in MetalKey:
            si = standards.limits[metal]
            mi = concentrations[metal]
            wi = ensure_finite(1.0 / si, label=f"{metal.value} weight")
            ratio = ensure_finite(mi / si, label=f"{metal.value} ratio")
            qi = ensure_finite(ratio * 100.0, label=f"{metal.value} sub-index")
            contribution = ensure_finite(wi * ratio * 100.0, label=f"{metal.value} contribution")
            weights.append(wi)
            weighted_ratios.append(wi * ratio)
            details.append(
                MetalContribution(
                    key=metal,
                    si=si,
                    mi=mi,
                    wi=wi,
                    qi=qi,
                    contribution=contribution,
                )
            )

        sum_w = finite_sum(weights, label="HPI weight sum")
        sum_w_ratio = finite_sum(weighted_ratios, label="HPI weighted sum")
        # Σ(Wi*Qi) == 100 * Σ(Wi*Mi/Si). The 100 is applied after the
        # division so a sample at every limit divides identical sums.
        sum_wq = ensure_finite(100.0 * sum_w_ratio, label="HPI weighted sum")
        hpi = ensure_finite(100.0 * (sum_w_ratio / sum_w), label="HPI") if sum_w > 0 else 0.0

        ordered = sorted(details, key=lambda detail: detail.contribution, reverse=True)
        return HPIResult(hpi=hpi, sum_w=sum_w, sum_wq=sum_wq, details=tuple(ordered))


def compute_hpi(
    sample: ConcentrationSample | None,
    profile: StandardsProfile | Mapping[Any, Any] | None = None,
) -> HPIResult:
    """Module-level shortcut for :meth:`HPIModel.compute`."""
    return HPIModel().compute(sample, profile)
