"""
indices/engine.py

Runs HPI, HEI and CI for one sample and classifies the outcome.

Coordinates the three index models and the classifier; contains no index
math of its own. Every call recomputes from scratch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from indices.base import ConcentrationSample, resolve_profile, resolve_sample
from indices.ci import CIModel
from indices.classifier import (
    Category,
    categorize_ci,
    categorize_hei,
    categorize_hpi,
    categorize_overall,
    dominant_index,
)
from indices.hei import HEIModel, MetalRatio
from indices.hpi import HPIModel, MetalContribution
from standards.registry import StandardsProfile

logger = logging.getLogger(__name__)

TOP_CONTRIBUTORS_LIMIT = 3


@dataclass(frozen=True)
class IndexResult:
    """
    Combined output for one sample.

    ``details`` follows HPI ordering (descending contribution);
    ``ratios`` follows metal order and backs both HEI and CI.
    """

    hpi: float
    hei: float
    ci: float
    sum_w: float
    sum_wq: float
    details: tuple[MetalContribution, ...]
    ratios: tuple[MetalRatio, ...]
    hpi_category: Category
    hei_category: Category
    ci_category: Category
    overall: Category
    dominant_index: str
    top_contributors: tuple[MetalContribution, ...]

    def to_dict(self) -> dict[str, Any]:
        def _category(category: Category) -> dict[str, str]:
            return {"label": category.label, "color": category.color}

        return {
            "hpi": self.hpi,
            "hei": self.hei,
            "ci": self.ci,
            "categories": {
                "hpi": _category(self.hpi_category),
                "hei": _category(self.hei_category),
                "ci": _category(self.ci_category),
            },
            "overall": _category(self.overall),
            "dominant_index": self.dominant_index,
            "top_contributors": [detail.key.value for detail in self.top_contributors],
            "details": [
                {
                    "key": detail.key.value,
                    "Si": detail.si,
                    "Mi": detail.mi,
                    "Wi": detail.wi,
                    "Qi": detail.qi,
                    "contribution": detail.contribution,
                }
                for detail in self.details
            ],
            "ratios": [
                {"key": ratio.key.value, "Si": ratio.si, "Mi": ratio.mi, "ratio": ratio.ratio}
                for ratio in self.ratios
            ],
        }


class IndexEngine:
    """
    Stateless facade over :class:`HPIModel`, :class:`HEIModel` and
    :class:`CIModel`.

    Usage::

        engine = IndexEngine()
        result = engine.evaluate({"Pb": 0.02, "Cd": 0.001})
        print(result.hpi, result.overall.label)
    """

    def __init__(self) -> None:
        self._hpi = HPIModel()
        self._hei = HEIModel()
        self._ci = CIModel()

    def evaluate(
        self,
        sample: ConcentrationSample | None,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> IndexResult:
        """
        Compute all three indices and their categories for *sample*.

        Raises
        ------
        InvalidConcentration
            When the sample is malformed.
        InvalidStandard
            When *profile* holds a limit that is not strictly positive.
        """
        standards = resolve_profile(profile)
        concentrations = resolve_sample(sample)

        hpi_result = self._hpi.compute(concentrations, standards)
        hei_result = self._hei.compute(concentrations, standards)
        ci_result = self._ci.compute(concentrations, standards)

        hpi, hei, ci = hpi_result.hpi, hei_result.hei, ci_result.ci
        result = IndexResult(
            hpi=hpi,
            hei=hei,
            ci=ci,
            sum_w=hpi_result.sum_w,
            sum_wq=hpi_result.sum_wq,
            details=hpi_result.details,
            ratios=hei_result.details,
            hpi_category=categorize_hpi(hpi),
            hei_category=categorize_hei(hei),
            ci_category=categorize_ci(ci),
            overall=categorize_overall(hpi, hei, ci),
            dominant_index=dominant_index(hpi, hei, ci),
            top_contributors=hpi_result.top_contributors(TOP_CONTRIBUTORS_LIMIT),
        )
        logger.debug(
            "Indices computed profile=%s hpi=%.4f hei=%.4f ci=%.4f overall=%s",
            standards.name,
            hpi,
            hei,
            ci,
            result.overall.label,
        )
        return result
