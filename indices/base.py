"""
indices/base.py

Abstract base interface for pollution index models, plus the shared input
resolution every model runs before computing.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping

from standards.registry import MetalKey, StandardsProfile, base_standards, coerce_metal_key

# Keys are MetalKey members or metal symbols; values are mg/L.
ConcentrationSample = Mapping[Any, Any]


class InvalidConcentration(ValueError):
    """
    Raised when a sample holds a negative, non-finite or non-numeric
    concentration, or names a metal outside the tracked set.
    """


def resolve_sample(sample: ConcentrationSample | None) -> dict[MetalKey, float]:
    """
    Return a total ``{MetalKey: mg/L}`` mapping; absent metals are ``0.0``.

    Keys may be :class:`MetalKey` members or symbols such as ``"Pb"``.
    """

    resolved = {metal: 0.0 for metal in MetalKey}
    if not sample:
        return resolved

    for raw_key, raw_value in sample.items():
        try:
            metal = coerce_metal_key(raw_key)
        except ValueError as exc:
            raise InvalidConcentration(str(exc)) from None

        if raw_value is None:
            continue
        if isinstance(raw_value, bool):
            raise InvalidConcentration(f"Concentration for {metal.value} must be a number, got {raw_value!r}.")
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            raise InvalidConcentration(
                f"Concentration for {metal.value} must be a number, got {raw_value!r}."
            ) from None
        if not math.isfinite(value) or value < 0:
            raise InvalidConcentration(
                f"Concentration for {metal.value} must be a finite value >= 0, got {raw_value!r}."
            )
        resolved[metal] = value

    return resolved


def ensure_finite(value: float, *, label: str) -> float:
    """Return *value*, or raise :class:`InvalidConcentration` when it overflowed."""
    if not math.isfinite(value):
        raise InvalidConcentration(f"{label} is out of range for the given concentrations.")
    return value


def finite_sum(values: Iterable[float], *, label: str) -> float:
    """Correctly rounded sum of *values* that must stay finite."""
    try:
        total = math.fsum(values)
    except OverflowError:
        raise InvalidConcentration(f"{label} is out of range for the given concentrations.") from None
    return ensure_finite(total, label=label)


def resolve_profile(profile: StandardsProfile | Mapping[Any, Any] | None) -> StandardsProfile:
    """
    Return a validated profile; ``None`` means :func:`base_standards`.

    A plain mapping goes through :class:`StandardsProfile` validation, so a
    limit <= 0 raises ``InvalidStandard`` here instead of dividing by it.
    """

    if profile is None:
        return base_standards()
    if isinstance(profile, StandardsProfile):
        return profile
    return StandardsProfile.from_mapping(profile)


class BaseIndexModel(ABC):
    """Abstract base class for heavy-metal index models.

    Implementations are pure: no I/O, no logging, no state carried between
    calls. Identical inputs always produce identical results.
    """

    @abstractmethod
    def compute(
        self,
        sample: ConcentrationSample | None,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> Any:
        """Compute the index for *sample* against *profile*.

        Args:
            sample: Concentrations in mg/L keyed by metal. Missing metals
                    count as 0.
            profile: Standards profile; defaults to ``base_standards()``.

        Returns:
            An implementation-specific frozen result object.

        Raises:
            InvalidConcentration: If the sample is malformed.
            InvalidStandard: If a profile limit is not strictly positive.
        """
        raise NotImplementedError("Subclasses must implement compute()")
