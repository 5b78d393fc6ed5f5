"""
standards/registry.py

Reference concentration limits for the eight tracked heavy metals.

Every limit is expressed in mg/L and must be strictly positive: the index
models divide by it. Profiles are immutable; a derived profile is always a
new object produced by uniform scalar multiplication of a base profile.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping


class MetalKey(str, enum.Enum):
    """
    Closed set of tracked elements, in stable display order.
    """

    CD = "Cd"
    CR = "Cr"
    CU = "Cu"
    PB = "Pb"
    MN = "Mn"
    NI = "Ni"
    FE = "Fe"
    ZN = "Zn"

    def __str__(self) -> str:
        return self.value


METAL_LABELS: Mapping[MetalKey, str] = MappingProxyType(
    {
        MetalKey.CD: "Cadmium (Cd)",
        MetalKey.CR: "Chromium (Cr)",
        MetalKey.CU: "Copper (Cu)",
        MetalKey.PB: "Lead (Pb)",
        MetalKey.MN: "Manganese (Mn)",
        MetalKey.NI: "Nickel (Ni)",
        MetalKey.FE: "Iron (Fe)",
        MetalKey.ZN: "Zinc (Zn)",
    }
)

# Drinking water limits (mg/L), common BIS/WHO acceptable values.
# Cu is the health-based limit; the aesthetic limit is higher.
_BASE_LIMITS_MG_L: Mapping[MetalKey, float] = MappingProxyType(
    {
        MetalKey.CD: 0.003,
        MetalKey.CR: 0.05,
        MetalKey.CU: 0.05,
        MetalKey.PB: 0.01,
        MetalKey.MN: 0.1,
        MetalKey.NI: 0.02,
        MetalKey.FE: 0.3,
        MetalKey.ZN: 5.0,
    }
)

BASE_PROFILE_NAME = "base"


class InvalidStandard(ValueError):
    """
    Raised when a standards limit (or a scale factor) is not strictly positive.
    """

    def __init__(self, message: str, *, metal: MetalKey | None = None, value: Any = None) -> None:
        super().__init__(message)
        self.metal = metal
        self.value = value


def coerce_metal_key(key: MetalKey | str) -> MetalKey:
    """
    Resolve a metal symbol (``"Pb"``) or enum member to a :class:`MetalKey`.

    Raises ``ValueError`` for anything outside the tracked set.
    """

    if isinstance(key, MetalKey):
        return key
    try:
        return MetalKey(str(key).strip())
    except ValueError:
        allowed = ", ".join(metal.value for metal in MetalKey)
        raise ValueError(f"Unknown metal {key!r}. Allowed values: {allowed}.") from None


def _validate_limit(metal: MetalKey, value: Any) -> float:
    try:
        limit = float(value)
    except (TypeError, ValueError):
        raise InvalidStandard(
            f"Standard for {metal.value} must be a number, got {value!r}.",
            metal=metal,
            value=value,
        ) from None
    if not math.isfinite(limit) or limit <= 0:
        raise InvalidStandard(
            f"Standard for {metal.value} must be a finite value > 0, got {value!r}.",
            metal=metal,
            value=value,
        )
    return limit


@dataclass(frozen=True)
class StandardsProfile:
    """
    Regulatory limit (mg/L) for every tracked metal.

    ``limits`` is total over :class:`MetalKey` by construction and read-only
    after ``__post_init__``.
    """

    name: str
    limits: Mapping[MetalKey, float] = field(repr=False)

    def __post_init__(self) -> None:
        resolved: dict[MetalKey, float] = {}
        for raw_key, value in self.limits.items():
            try:
                metal = coerce_metal_key(raw_key)
            except ValueError as exc:
                raise InvalidStandard(str(exc), value=raw_key) from None
            resolved[metal] = _validate_limit(metal, value)

        missing = [metal.value for metal in MetalKey if metal not in resolved]
        if missing:
            raise InvalidStandard(
                f"Standards profile {self.name!r} is missing limits for: {', '.join(missing)}."
            )

        ordered = {metal: resolved[metal] for metal in MetalKey}
        object.__setattr__(self, "limits", MappingProxyType(ordered))

    @classmethod
    def from_mapping(cls, limits: Mapping[Any, Any], *, name: str = "custom") -> "StandardsProfile":
        """
        Build a validated profile from a plain ``{symbol: limit}`` mapping.
        """

        return cls(name=name, limits=dict(limits))

    def __getitem__(self, metal: MetalKey | str) -> float:
        return self.limits[coerce_metal_key(metal)]

    def as_dict(self) -> dict[str, float]:
        """Return ``{symbol: limit}`` in :class:`MetalKey` order."""
        return {metal.value: limit for metal, limit in self.limits.items()}


@lru_cache(maxsize=1)
def base_standards() -> StandardsProfile:
    """
    Return the canonical reference limit for each of the eight metals.
    """

    return StandardsProfile(name=BASE_PROFILE_NAME, limits=_BASE_LIMITS_MG_L)


def scale(base: StandardsProfile, factor: float, *, name: str | None = None) -> StandardsProfile:
    """
    Return a new profile where every limit is ``base[metal] * factor``.

    Raises
    ------
    InvalidStandard
        When *factor* is not a finite number strictly greater than zero.
        Non-positive factors are rejected, never clamped.
    """

    try:
        multiplier = float(factor)
    except (TypeError, ValueError):
        raise InvalidStandard(f"Scale factor must be a number, got {factor!r}.", value=factor) from None
    if not math.isfinite(multiplier) or multiplier <= 0:
        raise InvalidStandard(f"Scale factor must be a finite value > 0, got {factor!r}.", value=factor)

    return StandardsProfile(
        name=name or f"{base.name}x{multiplier:g}",
        limits={metal: limit * multiplier for metal, limit in base.limits.items()},
    )
