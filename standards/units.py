"""
standards/units.py

Concentration units accepted on input and conversion to the mg/L basis
used by every standards profile.
"""

from __future__ import annotations

import enum


class ConcentrationUnit(str, enum.Enum):
    MG_PER_L = "mg/L"
    UG_PER_L = "µg/L"

    def __str__(self) -> str:
        return self.value

    @property
    def per_mg(self) -> float:
        """How many of this unit make up one mg/L."""
        return 1000.0 if self is ConcentrationUnit.UG_PER_L else 1.0


# Spellings seen in uploaded sheets. Keys are lower-cased, whitespace removed.
# "µ" is the micro sign (U+00B5), "μ" the Greek small letter mu (U+03BC).
_UNIT_ALIASES: dict[str, ConcentrationUnit] = {
    "mg/l": ConcentrationUnit.MG_PER_L,
    "mgl": ConcentrationUnit.MG_PER_L,
    "µg/l": ConcentrationUnit.UG_PER_L,
    "μg/l": ConcentrationUnit.UG_PER_L,
    "ug/l": ConcentrationUnit.UG_PER_L,
    "ugl": ConcentrationUnit.UG_PER_L,
}


def parse_unit(value: ConcentrationUnit | str) -> ConcentrationUnit:
    """
    Resolve a unit label to :class:`ConcentrationUnit`.

    Raises ``ValueError`` for unsupported labels.
    """

    if isinstance(value, ConcentrationUnit):
        return value
    normalized = "".join(str(value).split()).lower()
    try:
        return _UNIT_ALIASES[normalized]
    except KeyError:
        allowed = ", ".join(unit.value for unit in ConcentrationUnit)
        raise ValueError(f"Unsupported concentration unit {value!r}. Allowed values: {allowed}.") from None


def to_mg_per_l(value: float, unit: ConcentrationUnit | str) -> float:
    """
    Convert *value* expressed in *unit* to mg/L.

    µg/L is divided by 1000 (same as multiplying by 0.001, but keeps
    ``3 µg/L`` identical to the literal ``0.003``).
    """

    resolved = parse_unit(unit)
    if resolved is ConcentrationUnit.MG_PER_L:
        return value
    return value / resolved.per_mg


def from_mg_per_l(value: float, unit: ConcentrationUnit | str) -> float:
    """Convert a mg/L value back into *unit* for display."""
    resolved = parse_unit(unit)
    if resolved is ConcentrationUnit.MG_PER_L:
        return value
    return value * resolved.per_mg
