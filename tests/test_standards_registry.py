"""
tests/test_standards_registry.py

Pytest unit tests for the standards registry.

Coverage
--------
- Base limits and metal ordering
- Profile validation (totality, positivity, unknown metals)
- Uniform scaling and its rejection of non-positive factors
- Immutability of profiles
"""

from __future__ import annotations

import math

import pytest

from standards.registry import (
    METAL_LABELS,
    InvalidStandard,
    MetalKey,
    StandardsProfile,
    base_standards,
    coerce_metal_key,
    scale,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def base() -> StandardsProfile:
    return base_standards()


# ---------------------------------------------------------------------------
# Metal keys
# ---------------------------------------------------------------------------


class TestMetalKey:
    def test_display_order(self) -> None:
        assert [metal.value for metal in MetalKey] == ["Cd", "Cr", "Cu", "Pb", "Mn", "Ni", "Fe", "Zn"]

    def test_every_metal_has_a_label(self) -> None:
        assert set(METAL_LABELS) == set(MetalKey)
        assert METAL_LABELS[MetalKey.PB] == "Lead (Pb)"

    def test_coerce_symbol(self) -> None:
        assert coerce_metal_key("Pb") is MetalKey.PB
        assert coerce_metal_key(" Zn ") is MetalKey.ZN

    def test_coerce_unknown_symbol_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown metal"):
            coerce_metal_key("Hg")


# ---------------------------------------------------------------------------
# Base profile
# ---------------------------------------------------------------------------


class TestBaseStandards:
    def test_limits(self, base: StandardsProfile) -> None:
        assert base.as_dict() == {
            "Cd": 0.003,
            "Cr": 0.05,
            "Cu": 0.05,
            "Pb": 0.01,
            "Mn": 0.1,
            "Ni": 0.02,
            "Fe": 0.3,
            "Zn": 5.0,
        }

    def test_is_total_and_positive(self, base: StandardsProfile) -> None:
        assert list(base.limits) == list(MetalKey)
        assert all(limit > 0 for limit in base.limits.values())

    def test_lookup_by_symbol_or_key(self, base: StandardsProfile) -> None:
        assert base["Pb"] == base[MetalKey.PB] == 0.01

    def test_limits_are_read_only(self, base: StandardsProfile) -> None:
        with pytest.raises(TypeError):
            base.limits[MetalKey.PB] = 1.0  # type: ignore[index]

    def test_profile_is_frozen(self, base: StandardsProfile) -> None:
        with pytest.raises((AttributeError, TypeError)):
            base.name = "other"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestProfileValidation:
    def test_zero_limit_rejected(self, base: StandardsProfile) -> None:
        limits = base.as_dict()
        limits["Pb"] = 0
        with pytest.raises(InvalidStandard) as exc_info:
            StandardsProfile.from_mapping(limits)
        assert exc_info.value.metal is MetalKey.PB

    def test_negative_limit_rejected(self, base: StandardsProfile) -> None:
        limits = base.as_dict()
        limits["Cd"] = -0.003
        with pytest.raises(InvalidStandard):
            StandardsProfile.from_mapping(limits)

    def test_non_finite_limit_rejected(self, base: StandardsProfile) -> None:
        limits = base.as_dict()
        limits["Zn"] = math.inf
        with pytest.raises(InvalidStandard):
            StandardsProfile.from_mapping(limits)

    def test_missing_metal_rejected(self, base: StandardsProfile) -> None:
        limits = base.as_dict()
        del limits["Fe"]
        with pytest.raises(InvalidStandard, match="Fe"):
            StandardsProfile.from_mapping(limits)

    def test_unknown_metal_rejected(self, base: StandardsProfile) -> None:
        limits = base.as_dict()
        limits["Hg"] = 0.001
        with pytest.raises(InvalidStandard):
            StandardsProfile.from_mapping(limits)

    def test_invalid_standard_is_value_error(self) -> None:
        assert issubclass(InvalidStandard, ValueError)


# ---------------------------------------------------------------------------
# Scaling
# ---------------------------------------------------------------------------


class TestScale:
    def test_doubles_every_limit(self, base: StandardsProfile) -> None:
        doubled = scale(base, 2.0)
        for metal in MetalKey:
            assert doubled[metal] == base[metal] * 2.0

    def test_returns_new_profile(self, base: StandardsProfile) -> None:
        doubled = scale(base, 2.0)
        assert doubled is not base
        assert base["Pb"] == 0.01

    def test_default_name(self, base: StandardsProfile) -> None:
        assert scale(base, 2.0).name == "basex2"

    def test_explicit_name(self, base: StandardsProfile) -> None:
        assert scale(base, 2.0, name="permissible").name == "permissible"

    @pytest.mark.parametrize("factor", [0, -1.0, math.nan, math.inf, "two"])
    def test_invalid_factor_rejected(self, base: StandardsProfile, factor: object) -> None:
        with pytest.raises(InvalidStandard):
            scale(base, factor)  # type: ignore[arg-type]
