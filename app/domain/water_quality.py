"""
app/domain/water_quality.py

Domain models used by the CSV report flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from indices.classifier import Category
from standards.registry import MetalKey

IDENTITY_HEADERS: tuple[str, ...] = ("State", "District", "Location", "Longitude", "Latitude")
METAL_HEADERS: tuple[str, ...] = tuple(metal.value for metal in MetalKey)
REQUIRED_HEADERS: tuple[str, ...] = IDENTITY_HEADERS + METAL_HEADERS
INDEX_HEADERS: tuple[str, ...] = ("HPI", "HEI", "CI")

UNKNOWN_GROUP = "Unknown"


@dataclass(frozen=True)
class DataRow:
    """
    One parsed sampling record.

    ``metals`` holds values in the declared input unit; ``None`` marks a
    blank or unparseable cell. ``raw_metals`` keeps the original cell text.
    """

    row_number: int
    state: str
    district: str
    location: str
    longitude: str
    latitude: str
    metals: Mapping[MetalKey, float | None]
    raw_metals: Mapping[MetalKey, str]
    extras: Mapping[str, str] = field(default_factory=dict)

    def concentration(self, metal: MetalKey) -> float | None:
        return self.metals.get(metal)

    def identity(self) -> dict[str, str]:
        return {
            "State": self.state,
            "District": self.district,
            "Location": self.location,
            "Longitude": self.longitude,
            "Latitude": self.latitude,
        }

    def coordinates(self) -> tuple[float, float] | None:
        """Return ``(longitude, latitude)`` when both parse as floats."""
        try:
            return float(self.longitude), float(self.latitude)
        except ValueError:
            return None


@dataclass(frozen=True)
class CellIssue:
    """
    A metal cell that was not a valid non-negative decimal.

    Non-fatal: the cell is treated as absent and the row is kept.
    """

    row_number: int
    column: str
    message: str
    value: str | None = None


@dataclass(frozen=True)
class ParsedTable:
    headers: tuple[str, ...]
    rows: tuple[DataRow, ...]
    issues: tuple[CellIssue, ...] = ()
    issues_truncated: bool = False


@dataclass(frozen=True)
class IndexedRow:
    """
    A :class:`DataRow` with its indices computed at full precision.
    """

    row: DataRow
    hpi: float
    hei: float
    ci: float
    category: Category


@dataclass(frozen=True)
class MetalStats:
    """
    Distribution of one metal over valid cells, in mg/L.
    """

    metal: MetalKey
    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float


@dataclass(frozen=True)
class AggregateStats:
    """
    Read-only summary for one grouping key (a state, a district or ``"all"``).
    """

    group_key: str
    row_count: int
    metals: Mapping[MetalKey, MetalStats]
    hpi_mean: float
    hpi_max: float
    hei_mean: float
    hei_max: float
    ci_mean: float
    ci_max: float


@dataclass(frozen=True)
class ExceedanceStat:
    metal: MetalKey
    count: int
    percentage: float


@dataclass(frozen=True)
class GroupRanking:
    group_key: str
    value: float
    samples: int
