"""
app/services/aggregation_service.py

Data aggregation layer for water-quality reports.

Turns parsed :class:`DataRow` records into per-row indices and grouped
summary statistics that the report layer can consume directly.

Units
-----
Rows carry values in the unit declared for the upload (µg/L or mg/L).
Every method that compares against a standard or returns a concentration
converts to mg/L first; nothing here returns a value in the input unit.

Pass design
-----------
Each derived quantity is built with a single linear pass over the rows.
There are no nested scans over the table, so tens of thousands of rows
stay cheap. Grouping and ranking use stable orderings only: groups appear
in first-seen order, rows keep source order inside a group, and ties in a
ranking keep first-seen order.

No index math lives here. Formula application belongs to
:class:`~indices.engine.IndexEngine`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

import numpy as np

from app.domain.water_quality import (
    UNKNOWN_GROUP,
    AggregateStats,
    DataRow,
    ExceedanceStat,
    GroupRanking,
    IndexedRow,
    MetalStats,
)
from indices.base import resolve_profile
from indices.engine import IndexEngine, IndexResult
from standards.registry import MetalKey, StandardsProfile
from standards.units import ConcentrationUnit, parse_unit, to_mg_per_l

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")

OVERALL_GROUP = "all"


# ---------------------------------------------------------------------------
# Grouping keys
# ---------------------------------------------------------------------------


def _group_label(value: str) -> str:
    stripped = value.strip()
    return stripped if stripped else UNKNOWN_GROUP


def state_key(row: DataRow | IndexedRow) -> str:
    """Group key by state; blank states fall under ``"Unknown"``."""
    data_row = row.row if isinstance(row, IndexedRow) else row
    return _group_label(data_row.state)


def district_key(row: DataRow | IndexedRow) -> str:
    """Group key by district; blank districts fall under ``"Unknown"``."""
    data_row = row.row if isinstance(row, IndexedRow) else row
    return _group_label(data_row.district)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _sample_mg(row: DataRow, unit: ConcentrationUnit) -> dict[MetalKey, float]:
    """Valid cells of *row* converted to mg/L; absent cells are skipped."""
    sample: dict[MetalKey, float] = {}
    for metal in MetalKey:
        value = row.metals.get(metal)
        if value is not None:
            sample[metal] = to_mg_per_l(value, unit)
    return sample


def _metal_stats(metal: MetalKey, values: list[float]) -> MetalStats:
    """
    Distribution summary of *values*; zero-filled when there are none.

    Standard deviation is the sample deviation (ddof=1), reported as 0.0
    for fewer than two values.
    """
    if not values:
        return MetalStats(metal=metal, count=0, mean=0.0, median=0.0, std=0.0, min=0.0, max=0.0)

    array = np.asarray(values, dtype=np.float64)
    std = float(np.std(array, ddof=1)) if array.size > 1 else 0.0
    return MetalStats(
        metal=metal,
        count=int(array.size),
        mean=float(np.mean(array)),
        median=float(np.median(array)),
        std=std,
        min=float(np.min(array)),
        max=float(np.max(array)),
    )


def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return float(np.mean(values))


def _max(values: list[float]) -> float:
    if not values:
        return 0.0
    return float(np.max(values))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DatasetAggregator:
    """
    Computes per-row indices and grouped statistics from parsed rows.

    All methods are synchronous, deterministic and free of hidden state:
    the same rows and profile always yield the same output.

    Parameters
    ----------
    engine:
        Index engine used per row. A fresh :class:`IndexEngine` by default.
    """

    def __init__(self, engine: IndexEngine | None = None) -> None:
        self._engine = engine or IndexEngine()

    # ------------------------------------------------------------------
    # Per-row indices
    # ------------------------------------------------------------------

    def to_indexed_rows(
        self,
        rows: Iterable[DataRow],
        input_unit: ConcentrationUnit | str,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> list[IndexedRow]:
        """
        Convert each row to mg/L and run the index engine on it.

        Absent cells count as 0. Output preserves source order.
        """
        unit = parse_unit(input_unit)
        standards = resolve_profile(profile)

        indexed: list[IndexedRow] = []
        for row in rows:
            result = self._engine.evaluate(_sample_mg(row, unit), standards)
            indexed.append(
                IndexedRow(row=row, hpi=result.hpi, hei=result.hei, ci=result.ci, category=result.overall)
            )

        logger.debug(
            "to_indexed_rows unit=%s profile=%s → %d rows",
            unit.value, standards.name, len(indexed),
        )
        return indexed

    # ------------------------------------------------------------------
    # Averages and grouping
    # ------------------------------------------------------------------

    def average_by_metal(
        self,
        rows: Iterable[DataRow],
        input_unit: ConcentrationUnit | str,
    ) -> dict[MetalKey, float]:
        """
        Arithmetic mean per metal in mg/L over rows where the cell parsed.

        A metal with no valid samples averages to ``0.0``.
        """
        unit = parse_unit(input_unit)
        totals = {metal: 0.0 for metal in MetalKey}
        counts = {metal: 0 for metal in MetalKey}

        for row in rows:
            for metal, value in _sample_mg(row, unit).items():
                totals[metal] += value
                counts[metal] += 1

        averages = {
            metal: (totals[metal] / counts[metal] if counts[metal] else 0.0)
            for metal in MetalKey
        }
        logger.debug("average_by_metal unit=%s counts=%s", unit.value, {m.value: c for m, c in counts.items()})
        return averages

    def group_by(self, rows: Iterable[RowT], key_fn: Callable[[RowT], str]) -> dict[str, list[RowT]]:
        """
        Stable partition of *rows* by ``key_fn(row)``.

        Groups appear in first-seen order; rows keep insertion order.
        """
        groups: dict[str, list[RowT]] = {}
        for row in rows:
            groups.setdefault(key_fn(row), []).append(row)
        return groups

    def top_groups_by_metal(
        self,
        rows: Iterable[DataRow],
        metal: MetalKey,
        key_fn: Callable[[DataRow], str],
        input_unit: ConcentrationUnit | str,
        *,
        limit: int = 20,
    ) -> list[GroupRanking]:
        """
        Rank groups by mean concentration of *metal* (mg/L), highest first.

        Only valid cells count; a group without any is left out. The sort
        is stable, so ties keep first-seen order.
        """
        unit = parse_unit(input_unit)
        sums: dict[str, float] = {}
        counts: dict[str, int] = {}

        for row in rows:
            value = row.metals.get(metal)
            if value is None:
                continue
            key = key_fn(row)
            sums[key] = sums.get(key, 0.0) + to_mg_per_l(value, unit)
            counts[key] = counts.get(key, 0) + 1

        rankings = [
            GroupRanking(group_key=key, value=sums[key] / counts[key], samples=counts[key])
            for key in sums
        ]
        rankings.sort(key=lambda ranking: ranking.value, reverse=True)
        return rankings[: max(0, limit)]

    # ------------------------------------------------------------------
    # Exceedances
    # ------------------------------------------------------------------

    def exceedance_counts(
        self,
        rows: Sequence[DataRow],
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
        input_unit: ConcentrationUnit | str = ConcentrationUnit.MG_PER_L,
    ) -> dict[MetalKey, ExceedanceStat]:
        """
        Count rows where ``Mi / Si > 1`` for each metal.

        Absent or unparseable cells never count. ``percentage`` is relative
        to all rows and is ``0.0`` for an empty table.
        """
        unit = parse_unit(input_unit)
        standards = resolve_profile(profile)
        counts = {metal: 0 for metal in MetalKey}

        total = 0
        for row in rows:
            total += 1
            for metal, value in _sample_mg(row, unit).items():
                if value / standards.limits[metal] > 1:
                    counts[metal] += 1

        return {
            metal: ExceedanceStat(
                metal=metal,
                count=counts[metal],
                percentage=(counts[metal] / total * 100.0) if total else 0.0,
            )
            for metal in MetalKey
        }

    @staticmethod
    def rank_exceedances(stats: Mapping[MetalKey, ExceedanceStat]) -> list[ExceedanceStat]:
        """Order exceedances by count, highest first; ties keep metal order."""
        return sorted(stats.values(), key=lambda stat: stat.count, reverse=True)

    # ------------------------------------------------------------------
    # Summary statistics
    # ------------------------------------------------------------------

    def summarize(
        self,
        indexed_rows: Sequence[IndexedRow],
        input_unit: ConcentrationUnit | str,
        *,
        group_key: str = OVERALL_GROUP,
    ) -> AggregateStats:
        """
        Per-metal distribution (mg/L) and index mean/max for one group.
        """
        unit = parse_unit(input_unit)
        values: dict[MetalKey, list[float]] = {metal: [] for metal in MetalKey}
        hpis: list[float] = []
        heis: list[float] = []
        cis: list[float] = []

        for indexed in indexed_rows:
            for metal, value in _sample_mg(indexed.row, unit).items():
                values[metal].append(value)
            hpis.append(indexed.hpi)
            heis.append(indexed.hei)
            cis.append(indexed.ci)

        return AggregateStats(
            group_key=group_key,
            row_count=len(hpis),
            metals={metal: _metal_stats(metal, values[metal]) for metal in MetalKey},
            hpi_mean=_mean(hpis),
            hpi_max=_max(hpis),
            hei_mean=_mean(heis),
            hei_max=_max(heis),
            ci_mean=_mean(cis),
            ci_max=_max(cis),
        )

    def summarize_groups(
        self,
        indexed_rows: Sequence[IndexedRow],
        key_fn: Callable[[IndexedRow], str],
        input_unit: ConcentrationUnit | str,
    ) -> dict[str, AggregateStats]:
        """:meth:`summarize` for every group produced by :meth:`group_by`."""
        return {
            key: self.summarize(members, input_unit, group_key=key)
            for key, members in self.group_by(indexed_rows, key_fn).items()
        }

    def evaluate_group_means(
        self,
        rows: Iterable[DataRow],
        input_unit: ConcentrationUnit | str,
        profile: StandardsProfile | Mapping[Any, Any] | None = None,
    ) -> IndexResult:
        """
        Run the index engine on the per-metal averages of *rows*.

        This is the single index shown for a whole state or district.
        """
        return self._engine.evaluate(self.average_by_metal(rows, input_unit), profile)
