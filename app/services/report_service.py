"""
app/services/report_service.py

End-to-end report pipeline for an uploaded sampling table.

Stages run in strict sequence, mirroring the dependency chain:

    1. Parse        (CSV text → DataRow records + cell issues)
    2. Index        (DataRow → IndexedRow, per-row HPI/HEI/CI in mg/L)
    3. Averages     (per-metal means over valid cells)
    4. Exceedances  (per-metal Mi/Si > 1 counts, ranked)
    5. Summaries    (dataset-wide and per-state statistics)
    6. Rankings     (top districts by mean concentration of one metal)

The result is a :class:`ReportAnalysis`; the HTTP layer and the CLI only
serialise it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterator, Mapping

from app.config import get_profile_registry, get_report_settings
from app.domain.water_quality import (
    AggregateStats,
    CellIssue,
    GroupRanking,
    IndexedRow,
    MetalStats,
    ParsedTable,
)
from app.services.aggregation_service import DatasetAggregator, district_key, state_key
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.services.report_export_service import ReportExportService, ReportSummary
from indices.engine import IndexResult
from standards.profiles import NamedProfile, StandardsProfileRegistry
from standards.registry import MetalKey, coerce_metal_key
from standards.units import ConcentrationUnit, parse_unit

logger = logging.getLogger(__name__)

DEFAULT_TOP_METAL = MetalKey.PB


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------


def _metal_stats_to_dict(stats: MetalStats) -> dict[str, Any]:
    return {
        "count": stats.count,
        "mean": stats.mean,
        "median": stats.median,
        "std": stats.std,
        "min": stats.min,
        "max": stats.max,
    }


def aggregate_to_dict(stats: AggregateStats) -> dict[str, Any]:
    return {
        "group_key": stats.group_key,
        "row_count": stats.row_count,
        "metals": {metal.value: _metal_stats_to_dict(item) for metal, item in stats.metals.items()},
        "hpi_mean": stats.hpi_mean,
        "hpi_max": stats.hpi_max,
        "hei_mean": stats.hei_mean,
        "hei_max": stats.hei_max,
        "ci_mean": stats.ci_mean,
        "ci_max": stats.ci_max,
    }


def issue_to_dict(issue: CellIssue) -> dict[str, Any]:
    return {
        "row_number": issue.row_number,
        "column": issue.column,
        "message": issue.message,
        "value": issue.value,
    }


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportAnalysis:
    """
    Everything derived from one table under one unit and profile.

    ``state_indices`` holds the index of each state's average sample, which
    is not the same as the mean of that state's per-row indices.
    """

    table: ParsedTable
    input_unit: ConcentrationUnit
    profile: NamedProfile
    indexed_rows: tuple[IndexedRow, ...]
    summary: ReportSummary
    overall: AggregateStats
    states: Mapping[str, AggregateStats]
    state_indices: Mapping[str, IndexResult]
    top_metal: MetalKey
    top_districts: tuple[GroupRanking, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "overall": aggregate_to_dict(self.overall),
            "states": {
                key: {
                    **aggregate_to_dict(stats),
                    "index": self.state_indices[key].to_dict(),
                }
                for key, stats in self.states.items()
            },
            "top_districts": {
                "metal": self.top_metal.value,
                "districts": [
                    {"district": ranking.group_key, "mean_mgL": ranking.value, "samples": ranking.samples}
                    for ranking in self.top_districts
                ],
            },
            "cell_issues": [issue_to_dict(issue) for issue in self.table.issues],
            "cell_issues_truncated": self.table.issues_truncated,
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportService:
    """
    Orchestrates parsing, indexing, aggregation and export for one table.

    Parameters
    ----------
    ingestion:
        CSV parsing service.
    registry:
        Named standards profiles for ``profile`` lookups.
    aggregator:
        Dataset aggregator; a default one is created when omitted.
    exporter:
        Export formatter; a default one is created when omitted.
    default_input_unit, default_profile:
        Applied when a call leaves the choice open.
    top_districts_limit, top_exceedances_limit:
        Lengths of the ranked lists in the analysis.
    export_decimals:
        Default rounding for exported index columns; ``None`` keeps full
        precision.
    """

    def __init__(
        self,
        *,
        ingestion: CSVIngestionService,
        registry: StandardsProfileRegistry,
        aggregator: DatasetAggregator | None = None,
        exporter: ReportExportService | None = None,
        default_input_unit: ConcentrationUnit | str = ConcentrationUnit.UG_PER_L,
        default_profile: str | None = None,
        top_districts_limit: int = 20,
        top_exceedances_limit: int = 8,
        export_decimals: int | None = None,
    ) -> None:
        self._ingestion = ingestion
        self._registry = registry
        self._aggregator = aggregator or DatasetAggregator()
        self._exporter = exporter or ReportExportService()
        self._default_input_unit = parse_unit(default_input_unit)
        self._default_profile = default_profile
        self._top_districts_limit = top_districts_limit
        self._top_exceedances_limit = top_exceedances_limit
        self._export_decimals = export_decimals

    @property
    def registry(self) -> StandardsProfileRegistry:
        return self._registry

    def resolve_profile(self, profile: str | None) -> NamedProfile:
        """Named profile for *profile*, falling back to the configured default."""
        return self._registry.get(profile if profile else self._default_profile)

    def resolve_unit(self, input_unit: ConcentrationUnit | str | None) -> ConcentrationUnit:
        return self._default_input_unit if input_unit is None else parse_unit(input_unit)

    def analyze(
        self,
        raw_text: str,
        *,
        input_unit: ConcentrationUnit | str | None = None,
        profile: str | None = None,
        strict: bool | None = None,
        top_metal: MetalKey | str | None = None,
    ) -> ReportAnalysis:
        """
        Run the full pipeline on *raw_text*.

        Raises
        ------
        ParseError
            When required headers are missing or the CSV is malformed.
        UnparseableCellError
            In strict mode, when any metal cell fails to parse.
        UnknownStandardsProfile
            When *profile* does not name a configured profile.
        ValueError
            When *input_unit* or *top_metal* is not recognised.
        """
        unit = self.resolve_unit(input_unit)
        named = self.resolve_profile(profile)
        metal = DEFAULT_TOP_METAL if top_metal is None else coerce_metal_key(top_metal)
        standards = named.profile

        # --- Stage 1: parse --------------------------------------------------
        table = self._ingestion.parse_table(raw_text, strict=strict)
        rows = table.rows

        # --- Stage 2: per-row indices ---------------------------------------
        indexed = self._aggregator.to_indexed_rows(rows, unit, standards)

        # --- Stage 3 + 4: averages and exceedances ---------------------------
        averages = self._aggregator.average_by_metal(rows, unit)
        exceedances = self._aggregator.rank_exceedances(
            self._aggregator.exceedance_counts(rows, standards, unit)
        )

        # --- Stage 5: summaries ---------------------------------------------
        overall = self._aggregator.summarize(indexed, unit)
        states = self._aggregator.summarize_groups(indexed, state_key, unit)
        state_indices = {
            key: self._aggregator.evaluate_group_means((item.row for item in members), unit, standards)
            for key, members in self._aggregator.group_by(indexed, state_key).items()
        }

        # --- Stage 6: rankings ----------------------------------------------
        top_districts = self._aggregator.top_groups_by_metal(
            rows, metal, district_key, unit, limit=self._top_districts_limit
        )

        summary = ReportSummary(
            rows=len(rows),
            units=unit.value,
            profile=named.label,
            averages_mg_l=averages,
            hpi_avg=overall.hpi_mean,
            hei_avg=overall.hei_mean,
            ci_max=overall.ci_max,
            exceedances=tuple(exceedances[: self._top_exceedances_limit]),
        )

        logger.info(
            "Report analysed rows=%d states=%d unit=%s profile=%s cell_issues=%d",
            len(rows),
            len(states),
            unit.value,
            named.key,
            len(table.issues),
        )
        return ReportAnalysis(
            table=table,
            input_unit=unit,
            profile=named,
            indexed_rows=tuple(indexed),
            summary=summary,
            overall=overall,
            states=states,
            state_indices=state_indices,
            top_metal=metal,
            top_districts=tuple(top_districts),
        )

    def export_csv(self, analysis: ReportAnalysis, decimals: int | None = None) -> str:
        """
        Export CSV for *analysis*.

        ``decimals`` rounds index columns only and falls back to the
        configured default.
        """
        result = self._exporter.build_export(analysis.indexed_rows)
        return self._exporter.to_csv(result, decimals=self._export_decimals if decimals is None else decimals)

    def iter_export_csv(self, analysis: ReportAnalysis, decimals: int | None = None) -> Iterator[str]:
        """Chunked form of :meth:`export_csv` for streaming responses."""
        result = self._exporter.build_export(analysis.indexed_rows)
        return self._exporter.iter_csv(result, decimals=self._export_decimals if decimals is None else decimals)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    """
    Build and cache the report service with env-driven settings.
    """
    settings = get_report_settings()
    return ReportService(
        ingestion=get_csv_ingestion_service(),
        registry=get_profile_registry(),
        default_input_unit=settings.default_input_unit,
        default_profile=settings.default_profile,
        top_districts_limit=settings.top_districts_limit,
        top_exceedances_limit=settings.top_exceedances_limit,
        export_decimals=settings.export_decimals,
    )
