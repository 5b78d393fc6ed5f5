"""
app/services/report_export_service.py

Tabular export and summary payloads for water-quality reports.

The export is one flat row per input record:

    State, District, Location, Longitude, Latitude,
    Cd, Cr, Cu, Pb, Mn, Ni, Fe, Zn,   (original cell text)
    HPI, HEI, CI                      (computed indices)

Index values stay at full precision inside :class:`ExportResult`. Rounding
is a display concern and happens only when the CSV is written.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

from app.domain.water_quality import (
    INDEX_HEADERS,
    REQUIRED_HEADERS,
    ExceedanceStat,
    IndexedRow,
)
from standards.registry import MetalKey


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular data ready for CSV or JSON serialisation.

    Attributes
    ----------
    rows:   One dict per input record; index columns hold floats.
    fields: Ordered column names, identical for every export.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReportSummary:
    """
    Dataset-level context for a report narrative.

    ``averages_mg_l`` are per-metal means over valid cells, in mg/L.
    ``exceedances`` is already ranked and cut to the configured top N.
    """

    rows: int
    units: str
    profile: str
    averages_mg_l: Mapping[MetalKey, float]
    hpi_avg: float
    hei_avg: float
    ci_max: float
    exceedances: Sequence[ExceedanceStat]

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "units": self.units,
            "profile": self.profile,
            "averages_mgL": {metal.value: value for metal, value in self.averages_mg_l.items()},
            "hpi_avg": self.hpi_avg,
            "hei_avg": self.hei_avg,
            "ci_max": self.ci_max,
            "exceedances": [
                {"key": stat.metal.value, "count": stat.count, "pct": stat.percentage}
                for stat in self.exceedances
            ],
        }


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_index(value: float, decimals: int | None) -> str:
    if decimals is None:
        return repr(float(value))
    return f"{value:.{decimals}f}"


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportExportService:
    """
    Flatten indexed rows for download.

    Stateless; every method is a pure transformation of its input.
    """

    fields: tuple[str, ...] = REQUIRED_HEADERS + INDEX_HEADERS

    def build_export(self, indexed_rows: Sequence[IndexedRow]) -> ExportResult:
        """
        Build one export row per indexed record, in source order.

        Metal columns carry the original cell text so a reader sees exactly
        what was uploaded, including cells that failed to parse.
        """
        rows: list[dict[str, Any]] = []
        for indexed in indexed_rows:
            record: dict[str, Any] = dict(indexed.row.identity())
            for metal in MetalKey:
                record[metal.value] = indexed.row.raw_metals.get(metal, "")
            record["HPI"] = indexed.hpi
            record["HEI"] = indexed.hei
            record["CI"] = indexed.ci
            rows.append(record)

        return ExportResult(rows=rows, fields=list(self.fields))

    def iter_csv(self, result: ExportResult, decimals: int | None = None) -> Iterator[str]:
        """
        Yield *result* as CSV chunks: the header line, then one chunk per row.

        ``decimals`` rounds the index columns for display; ``None`` keeps
        full precision.
        """
        if decimals is not None and decimals < 0:
            raise ValueError("decimals must be >= 0")

        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            clean = {key: ("" if value is None else value) for key, value in row.items()}
            for header in INDEX_HEADERS:
                if isinstance(clean.get(header), float):
                    clean[header] = _format_index(clean[header], decimals)
            writer.writerow(clean)
            yield buf.getvalue()

    def to_csv(self, result: ExportResult, decimals: int | None = None) -> str:
        """Serialise *result* as one CSV string with CRLF line endings."""
        return "".join(self.iter_csv(result, decimals))
