"""
app/services/csv_ingestion_service.py

Parses uploaded or pasted CSV text into :class:`DataRow` records.

Header validation is strict: every one of the 13 required columns must be
present or the whole table is rejected with :class:`ParseError`. Cell
parsing is lenient by default: a metal cell that is not a valid
non-negative decimal is treated as absent (0 contribution), recorded as a
:class:`CellIssue`, and never aborts the row or the table. Strict mode
raises :class:`UnparseableCellError` instead.

Note that lenient mode cannot tell "measured 0" from "missing": a bad cell
silently under-counts exceedances for its metal.
"""

from __future__ import annotations

import csv
import io
import logging
from functools import lru_cache
from typing import Any, Sequence

from app.config import get_csv_ingestion_settings
from app.domain.water_quality import (
    IDENTITY_HEADERS,
    REQUIRED_HEADERS,
    CellIssue,
    DataRow,
    ParsedTable,
)
from app.validators.csv_validator import MetalCellValidator
from standards.registry import MetalKey

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DatasetError(ValueError):
    """
    Base class for table-level failures.
    """

    def to_dict(self) -> dict[str, Any]:
        return {"message": str(self)}


class ParseError(DatasetError):
    """
    Raised when the CSV cannot be read as a sampling table.

    ``missing_headers`` lists absent required columns in canonical order.
    """

    def __init__(self, message: str, *, missing_headers: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing_headers = tuple(missing_headers)

    def to_dict(self) -> dict[str, Any]:
        return {"message": str(self), "missing_headers": list(self.missing_headers)}


class UnparseableCellError(DatasetError):
    """
    Raised in strict mode when one or more metal cells fail to parse.
    """

    def __init__(self, message: str, *, issues: Sequence[CellIssue]) -> None:
        super().__init__(message)
        self.issues = tuple(issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "issues": [
                {
                    "row_number": issue.row_number,
                    "column": issue.column,
                    "message": issue.message,
                    "value": issue.value,
                }
                for issue in self.issues
            ],
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates CSV reading, header validation and cell parsing.
    """

    def __init__(
        self,
        *,
        max_cell_issues: int = 500,
        log_cell_issues: bool = True,
        strict: bool = False,
        validator: MetalCellValidator | None = None,
    ) -> None:
        self._max_cell_issues = max(1, max_cell_issues)
        self._log_cell_issues = log_cell_issues
        self._strict = strict
        self._validator = validator or MetalCellValidator()

    def parse_table(self, raw_text: str, *, strict: bool | None = None) -> ParsedTable:
        """
        Parse *raw_text* into a :class:`ParsedTable`.

        Args:
            raw_text: Full CSV text including the header row.
            strict:   Override the service default for cell strictness.

        Raises:
            ParseError: Required headers are missing or the CSV is malformed.
            UnparseableCellError: Strict mode and at least one bad metal cell.
        """
        strict_mode = self._strict if strict is None else strict
        text = raw_text[1:] if raw_text.startswith(_BOM) else raw_text

        rows: list[DataRow] = []
        captured_issues: list[CellIssue] = []
        all_issues: list[CellIssue] = []
        issue_count = 0

        try:
            reader = csv.reader(io.StringIO(text, newline=""))
            header_row = next(reader, None) or []
            headers = tuple(header.strip() for header in header_row)

            missing = [header for header in REQUIRED_HEADERS if header not in headers]
            if missing:
                raise ParseError(
                    f"Missing headers: {', '.join(missing)}",
                    missing_headers=missing,
                )

            for row_number, values in enumerate(reader, start=2):
                raw_row = dict(zip(headers, values))
                if self._validator.is_completely_empty_row(raw_row):
                    logger.debug("Skipping empty CSV row=%d", row_number)
                    continue

                row, row_issues = self._parse_row(raw_row=raw_row, headers=headers, row_number=row_number)
                rows.append(row)
                for issue in row_issues:
                    issue_count += 1
                    if strict_mode:
                        all_issues.append(issue)
                    self._record_issue(captured_issues, issue)

        except csv.Error as exc:
            raise ParseError(f"Invalid CSV format: {exc}") from exc

        if strict_mode and all_issues:
            raise UnparseableCellError(
                f"{len(all_issues)} metal cell(s) are not valid non-negative decimals.",
                issues=all_issues,
            )

        logger.debug("Parsed CSV table rows=%d cell_issues=%d", len(rows), issue_count)
        return ParsedTable(
            headers=headers,
            rows=tuple(rows),
            issues=tuple(captured_issues),
            issues_truncated=issue_count > len(captured_issues),
        )

    # ------------------------------------------------------------------
    # Parsing internals
    # ------------------------------------------------------------------

    def _parse_row(
        self,
        *,
        raw_row: dict[str, str],
        headers: tuple[str, ...],
        row_number: int,
    ) -> tuple[DataRow, list[CellIssue]]:
        issues: list[CellIssue] = []
        metals: dict[MetalKey, float | None] = {}
        raw_metals: dict[MetalKey, str] = {}

        for metal in MetalKey:
            cell = raw_row.get(metal.value)
            raw_metals[metal] = "" if cell is None else cell
            value, issue = self._validator.parse_metal_cell(
                value=cell,
                row_number=row_number,
                column=metal.value,
            )
            metals[metal] = value
            if issue is not None:
                issues.append(issue)

        identity = {header: (raw_row.get(header) or "").strip() for header in IDENTITY_HEADERS}
        extras = {
            header: raw_row.get(header, "")
            for header in headers
            if header and header not in REQUIRED_HEADERS
        }

        row = DataRow(
            row_number=row_number,
            state=identity["State"],
            district=identity["District"],
            location=identity["Location"],
            longitude=identity["Longitude"],
            latitude=identity["Latitude"],
            metals=metals,
            raw_metals=raw_metals,
            extras=extras,
        )
        return row, issues

    def _record_issue(self, captured_issues: list[CellIssue], issue: CellIssue) -> None:
        if self._log_cell_issues:
            logger.warning(
                "CSV cell treated as absent row=%s column=%s message=%s value=%r",
                issue.row_number,
                issue.column,
                issue.message,
                issue.value,
            )

        if len(captured_issues) < self._max_cell_issues:
            captured_issues.append(issue)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_csv_ingestion_settings()
    return CSVIngestionService(
        max_cell_issues=settings.max_cell_issues,
        log_cell_issues=settings.log_cell_issues,
        strict=settings.strict_cells,
    )


def parse_table(raw_text: str, *, strict: bool = False) -> ParsedTable:
    """
    Parse CSV text with default service settings.

    See :meth:`CSVIngestionService.parse_table`.
    """
    return CSVIngestionService(strict=strict).parse_table(raw_text)
