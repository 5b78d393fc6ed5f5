"""
tests/test_csv_ingestion_service.py

Pytest unit tests for CSV table parsing.

All tests parse in-memory strings; nothing touches the filesystem.

Coverage
--------
- Header validation (missing columns, canonical order)
- Lenient cell parsing: bad cells become absent and are reported
- Strict cell parsing
- Blank cells, empty rows, BOM and surrounding whitespace
- Extra columns and original cell text
- Issue capture limit
"""

from __future__ import annotations

import pytest

from app.services.aggregation_service import DatasetAggregator
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    DatasetError,
    ParseError,
    UnparseableCellError,
    parse_table,
)
from app.validators.csv_validator import MetalCellValidator
from standards.registry import MetalKey
from standards.units import ConcentrationUnit

HEADER = "State,District,Location,Longitude,Latitude,Cd,Cr,Cu,Pb,Mn,Ni,Fe,Zn"


def _table(*rows: str, header: str = HEADER) -> str:
    return "\n".join((header,) + rows) + "\n"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def service() -> CSVIngestionService:
    return CSVIngestionService(log_cell_issues=False)


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_missing_metal_header(self, service: CSVIngestionService) -> None:
        header = "State,District,Location,Longitude,Latitude,Cd,Cr,Cu,Mn,Ni,Fe,Zn"
        with pytest.raises(ParseError) as exc_info:
            service.parse_table(_table("A,B,C,1,2,0,0,0,0,0,0,0", header=header))
        assert exc_info.value.missing_headers == ("Pb",)
        assert str(exc_info.value) == "Missing headers: Pb"

    def test_missing_headers_in_canonical_order(self, service: CSVIngestionService) -> None:
        with pytest.raises(ParseError) as exc_info:
            service.parse_table("Zn,State,Location\n1,A,B\n")
        assert exc_info.value.missing_headers == (
            "District",
            "Longitude",
            "Latitude",
            "Cd",
            "Cr",
            "Cu",
            "Pb",
            "Mn",
            "Ni",
            "Fe",
        )

    def test_empty_text_is_missing_everything(self, service: CSVIngestionService) -> None:
        with pytest.raises(ParseError) as exc_info:
            service.parse_table("")
        assert len(exc_info.value.missing_headers) == 13

    def test_parse_error_to_dict(self) -> None:
        error = ParseError("Missing headers: Pb", missing_headers=["Pb"])
        assert error.to_dict() == {"message": "Missing headers: Pb", "missing_headers": ["Pb"]}
        assert isinstance(error, DatasetError)
        assert isinstance(error, ValueError)

    def test_header_whitespace_and_bom(self, service: CSVIngestionService) -> None:
        header = "\ufeffState, District ,Location,Longitude,Latitude,Cd,Cr,Cu,Pb,Mn,Ni,Fe,Zn"
        table = service.parse_table(_table("A,B,C,1,2,0,0,0,5,0,0,0,0", header=header))
        assert table.rows[0].district == "B"
        assert table.rows[0].metals[MetalKey.PB] == 5.0

    def test_column_order_does_not_matter(self, service: CSVIngestionService) -> None:
        header = "Zn,Fe,Ni,Mn,Pb,Cu,Cr,Cd,Latitude,Longitude,Location,District,State"
        table = service.parse_table(_table("8,7,6,5,4,3,2,1,lat,lon,loc,dist,st", header=header))
        row = table.rows[0]
        assert row.state == "st"
        assert row.metals[MetalKey.CD] == 1.0
        assert row.metals[MetalKey.ZN] == 8.0


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


class TestRows:
    def test_values_and_identity(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("Punjab,Ludhiana,Well 4,75.85,30.90,3,50,50,10,100,20,300,5000"))
        assert len(table.rows) == 1
        row = table.rows[0]
        assert row.row_number == 2
        assert row.identity() == {
            "State": "Punjab",
            "District": "Ludhiana",
            "Location": "Well 4",
            "Longitude": "75.85",
            "Latitude": "30.90",
        }
        assert row.coordinates() == (75.85, 30.9)
        assert row.metals[MetalKey.ZN] == 5000.0
        assert table.issues == ()

    def test_blank_cells_are_absent_without_issue(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,,0,0, ,0,0,0,0"))
        row = table.rows[0]
        assert row.metals[MetalKey.CD] is None
        assert row.metals[MetalKey.PB] is None
        assert table.issues == ()

    def test_empty_rows_skipped(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,0,0,0,0,0,0,0,0", "", ",,,,,,,,,,,,", "D,E,F,1,2,0,0,0,0,0,0,0,0"))
        assert [row.state for row in table.rows] == ["A", "D"]
        assert [row.row_number for row in table.rows] == [2, 5]

    def test_short_row_fills_absent(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,4"))
        row = table.rows[0]
        assert row.metals[MetalKey.CD] == 4.0
        assert row.metals[MetalKey.ZN] is None
        assert row.raw_metals[MetalKey.ZN] == ""

    def test_extra_columns_kept(self, service: CSVIngestionService) -> None:
        header = HEADER + ",Notes"
        table = service.parse_table(_table("A,B,C,1,2,0,0,0,0,0,0,0,0,post-monsoon", header=header))
        assert table.rows[0].extras == {"Notes": "post-monsoon"}
        assert table.headers[-1] == "Notes"

    def test_quoted_cells(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table('"Tamil Nadu","Chennai, North",C,1,2,0,0,0,0,0,0,0,0'))
        assert table.rows[0].district == "Chennai, North"

    def test_module_level_parse_table(self) -> None:
        table = parse_table(_table("A,B,C,1,2,0,0,0,0,0,0,0,0"))
        assert len(table.rows) == 1


# ---------------------------------------------------------------------------
# Unparseable cells
# ---------------------------------------------------------------------------


class TestCellIssues:
    def test_non_numeric_cell_is_absent_and_reported(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,abc,0,0,0.02,0,0,0,0"))
        row = table.rows[0]
        assert row.metals[MetalKey.CD] is None
        assert row.raw_metals[MetalKey.CD] == "abc"
        assert row.metals[MetalKey.PB] == 0.02
        assert len(table.issues) == 1
        issue = table.issues[0]
        assert (issue.row_number, issue.column, issue.value) == (2, "Cd", "abc")
        assert issue.message == "Concentration is not a valid decimal number."

    @pytest.mark.parametrize(
        "cell, message",
        [
            ("0.05abc", "Concentration is not a valid decimal number."),
            ("-1", "Concentration must not be negative."),
            ("NaN", "Concentration must be a finite number."),
            ("Infinity", "Concentration must be a finite number."),
            ("1e400", "Concentration is out of range."),
        ],
    )
    def test_rejected_cells(self, service: CSVIngestionService, cell: str, message: str) -> None:
        table = service.parse_table(_table(f"A,B,C,1,2,0,0,0,{cell},0,0,0,0"))
        assert table.rows[0].metals[MetalKey.PB] is None
        assert table.issues[0].message == message

    def test_out_of_range_cell_does_not_abort_table(self, service: CSVIngestionService) -> None:
        table = service.parse_table(
            _table(
                "A,B,C,1,2,1e400,0,0,0.02,0,0,0,0",
                "A,B,C,1,2,0.003,0,0,0.01,0,0,0,0",
            )
        )
        assert [row.metals[MetalKey.CD] for row in table.rows] == [None, 0.003]
        assert [(issue.row_number, issue.column) for issue in table.issues] == [(2, "Cd")]

        indexed = DatasetAggregator().to_indexed_rows(table.rows, ConcentrationUnit.MG_PER_L)
        assert len(indexed) == 2
        assert indexed[0].hei == 2.0

    def test_whitespace_around_number_accepted(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,0,0,0, 0.5 ,0,0,0,0"))
        assert table.rows[0].metals[MetalKey.PB] == 0.5
        assert table.rows[0].raw_metals[MetalKey.PB] == " 0.5 "

    def test_scientific_notation_accepted(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,0,0,0,1e-3,0,0,0,0"))
        assert table.rows[0].metals[MetalKey.PB] == 0.001

    def test_issue_capture_is_capped(self) -> None:
        service = CSVIngestionService(max_cell_issues=2, log_cell_issues=False)
        table = service.parse_table(_table("A,B,C,1,2,x,x,x,0,0,0,0,0"))
        assert len(table.issues) == 2
        assert table.issues_truncated is True
        assert len(table.rows) == 1

    def test_issues_logged_as_warnings(self, caplog: pytest.LogCaptureFixture) -> None:
        service = CSVIngestionService(log_cell_issues=True)
        with caplog.at_level("WARNING", logger="app.services.csv_ingestion_service"):
            service.parse_table(_table("A,B,C,1,2,abc,0,0,0,0,0,0,0"))
        assert any("column=Cd" in record.getMessage() for record in caplog.records)


# ---------------------------------------------------------------------------
# Strict mode
# ---------------------------------------------------------------------------


class TestStrictMode:
    def test_strict_rejects_table(self, service: CSVIngestionService) -> None:
        with pytest.raises(UnparseableCellError) as exc_info:
            service.parse_table(_table("A,B,C,1,2,abc,0,0,0,0,0,0,0", "D,E,F,1,2,0,0,0,-2,0,0,0,0"), strict=True)
        issues = exc_info.value.issues
        assert [(issue.row_number, issue.column) for issue in issues] == [(2, "Cd"), (3, "Pb")]
        assert exc_info.value.to_dict()["issues"][0]["value"] == "abc"

    def test_strict_ignores_blank_cells(self, service: CSVIngestionService) -> None:
        table = service.parse_table(_table("A,B,C,1,2,,0,0,0,0,0,0,0"), strict=True)
        assert table.rows[0].metals[MetalKey.CD] is None

    def test_strict_default_from_constructor(self) -> None:
        service = CSVIngestionService(strict=True, log_cell_issues=False)
        with pytest.raises(UnparseableCellError):
            service.parse_table(_table("A,B,C,1,2,abc,0,0,0,0,0,0,0"))
        assert service.parse_table(_table("A,B,C,1,2,abc,0,0,0,0,0,0,0"), strict=False).issues


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class TestMetalCellValidator:
    def test_blank_row_detection(self) -> None:
        validator = MetalCellValidator()
        assert validator.is_completely_empty_row({"a": "", "b": "  ", "c": None})
        assert not validator.is_completely_empty_row({"a": "", "b": "0"})

    def test_parse_returns_value_or_issue(self) -> None:
        validator = MetalCellValidator()
        assert validator.parse_metal_cell(value="0.25", row_number=2, column="Pb") == (0.25, None)
        assert validator.parse_metal_cell(value="", row_number=2, column="Pb") == (None, None)
        value, issue = validator.parse_metal_cell(value="n/a", row_number=7, column="Fe")
        assert value is None
        assert issue is not None and issue.row_number == 7 and issue.column == "Fe"
