"""
app/schemas/reports.py

Request and response schemas for report endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.indices import IndexResultResponse


class ReportRequest(BaseModel):
    """
    A sampling table as CSV text plus the choices that shape the report.

    Unset fields fall back to the service configuration.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    csv_text: str = Field(..., description="CSV text including the header row.")
    input_unit: str | None = Field(default=None, description='"µg/L" or "mg/L".')
    profile: str | None = Field(default=None, description="Named standards profile (key or label).")
    strict: bool | None = Field(default=None, description="Reject the table on any bad metal cell.")
    top_metal: str | None = Field(default=None, description="Metal used to rank districts.")


class ReportExportRequest(ReportRequest):
    decimals: int | None = Field(default=None, ge=0, le=12)


class ExceedanceResponse(BaseModel):
    key: str
    count: int = Field(..., ge=0)
    pct: float = Field(..., ge=0.0)


class ReportSummaryResponse(BaseModel):
    rows: int = Field(..., ge=0)
    units: str
    profile: str
    averages_mgL: dict[str, float]
    hpi_avg: float
    hei_avg: float
    ci_max: float
    exceedances: list[ExceedanceResponse] = Field(default_factory=list)


class MetalStatsResponse(BaseModel):
    count: int = Field(..., ge=0)
    mean: float
    median: float
    std: float
    min: float
    max: float


class AggregateStatsResponse(BaseModel):
    group_key: str
    row_count: int = Field(..., ge=0)
    metals: dict[str, MetalStatsResponse]
    hpi_mean: float
    hpi_max: float
    hei_mean: float
    hei_max: float
    ci_mean: float
    ci_max: float


class StateStatsResponse(AggregateStatsResponse):
    index: IndexResultResponse


class DistrictRankingResponse(BaseModel):
    district: str
    mean_mgL: float
    samples: int = Field(..., ge=1)


class TopDistrictsResponse(BaseModel):
    metal: str
    districts: list[DistrictRankingResponse] = Field(default_factory=list)


class CellIssueResponse(BaseModel):
    """
    API response model for one metal cell that was treated as absent.
    """

    row_number: int = Field(..., ge=1)
    column: str
    message: str
    value: str | None = None


class ReportAnalysisResponse(BaseModel):
    summary: ReportSummaryResponse
    overall: AggregateStatsResponse
    states: dict[str, StateStatsResponse] = Field(default_factory=dict)
    top_districts: TopDistrictsResponse
    cell_issues: list[CellIssueResponse] = Field(default_factory=list)
    cell_issues_truncated: bool = False
