"""
app/schemas/indices.py

Request and response schemas for the index computation endpoint.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

NonNegativeConcentration = Annotated[float, Field(ge=0.0, allow_inf_nan=False)]


class IndexComputeRequest(BaseModel):
    """
    One sample in mg/L keyed by metal symbol; omitted metals count as 0.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    concentrations: dict[str, NonNegativeConcentration] = Field(default_factory=dict)
    profile: str | None = Field(default=None, description="Named standards profile (key or label).")


class CategoryResponse(BaseModel):
    label: str
    color: str


class IndexCategoriesResponse(BaseModel):
    hpi: CategoryResponse
    hei: CategoryResponse
    ci: CategoryResponse


class MetalContributionResponse(BaseModel):
    key: str
    Si: float
    Mi: float
    Wi: float
    Qi: float
    contribution: float


class MetalRatioResponse(BaseModel):
    key: str
    Si: float
    Mi: float
    ratio: float


class IndexResultResponse(BaseModel):
    """
    HPI, HEI and CI for one sample with per-index and overall categories.

    ``details`` is ordered by HPI contribution; ``ratios`` backs HEI and CI
    and follows metal order.
    """

    hpi: float
    hei: float
    ci: float
    categories: IndexCategoriesResponse
    overall: CategoryResponse
    dominant_index: str
    top_contributors: list[str] = Field(default_factory=list)
    details: list[MetalContributionResponse] = Field(default_factory=list)
    ratios: list[MetalRatioResponse] = Field(default_factory=list)


class IndexComputeResponse(IndexResultResponse):
    profile: str
