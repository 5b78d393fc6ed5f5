"""
app/schemas package marker.
"""

from app.schemas.health import HealthResponse
from app.schemas.indices import IndexComputeRequest, IndexComputeResponse, IndexResultResponse
from app.schemas.reports import ReportAnalysisResponse, ReportExportRequest, ReportRequest
from app.schemas.standards import StandardsListResponse, StandardsProfileResponse

__all__ = [
    "HealthResponse",
    "IndexComputeRequest",
    "IndexComputeResponse",
    "IndexResultResponse",
    "ReportAnalysisResponse",
    "ReportExportRequest",
    "ReportRequest",
    "StandardsListResponse",
    "StandardsProfileResponse",
]
