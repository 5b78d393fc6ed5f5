"""
app/api/routers/reports_router.py

Report endpoints for CSV sampling tables.

POST /reports/analyze  → summary JSON
POST /reports/export   → CSV download (hmpi_report.csv)

All computation lives in ReportService; the router only handles HTTP
plumbing (error mapping, content-type, streaming).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from app.schemas.reports import ReportAnalysisResponse, ReportExportRequest, ReportRequest
from app.services.csv_ingestion_service import DatasetError
from app.services.report_service import ReportAnalysis, ReportService, get_report_service
from standards.profiles import UnknownStandardsProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

EXPORT_FILENAME = "hmpi_report.csv"


def _run_analysis(service: ReportService, payload: ReportRequest) -> ReportAnalysis:
    try:
        return service.analyze(
            payload.csv_text,
            input_unit=payload.input_unit,
            profile=payload.profile,
            strict=payload.strict,
            top_metal=payload.top_metal,
        )
    except DatasetError as exc:
        logger.info("Rejected report table: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except UnknownStandardsProfile as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "available": exc.available},
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.post("/analyze", response_model=ReportAnalysisResponse)
def analyze_report(
    payload: ReportRequest,
    service: ReportService = Depends(get_report_service),
) -> ReportAnalysisResponse:
    """
    Parse the table, compute per-row indices and return dataset statistics.
    """

    analysis = _run_analysis(service, payload)
    return ReportAnalysisResponse.model_validate(analysis.to_dict())


@router.post("/export")
def export_report(
    payload: ReportExportRequest,
    service: ReportService = Depends(get_report_service),
) -> StreamingResponse:
    """
    Download the input table with HPI, HEI and CI columns appended.

    Index columns are full precision unless ``decimals`` is given.
    """

    analysis = _run_analysis(service, payload)
    return StreamingResponse(
        content=service.iter_export_csv(analysis, decimals=payload.decimals),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f"attachment; filename={EXPORT_FILENAME}",
            "X-Row-Count": str(len(analysis.indexed_rows)),
        },
    )
