"""
app/services package marker.
"""

from app.services.aggregation_service import DatasetAggregator
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    DatasetError,
    ParseError,
    UnparseableCellError,
    get_csv_ingestion_service,
)
from app.services.report_export_service import ExportResult, ReportExportService, ReportSummary
from app.services.report_service import ReportAnalysis, ReportService, get_report_service

__all__ = [
    "CSVIngestionService",
    "DatasetAggregator",
    "DatasetError",
    "ExportResult",
    "ParseError",
    "ReportAnalysis",
    "ReportExportService",
    "ReportService",
    "ReportSummary",
    "UnparseableCellError",
    "get_csv_ingestion_service",
    "get_report_service",
]
