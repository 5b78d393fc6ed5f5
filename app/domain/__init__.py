"""
app/domain package marker.
"""

from app.domain.water_quality import (
    AggregateStats,
    CellIssue,
    DataRow,
    ExceedanceStat,
    GroupRanking,
    IndexedRow,
    MetalStats,
    ParsedTable,
)

__all__ = [
    "AggregateStats",
    "CellIssue",
    "DataRow",
    "ExceedanceStat",
    "GroupRanking",
    "IndexedRow",
    "MetalStats",
    "ParsedTable",
]
