"""
app/api/routers package marker.
"""

from app.api.routers.indices_router import router as indices_router
from app.api.routers.reports_router import router as reports_router
from app.api.routers.standards_router import router as standards_router

__all__ = [
    "indices_router",
    "reports_router",
    "standards_router",
]
