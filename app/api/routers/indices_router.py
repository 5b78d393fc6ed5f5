"""
app/api/routers/indices_router.py

Single-sample index computation endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_index_engine, get_standards_registry, require_profile
from app.schemas.indices import IndexComputeRequest, IndexComputeResponse
from indices.base import InvalidConcentration
from indices.engine import IndexEngine
from standards.profiles import StandardsProfileRegistry

router = APIRouter(prefix="/indices", tags=["indices"])


@router.post("/compute", response_model=IndexComputeResponse)
def compute_indices(
    payload: IndexComputeRequest,
    registry: StandardsProfileRegistry = Depends(get_standards_registry),
    engine: IndexEngine = Depends(get_index_engine),
) -> IndexComputeResponse:
    """
    Compute HPI, HEI and CI for one sample given in mg/L.
    """

    named = require_profile(registry, payload.profile)
    try:
        result = engine.evaluate(payload.concentrations, named.profile)
    except InvalidConcentration as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return IndexComputeResponse.model_validate({**result.to_dict(), "profile": named.key})
