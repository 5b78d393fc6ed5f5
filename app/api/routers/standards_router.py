"""
app/api/routers/standards_router.py

Read-only endpoints for the configured standards profiles.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_standards_registry
from app.schemas.standards import StandardsListResponse, StandardsProfileResponse
from standards.profiles import NamedProfile, StandardsProfileRegistry, UnknownStandardsProfile

router = APIRouter(prefix="/standards", tags=["standards"])


def _to_response(named: NamedProfile) -> StandardsProfileResponse:
    return StandardsProfileResponse(key=named.key, label=named.label, limits=named.profile.as_dict())


@router.get("", response_model=StandardsListResponse)
def list_standards(
    registry: StandardsProfileRegistry = Depends(get_standards_registry),
) -> StandardsListResponse:
    """
    List every configured profile with its limits in mg/L.
    """

    return StandardsListResponse(
        default=registry.default().key,
        profiles=[_to_response(named) for named in registry],
    )


@router.get("/{name}", response_model=StandardsProfileResponse)
def get_standard(
    name: str,
    registry: StandardsProfileRegistry = Depends(get_standards_registry),
) -> StandardsProfileResponse:
    """
    Return one profile by key or display label.
    """

    try:
        named = registry.get(name)
    except UnknownStandardsProfile as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return _to_response(named)
