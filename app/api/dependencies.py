"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, status

from app.config import get_profile_registry
from indices.engine import IndexEngine
from standards.profiles import NamedProfile, StandardsProfileRegistry, UnknownStandardsProfile


def get_standards_registry() -> StandardsProfileRegistry:
    return get_profile_registry()


@lru_cache(maxsize=1)
def get_index_engine() -> IndexEngine:
    return IndexEngine()


def require_profile(registry: StandardsProfileRegistry, name: str | None) -> NamedProfile:
    """
    Resolve a profile name from a request body; unknown names are a 400.
    """

    try:
        return registry.get(name)
    except UnknownStandardsProfile as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "available": exc.available},
        ) from exc
