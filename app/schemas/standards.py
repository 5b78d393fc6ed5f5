"""
app/schemas/standards.py

Response schemas for standards profile endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StandardsProfileResponse(BaseModel):
    """
    One named profile with its limits in mg/L.
    """

    key: str
    label: str
    limits: dict[str, float]


class StandardsListResponse(BaseModel):
    default: str
    profiles: list[StandardsProfileResponse] = Field(default_factory=list)
