"""Schemas for the static professionals directory."""
from __future__ import annotations

from pydantic import BaseModel


class ProfessionalResponse(BaseModel):
    id: int
    name: str
    specialization: str
    rate: str
    availability: str


class ProfessionalListResponse(BaseModel):
    locale: str
    items: list[ProfessionalResponse]
