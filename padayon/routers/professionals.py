"""Static professionals directory."""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Request

from ..schemas import ProfessionalListResponse, ProfessionalResponse
from ..services import list_professionals, resolve_request_locale

router = APIRouter(prefix="/professionals", tags=["professionals"])


@router.get("", response_model=ProfessionalListResponse)
async def professionals_endpoint(request: Request) -> ProfessionalListResponse:
    locale = resolve_request_locale(request)
    items = [ProfessionalResponse(**asdict(prof)) for prof in list_professionals(locale)]
    return ProfessionalListResponse(locale=locale, items=items)


__all__ = ["router"]
