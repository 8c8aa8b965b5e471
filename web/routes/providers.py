from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from web.deps import get_tariff_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/providers")


@router.get("/")
async def provider_list(request: Request):
    service = get_tariff_service(request)
    providers = service.list_providers()
    logger.info("GET /api/providers/: %d providers", len(providers))
    return [p.model_dump(mode="json", exclude={"created_at", "updated_at"}) for p in providers]


@router.get("/{code}/slabs")
async def provider_slabs(request: Request, code: str):
    service = get_tariff_service(request)
    provider = service.get_provider(code)
    if provider is None:
        logger.warning("Slabs requested for unknown provider %s", code)
        return JSONResponse(
            {"error": "provider_not_found", "detail": f"Provider {code} not found"},
            status_code=404,
        )
    slabs = service.get_slabs(code)
    return {
        "provider_code": provider.code,
        "slabs": [s.model_dump(include={"min_unit", "max_unit", "rate_paise_per_kwh", "position"}) for s in slabs],
    }
