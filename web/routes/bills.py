from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from tariffcalc.models.bill import BillingRequest
from tariffcalc.settings import TARIFF_SCHEMAS, settings
from web.deps import get_bill_calculator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bills")


@router.post("/calculate")
async def calculate_bill(request: Request, body: BillingRequest, schema: str | None = None):
    schema = (schema or settings.get_tariff_schema()).lower()
    logger.info("POST /api/bills/calculate: provider=%s schema=%s", body.provider_code, schema)
    if schema not in TARIFF_SCHEMAS:
        logger.warning("Unknown tariff schema requested: %s", schema)
        return JSONResponse(
            {"error": "unknown_schema", "detail": f"Unknown tariff schema: {schema}"},
            status_code=400,
        )

    calculator = get_bill_calculator(request, schema)
    result = calculator.calculate(body)
    return JSONResponse(result.to_dict())
