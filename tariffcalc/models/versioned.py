from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class TariffVersion(BaseModel):
    id: int | None = None
    provider_id: int
    code: str = ""  # e.g. "2024-25-v1"
    category: str  # e.g. "URBAN_DOMESTIC"
    effective_from: date
    is_active: bool = True


class FreeUnitsRule(BaseModel):
    id: int | None = None
    provider_id: int
    free_units: Decimal  # kWh per billing period
    effective_from: date
    effective_to: date | None = None  # None: open-ended
    is_active: bool = True
