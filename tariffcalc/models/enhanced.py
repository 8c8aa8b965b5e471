from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class EnhancedProvider(BaseModel):
    id: int | None = None
    name: str  # doubles as the provider code, e.g. "CESC"
    is_active: bool = True


class ProviderConfig(BaseModel):
    id: int | None = None
    provider_id: int
    fixed_charge_per_kva: Decimal | None = None
    duty_percentage: Decimal | None = None
    meter_rent: Decimal | None = None
    timely_payment_rebate: Decimal | None = None  # percent; None: no rebate offered
