from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class Provider(BaseModel):
    id: int | None = None
    code: str
    name: str = ""
    is_active: bool = True
    fixed_charge_per_kva: Decimal = Decimal("0")  # rupees per kVA per period
    meter_rent: Decimal = Decimal("0")  # rupees per period
    supports_lifeline: bool = False
    lifeline_requires_registration: bool = False
    lifeline_unit_threshold: int = 0
    supports_timely_rebate: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Slab(BaseModel):
    id: int | None = None
    provider_id: int | None = None
    min_unit: int
    max_unit: int | None = None  # None: unbounded top slab
    rate_paise_per_kwh: int
    position: int = 0

    @property
    def capacity(self) -> int | None:
        # Units are counted from 1, so a slab starting at 0 holds max_unit units.
        if self.max_unit is None:
            return None
        return self.max_unit - max(self.min_unit, 1) + 1


class FppcaRate(BaseModel):
    id: int | None = None
    provider_id: int
    year: int
    month: int
    rate_per_kwh: Decimal  # rupees


class DutyRate(BaseModel):
    id: int | None = None
    provider_id: int
    name: str = ""
    percent: Decimal


class RebateRule(BaseModel):
    id: int | None = None
    provider_id: int
    code: str
    percent: Decimal
    active: bool = True
