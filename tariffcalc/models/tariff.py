from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from tariffcalc.models.provider import Slab


class LifelinePolicy(BaseModel):
    requires_registration: bool = False
    unit_threshold: int = 0


class TariffConfig(BaseModel):
    """Read-only configuration snapshot for one provider and one period.

    Produced by a ProviderConfigResolver, consumed by ``compute_bill``.
    ``lifeline`` is None when the provider does not model a lifeline rate.
    ``fppca_rate`` is None when no rate is published for the period.
    ``free_units`` is None when the provider has no free-unit scheme; otherwise
    up to that many kWh are deducted before the slab walk.
    """

    provider_id: int
    provider_code: str
    fixed_charge_per_kva: Decimal
    meter_rent: Decimal
    duty_percent: Decimal = Decimal("0")
    duty_includes_fppca: bool = False
    lifeline: LifelinePolicy | None = None
    supports_timely_rebate: bool = False
    timely_rebate_percent: Decimal | None = None
    slabs: list[Slab] = []
    fppca_rate: Decimal | None = None
    free_units: Decimal | None = None
    category: str | None = None
