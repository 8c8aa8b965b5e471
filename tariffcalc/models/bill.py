from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class BillingRequest(BaseModel):
    provider_code: str
    year: int
    month: int
    units_kwh: float = Field(allow_inf_nan=False)
    sanctioned_load_kva: float = Field(allow_inf_nan=False)
    timely_payment_opt_in: bool = False
    is_lifeline_registered: bool = False
    category: str | None = None  # tariff category, versioned schema only


class SlabCharge(BaseModel):
    min_unit: int
    max_unit: int | None
    units: float
    rate: float  # rupees per kWh
    amount: float


class BillBreakdown(BaseModel):
    energy_charge: float = 0.0
    fixed_charge: float = 0.0
    fppca_charge: float = 0.0
    duty_charge: float = 0.0
    meter_rent: float = 0.0
    rebates: dict[str, float] = {}


class AppliedRules(BaseModel):
    lifeline_applied: bool = False
    timely_payment_applied: bool = False
    free_units_applied: float | None = None  # None: provider has no free-unit scheme


class BillResult(BaseModel):
    provider_code: str
    year: int
    month: int
    days_in_month: int
    units_kwh: float
    breakdown: BillBreakdown
    total_before_rebate: float
    total_rebate: float
    total_payable: float
    applied_rules: AppliedRules
    slab_wise: list[SlabCharge] = []
    fppca_missing: bool | None = None
    category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise for callers.

        ``fppca_missing`` only appears when true; ``category`` and
        ``applied_rules.free_units_applied`` only for versioned tariffs.
        """
        data = self.model_dump()
        if not data.get("fppca_missing"):
            data.pop("fppca_missing", None)
        if data.get("category") is None:
            data.pop("category", None)
        if data["applied_rules"].get("free_units_applied") is None:
            data["applied_rules"].pop("free_units_applied", None)
        return data
