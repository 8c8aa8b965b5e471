from __future__ import annotations

import calendar
import logging
from decimal import ROUND_HALF_UP, Decimal

from tariffcalc.constants import MAX_YEAR, MIN_YEAR, PAISE, PAISE_PER_RUPEE, TIMELY_PAYMENT
from tariffcalc.errors import (
    InvalidBillingRequest,
    InvalidMonth,
    InvalidYear,
    NegativeLoad,
    NegativeUnits,
    SlabLoadFailure,
)
from tariffcalc.models.bill import AppliedRules, BillBreakdown, BillingRequest, BillResult, SlabCharge
from tariffcalc.models.provider import Slab
from tariffcalc.models.tariff import LifelinePolicy, TariffConfig
from tariffcalc.services.resolvers import ProviderConfigResolver

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _money(value: Decimal) -> float:
    return float(value.quantize(PAISE, rounding=ROUND_HALF_UP))


def validate_request(request: BillingRequest) -> None:
    if request.year < MIN_YEAR or request.year > MAX_YEAR:
        raise InvalidYear(request.year)
    if request.month < 1 or request.month > 12:
        raise InvalidMonth(request.month)
    if request.units_kwh < 0:
        raise NegativeUnits(request.units_kwh)
    if request.sanctioned_load_kva < 0:
        raise NegativeLoad(request.sanctioned_load_kva)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def lifeline_applies(policy: LifelinePolicy | None, units: Decimal, is_registered: bool) -> bool:
    # Reported only; slab rates are not switched for lifeline consumers.
    if policy is None:
        return False
    within_threshold = units <= policy.unit_threshold
    if policy.requires_registration:
        return is_registered and within_threshold
    return within_threshold


def walk_slabs(slabs: list[Slab], units: Decimal) -> tuple[Decimal, list[tuple[Slab, Decimal, Decimal, Decimal]]]:
    """Spread ``units`` over the slabs in ascending ``min_unit`` order.

    Returns the unrounded energy charge and one (slab, units, rate, amount)
    tuple per slab that received units. Rates are in rupees per kWh.
    """
    energy_charge = ZERO
    remaining = units
    rows: list[tuple[Slab, Decimal, Decimal, Decimal]] = []

    for slab in sorted(slabs, key=lambda s: s.min_unit):
        if remaining <= 0:
            break
        capacity = slab.capacity
        in_slab = remaining if capacity is None else min(remaining, Decimal(capacity))
        if in_slab <= 0:
            continue
        rate = Decimal(slab.rate_paise_per_kwh) / PAISE_PER_RUPEE
        amount = in_slab * rate
        energy_charge += amount
        remaining -= in_slab
        rows.append((slab, in_slab, rate, amount))

    if remaining > 0:
        raise SlabLoadFailure(f"Slab table is bounded; {remaining} kWh could not be placed in any slab")
    return energy_charge, rows


def compute_bill(request: BillingRequest, config: TariffConfig) -> BillResult:
    """Itemise one bill from an already-resolved configuration snapshot.

    Pure: no store access. Intermediate values stay unrounded; every money
    field is rounded to paise once, here, when the result is assembled.
    Free units come off the top; slabs, FPPCA and lifeline eligibility all
    see only the billable remainder.
    """
    units = _to_decimal(request.units_kwh)
    load = _to_decimal(request.sanctioned_load_kva)

    free_units = ZERO if config.free_units is None else min(units, max(config.free_units, ZERO))
    billable = units - free_units

    energy_charge, slab_rows = walk_slabs(config.slabs, billable)
    fixed_charge = load * config.fixed_charge_per_kva

    fppca_missing = config.fppca_rate is None
    fppca_charge = ZERO if fppca_missing else billable * config.fppca_rate

    duty_base = energy_charge + fixed_charge
    if config.duty_includes_fppca:
        duty_base += fppca_charge
    duty_charge = duty_base * (config.duty_percent / HUNDRED)

    meter_rent = config.meter_rent

    timely_payment_applied = config.supports_timely_rebate and request.timely_payment_opt_in
    rebates: dict[str, Decimal] = {}
    if timely_payment_applied and config.timely_rebate_percent is not None:
        rebates[TIMELY_PAYMENT] = (energy_charge + fixed_charge) * (config.timely_rebate_percent / HUNDRED)
    total_rebate = sum(rebates.values(), ZERO)

    total_before_rebate = energy_charge + fixed_charge + fppca_charge + duty_charge + meter_rent
    total_payable = total_before_rebate - total_rebate

    return BillResult(
        provider_code=request.provider_code,
        year=request.year,
        month=request.month,
        days_in_month=days_in_month(request.year, request.month),
        units_kwh=request.units_kwh,
        breakdown=BillBreakdown(
            energy_charge=_money(energy_charge),
            fixed_charge=_money(fixed_charge),
            fppca_charge=_money(fppca_charge),
            duty_charge=_money(duty_charge),
            meter_rent=_money(meter_rent),
            rebates={code: _money(amount) for code, amount in rebates.items()},
        ),
        total_before_rebate=_money(total_before_rebate),
        total_rebate=_money(total_rebate),
        total_payable=_money(total_payable),
        applied_rules=AppliedRules(
            lifeline_applied=lifeline_applies(config.lifeline, billable, request.is_lifeline_registered),
            timely_payment_applied=timely_payment_applied,
            free_units_applied=None if config.free_units is None else float(free_units),
        ),
        slab_wise=[
            SlabCharge(
                min_unit=slab.min_unit,
                max_unit=slab.max_unit,
                units=float(in_slab),
                rate=_money(rate),
                amount=_money(amount),
            )
            for slab, in_slab, rate, amount in slab_rows
        ],
        fppca_missing=True if fppca_missing else None,
        category=config.category,
    )


class BillCalculator:
    def __init__(self, resolver: ProviderConfigResolver) -> None:
        self.resolver = resolver

    def calculate(self, request: BillingRequest) -> BillResult:
        try:
            validate_request(request)
        except InvalidBillingRequest:
            logger.warning(
                "Bill request rejected: provider=%s period=%s-%s units=%s load=%s",
                request.provider_code,
                request.year,
                request.month,
                request.units_kwh,
                request.sanctioned_load_kva,
            )
            raise

        config = self.resolver.resolve(request)
        result = compute_bill(request, config)

        if result.fppca_missing:
            logger.warning(
                "No FPPCA rate for %s %d-%02d; bill computed without the surcharge",
                request.provider_code,
                request.year,
                request.month,
            )
        logger.info(
            "Bill calculated: provider=%s period=%d-%02d units=%s total_payable=%.2f schema=%s",
            request.provider_code,
            request.year,
            request.month,
            request.units_kwh,
            result.total_payable,
            self.resolver.schema,
        )
        return result
