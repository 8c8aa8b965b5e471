from __future__ import annotations

import logging
from decimal import Decimal

from tariffcalc.constants import MAX_YEAR, MIN_YEAR
from tariffcalc.models.provider import DutyRate, FppcaRate, Provider, RebateRule, Slab
from tariffcalc.repositories.base import TariffRepository

logger = logging.getLogger(__name__)


def validate_slab_table(slabs: list[Slab]) -> None:
    """Raise ValueError unless the slabs form one contiguous ladder.

    The first slab starts at 0 or 1, each next slab starts right after the
    previous one ends, and only the last slab is unbounded.
    """
    if not slabs:
        raise ValueError("At least one slab is required")
    if slabs[0].min_unit not in (0, 1):
        raise ValueError("The first slab must start at unit 0 or 1")
    for i, slab in enumerate(slabs):
        if slab.rate_paise_per_kwh < 0:
            raise ValueError(f"Slab {i + 1} has a negative rate")
        is_last = i == len(slabs) - 1
        if slab.max_unit is None:
            if not is_last:
                raise ValueError(f"Only the last slab may be unbounded (slab {i + 1})")
            continue
        if slab.max_unit < max(slab.min_unit, 1):
            raise ValueError(f"Slab {i + 1} ends before it starts")
        if is_last:
            raise ValueError("The last slab must be unbounded")
        next_min = slabs[i + 1].min_unit
        if next_min != slab.max_unit + 1:
            raise ValueError(f"Slab {i + 2} must start at unit {slab.max_unit + 1}, got {next_min}")


class TariffService:
    def __init__(self, repo: TariffRepository) -> None:
        self.repo = repo

    def list_providers(self) -> list[Provider]:
        result = self.repo.list_providers()
        logger.debug("Listed %d providers", len(result))
        return result

    def get_provider(self, code: str) -> Provider | None:
        result = self.repo.get_provider_by_code(code)
        logger.debug("get_provider code=%s found=%s", code, result is not None)
        return result

    def _require_provider(self, code: str) -> Provider:
        provider = self.repo.get_provider_by_code(code)
        if provider is None or provider.id is None:
            logger.warning("Provider %s not found", code)
            raise ValueError(f"Provider {code} not found")
        return provider

    def create_provider(self, provider: Provider) -> Provider:
        if not provider.code.strip():
            raise ValueError("Provider code is required")
        if self.repo.get_provider_by_code(provider.code) is not None:
            raise ValueError(f"Provider {provider.code} already exists")
        if provider.fixed_charge_per_kva < 0 or provider.meter_rent < 0:
            raise ValueError("Charges cannot be negative")
        result = self.repo.create_provider(provider)
        logger.info("Provider created: id=%s, code=%s", result.id, result.code)
        return result

    def update_provider(self, provider: Provider) -> Provider:
        existing = self._require_provider(provider.code)
        if provider.fixed_charge_per_kva < 0 or provider.meter_rent < 0:
            raise ValueError("Charges cannot be negative")
        result = self.repo.update_provider(provider.model_copy(update={"id": existing.id}))
        logger.info("Provider updated: id=%s, code=%s", result.id, result.code)
        return result

    def get_slabs(self, code: str) -> list[Slab]:
        provider = self._require_provider(code)
        return self.repo.get_slabs(provider.id)

    def replace_slabs(self, code: str, slabs: list[Slab]) -> list[Slab]:
        provider = self._require_provider(code)
        ordered = sorted(slabs, key=lambda s: s.min_unit)
        validate_slab_table(ordered)
        result = self.repo.replace_slabs(provider.id, ordered)
        logger.info("Replaced slab table for %s with %d slabs", code, len(result))
        return result

    def publish_fppca_rate(self, code: str, year: int, month: int, rate_per_kwh: Decimal) -> FppcaRate:
        provider = self._require_provider(code)
        if year < MIN_YEAR or year > MAX_YEAR:
            raise ValueError(f"Invalid year: {year}")
        if month < 1 or month > 12:
            raise ValueError(f"Invalid month: {month}")
        if rate_per_kwh < 0:
            raise ValueError("FPPCA rate cannot be negative")
        result = self.repo.upsert_fppca_rate(
            FppcaRate(provider_id=provider.id, year=year, month=month, rate_per_kwh=rate_per_kwh)
        )
        logger.info("FPPCA rate published: %s %d-%02d = %s/kWh", code, year, month, rate_per_kwh)
        return result

    def list_fppca_rates(self, code: str) -> list[FppcaRate]:
        provider = self._require_provider(code)
        return self.repo.list_fppca_rates(provider.id)

    def add_duty_rate(self, code: str, name: str, percent: Decimal) -> DutyRate:
        provider = self._require_provider(code)
        if percent < 0:
            raise ValueError("Duty percentage cannot be negative")
        result = self.repo.add_duty_rate(DutyRate(provider_id=provider.id, name=name, percent=percent))
        logger.info("Duty rate added for %s: %s %s%%", code, name, percent)
        return result

    def set_rebate_rule(self, code: str, rebate_code: str, percent: Decimal, active: bool = True) -> RebateRule:
        provider = self._require_provider(code)
        if not rebate_code.strip():
            raise ValueError("Rebate code is required")
        if percent < 0 or percent > 100:
            raise ValueError("Rebate percentage must be between 0 and 100")
        result = self.repo.upsert_rebate_rule(
            RebateRule(provider_id=provider.id, code=rebate_code, percent=percent, active=active)
        )
        logger.info("Rebate rule %s for %s set to %s%% (active=%s)", rebate_code, code, percent, active)
        return result
