from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from sqlalchemy import Connection
from sqlalchemy.exc import SQLAlchemyError

from tariffcalc.constants import TIMELY_PAYMENT
from tariffcalc.errors import (
    ConfigurationError,
    MissingCategory,
    ProviderNotFound,
    SlabLoadFailure,
    TariffVersionNotFound,
)
from tariffcalc.models.bill import BillingRequest
from tariffcalc.models.provider import Provider, Slab
from tariffcalc.models.tariff import LifelinePolicy, TariffConfig
from tariffcalc.models.versioned import TariffVersion
from tariffcalc.repositories.base import EnhancedTariffRepository, TariffRepository, VersionedTariffRepository
from tariffcalc.settings import settings

logger = logging.getLogger(__name__)


class ProviderConfigResolver(ABC):
    """Turns one configuration schema into a TariffConfig snapshot.

    Implementations raise ProviderNotFound or SlabLoadFailure when the
    provider or its slab table cannot be resolved, and ConfigurationError
    when any other read against the store fails.
    """

    schema: str = ""

    @abstractmethod
    def resolve(self, request: BillingRequest) -> TariffConfig: ...


def _require_slabs(provider_code: str, load) -> list[Slab]:
    try:
        slabs = load()
    except SQLAlchemyError as exc:
        logger.error("Slab query failed for provider %s: %s", provider_code, exc)
        raise SlabLoadFailure(f"Failed to load slabs for provider {provider_code}") from exc
    if not slabs:
        logger.warning("Provider %s has no slabs configured", provider_code)
        raise SlabLoadFailure(f"No slabs configured for provider {provider_code}")
    return slabs


class StandardConfigResolver(ProviderConfigResolver):
    schema = "standard"

    def __init__(self, repo: TariffRepository) -> None:
        self.repo = repo

    def resolve(self, request: BillingRequest) -> TariffConfig:
        code = request.provider_code
        try:
            provider = self.repo.get_active_provider(code)
        except SQLAlchemyError as exc:
            logger.error("Provider query failed for %s: %s", code, exc)
            raise ProviderNotFound(code) from exc
        if provider is None or provider.id is None or not provider.is_active:
            logger.warning("Provider %s not found or inactive", code)
            raise ProviderNotFound(code)

        provider_id = provider.id
        slabs = _require_slabs(code, lambda: self._load_slabs(provider, request))

        try:
            fppca_rate = self.repo.get_fppca_rate(provider_id, request.year, request.month)
            duty_rates = self.repo.get_duty_rates(provider_id)
            rebate_rule = None
            if provider.supports_timely_rebate and request.timely_payment_opt_in:
                rebate_rule = self.repo.get_active_rebate_rule(provider_id, TIMELY_PAYMENT)
        except SQLAlchemyError as exc:
            logger.error("Tariff configuration query failed for %s: %s", code, exc)
            raise ConfigurationError(f"Failed to load tariff configuration for provider {code}") from exc

        lifeline = None
        if provider.supports_lifeline:
            lifeline = LifelinePolicy(
                requires_registration=provider.lifeline_requires_registration,
                unit_threshold=provider.lifeline_unit_threshold,
            )

        logger.debug(
            "Resolved %s: %d slabs, fppca=%s, duties=%d, rebate=%s",
            code,
            len(slabs),
            fppca_rate,
            len(duty_rates),
            rebate_rule is not None,
        )
        return TariffConfig(
            provider_id=provider_id,
            provider_code=code,
            fixed_charge_per_kva=provider.fixed_charge_per_kva,
            meter_rent=provider.meter_rent,
            duty_percent=sum((d.percent for d in duty_rates), Decimal("0")),
            lifeline=lifeline,
            supports_timely_rebate=provider.supports_timely_rebate,
            timely_rebate_percent=rebate_rule.percent if rebate_rule is not None else None,
            slabs=slabs,
            fppca_rate=fppca_rate,
        )

    def _load_slabs(self, provider: Provider, request: BillingRequest) -> list[Slab]:
        return self.repo.get_slabs(provider.id)


class EnhancedConfigResolver(ProviderConfigResolver):
    """Adapter for the electricity_* tables.

    Providers are looked up by name, slabs are ordered by min_unit, and a
    missing or zero config value falls back to the configured default. This
    schema has no lifeline model, offers the timely rebate whenever a rebate
    percentage is configured, and levies duty on the FPPCA charge as well.
    """

    schema = "enhanced"

    def __init__(
        self,
        repo: EnhancedTariffRepository,
        default_fixed_charge_per_kva: Decimal | None = None,
        default_duty_percent: Decimal | None = None,
        default_meter_rent: Decimal | None = None,
    ) -> None:
        self.repo = repo
        self.default_fixed_charge_per_kva = (
            default_fixed_charge_per_kva
            if default_fixed_charge_per_kva is not None
            else Decimal(str(settings.enhanced_fixed_charge_per_kva))
        )
        self.default_duty_percent = (
            default_duty_percent if default_duty_percent is not None else Decimal(str(settings.enhanced_duty_percent))
        )
        self.default_meter_rent = (
            default_meter_rent if default_meter_rent is not None else Decimal(str(settings.enhanced_meter_rent))
        )

    def resolve(self, request: BillingRequest) -> TariffConfig:
        code = request.provider_code
        try:
            provider = self.repo.get_active_provider(code)
        except SQLAlchemyError as exc:
            logger.error("Provider query failed for %s: %s", code, exc)
            raise ProviderNotFound(code) from exc
        if provider is None or provider.id is None or not provider.is_active:
            logger.warning("Provider %s not found or inactive", code)
            raise ProviderNotFound(code)

        provider_id = provider.id
        slabs = _require_slabs(code, lambda: self.repo.get_slabs(provider_id))

        try:
            config = self.repo.get_provider_config(provider_id)
            fppca_rate = self.repo.get_fppca_rate(provider_id, request.year, request.month)
        except SQLAlchemyError as exc:
            logger.error("Tariff configuration query failed for %s: %s", code, exc)
            raise ConfigurationError(f"Failed to load tariff configuration for provider {code}") from exc

        if config is None:
            logger.info("No provider config for %s, using defaults", code)
            rebate_percent = None
            fixed_charge = self.default_fixed_charge_per_kva
            duty_percent = self.default_duty_percent
            meter_rent = self.default_meter_rent
        else:
            rebate_percent = config.timely_payment_rebate or None
            fixed_charge = config.fixed_charge_per_kva or self.default_fixed_charge_per_kva
            duty_percent = config.duty_percentage or self.default_duty_percent
            meter_rent = config.meter_rent or self.default_meter_rent

        return TariffConfig(
            provider_id=provider_id,
            provider_code=code,
            fixed_charge_per_kva=fixed_charge,
            meter_rent=meter_rent,
            duty_percent=duty_percent,
            duty_includes_fppca=True,
            lifeline=None,
            supports_timely_rebate=rebate_percent is not None,
            timely_rebate_percent=rebate_percent,
            slabs=slabs,
            fppca_rate=fppca_rate,
        )


class VersionedConfigResolver(StandardConfigResolver):
    """Standard provider rules over dated, per-category tariff versions.

    The version in effect on the first day of the billing month supplies the
    slab table, falling back to the latest active version of the category.
    An active free-units rule covering that day sets the free allowance.
    """

    schema = "versioned"
    repo: VersionedTariffRepository

    def resolve(self, request: BillingRequest) -> TariffConfig:
        category = _category(request)
        if not category:
            raise MissingCategory()

        config = super().resolve(request)

        try:
            rule = self.repo.get_free_units_rule(config.provider_id, _period_start(request))
        except SQLAlchemyError as exc:
            logger.error("Free units query failed for %s: %s", request.provider_code, exc)
            raise ConfigurationError(
                f"Failed to load tariff configuration for provider {request.provider_code}"
            ) from exc

        free_units = rule.free_units if rule is not None else Decimal("0")
        return config.model_copy(update={"free_units": free_units, "category": category})

    def _load_slabs(self, provider: Provider, request: BillingRequest) -> list[Slab]:
        version = self._resolve_version(provider, _category(request), _period_start(request))
        return self.repo.get_version_slabs(version.id)

    def _resolve_version(self, provider: Provider, category: str, on: date) -> TariffVersion:
        version = self.repo.get_tariff_version(provider.id, category, on)
        if version is None:
            version = self.repo.get_latest_tariff_version(provider.id, category)
            if version is None:
                logger.warning("No active %s tariff for %s", category, provider.code)
                raise TariffVersionNotFound(provider.code, category)
            logger.info(
                "No %s tariff in effect for %s on %s; using latest version %s",
                category,
                provider.code,
                on,
                version.code,
            )
        logger.debug("Tariff version %s (%s) selected for %s", version.code, category, provider.code)
        return version


def _category(request: BillingRequest) -> str:
    return (request.category or "").strip().upper()


def _period_start(request: BillingRequest) -> date:
    return date(request.year, request.month, 1)


def get_resolver(schema: str, conn: Connection) -> ProviderConfigResolver:
    from tariffcalc.repositories.sqlalchemy import (
        SQLAlchemyEnhancedTariffRepository,
        SQLAlchemyTariffRepository,
        SQLAlchemyVersionedTariffRepository,
    )

    if schema == "standard":
        return StandardConfigResolver(SQLAlchemyTariffRepository(conn))
    if schema == "enhanced":
        return EnhancedConfigResolver(SQLAlchemyEnhancedTariffRepository(conn))
    if schema == "versioned":
        return VersionedConfigResolver(SQLAlchemyVersionedTariffRepository(conn))
    raise ValueError(f"Unknown tariff schema: {schema}")
