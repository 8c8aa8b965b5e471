from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal

from tariffcalc.models.enhanced import EnhancedProvider, ProviderConfig
from tariffcalc.models.provider import DutyRate, FppcaRate, Provider, RebateRule, Slab
from tariffcalc.models.versioned import FreeUnitsRule, TariffVersion


class TariffRepository(ABC):
    @abstractmethod
    def get_active_provider(self, code: str) -> Provider | None: ...

    @abstractmethod
    def get_slabs(self, provider_id: int) -> list[Slab]: ...

    @abstractmethod
    def get_fppca_rate(self, provider_id: int, year: int, month: int) -> Decimal | None: ...

    @abstractmethod
    def get_duty_rates(self, provider_id: int) -> list[DutyRate]: ...

    @abstractmethod
    def get_active_rebate_rule(self, provider_id: int, code: str) -> RebateRule | None: ...

    @abstractmethod
    def get_provider_by_code(self, code: str) -> Provider | None: ...

    @abstractmethod
    def list_providers(self) -> list[Provider]: ...

    @abstractmethod
    def create_provider(self, provider: Provider) -> Provider: ...

    @abstractmethod
    def update_provider(self, provider: Provider) -> Provider: ...

    @abstractmethod
    def replace_slabs(self, provider_id: int, slabs: list[Slab]) -> list[Slab]: ...

    @abstractmethod
    def upsert_fppca_rate(self, rate: FppcaRate) -> FppcaRate: ...

    @abstractmethod
    def list_fppca_rates(self, provider_id: int) -> list[FppcaRate]: ...

    @abstractmethod
    def add_duty_rate(self, duty: DutyRate) -> DutyRate: ...

    @abstractmethod
    def upsert_rebate_rule(self, rule: RebateRule) -> RebateRule: ...


class VersionedTariffRepository(TariffRepository):
    """Standard provider tables plus dated, per-category tariff versions."""

    @abstractmethod
    def get_tariff_version(self, provider_id: int, category: str, on: date) -> TariffVersion | None: ...

    @abstractmethod
    def get_latest_tariff_version(self, provider_id: int, category: str) -> TariffVersion | None: ...

    @abstractmethod
    def get_version_slabs(self, version_id: int) -> list[Slab]: ...

    @abstractmethod
    def get_free_units_rule(self, provider_id: int, on: date) -> FreeUnitsRule | None: ...

    @abstractmethod
    def create_tariff_version(self, version: TariffVersion, slabs: list[Slab]) -> TariffVersion: ...

    @abstractmethod
    def add_free_units_rule(self, rule: FreeUnitsRule) -> FreeUnitsRule: ...


class EnhancedTariffRepository(ABC):
    @abstractmethod
    def get_active_provider(self, name: str) -> EnhancedProvider | None: ...

    @abstractmethod
    def get_slabs(self, provider_id: int) -> list[Slab]: ...

    @abstractmethod
    def get_provider_config(self, provider_id: int) -> ProviderConfig | None: ...

    @abstractmethod
    def get_fppca_rate(self, provider_id: int, year: int, month: int) -> Decimal | None: ...
