from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping

from tariffcalc.constants import IST_TZ
from tariffcalc.models.enhanced import EnhancedProvider, ProviderConfig
from tariffcalc.models.provider import DutyRate, FppcaRate, Provider, RebateRule, Slab
from tariffcalc.models.versioned import FreeUnitsRule, TariffVersion
from tariffcalc.repositories.base import EnhancedTariffRepository, TariffRepository, VersionedTariffRepository


def _now() -> datetime:
    return datetime.now(IST_TZ)


def _dec(value) -> Decimal | None:
    # SQLite hands NUMERIC columns back as float
    if value is None:
        return None
    return Decimal(str(value))


def _row_to_slab(row: RowMapping) -> Slab:
    return Slab(
        id=row["id"],
        provider_id=row["provider_id"],
        min_unit=row["min_unit"],
        max_unit=row["max_unit"],
        rate_paise_per_kwh=row["rate_paise_per_kwh"],
        position=row.get("position", 0),
    )


class SQLAlchemyTariffRepository(TariffRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_provider(row: RowMapping) -> Provider:
        return Provider(
            id=row["id"],
            code=row["code"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            fixed_charge_per_kva=_dec(row["fixed_charge_per_kva"]),
            meter_rent=_dec(row["meter_rent"]),
            supports_lifeline=bool(row["supports_lifeline"]),
            lifeline_requires_registration=bool(row["lifeline_requires_registration"]),
            lifeline_unit_threshold=row["lifeline_unit_threshold"],
            supports_timely_rebate=bool(row["supports_timely_rebate"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_active_provider(self, code: str) -> Provider | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM providers WHERE code = :code AND is_active = :active"),
                {"code": code, "active": True},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_provider(row)

    def get_provider_by_code(self, code: str) -> Provider | None:
        row = (
            self.conn.execute(text("SELECT * FROM providers WHERE code = :code"), {"code": code})
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_provider(row)

    def list_providers(self) -> list[Provider]:
        rows = self.conn.execute(text("SELECT * FROM providers ORDER BY code")).mappings().fetchall()
        return [self._row_to_provider(row) for row in rows]

    def create_provider(self, provider: Provider) -> Provider:
        now = _now()
        self.conn.execute(
            text(
                "INSERT INTO providers (code, name, is_active, fixed_charge_per_kva, meter_rent, "
                "supports_lifeline, lifeline_requires_registration, lifeline_unit_threshold, "
                "supports_timely_rebate, created_at, updated_at) "
                "VALUES (:code, :name, :is_active, :fixed_charge_per_kva, :meter_rent, "
                ":supports_lifeline, :lifeline_requires_registration, :lifeline_unit_threshold, "
                ":supports_timely_rebate, :created_at, :updated_at)"
            ),
            {
                "code": provider.code,
                "name": provider.name,
                "is_active": provider.is_active,
                "fixed_charge_per_kva": str(provider.fixed_charge_per_kva),
                "meter_rent": str(provider.meter_rent),
                "supports_lifeline": provider.supports_lifeline,
                "lifeline_requires_registration": provider.lifeline_requires_registration,
                "lifeline_unit_threshold": provider.lifeline_unit_threshold,
                "supports_timely_rebate": provider.supports_timely_rebate,
                "created_at": now,
                "updated_at": now,
            },
        )
        self.conn.commit()
        result = self.get_provider_by_code(provider.code)
        if result is None:
            raise RuntimeError(f"Failed to retrieve provider after create (code={provider.code})")
        return result

    def update_provider(self, provider: Provider) -> Provider:
        self.conn.execute(
            text(
                "UPDATE providers SET name = :name, is_active = :is_active, "
                "fixed_charge_per_kva = :fixed_charge_per_kva, meter_rent = :meter_rent, "
                "supports_lifeline = :supports_lifeline, "
                "lifeline_requires_registration = :lifeline_requires_registration, "
                "lifeline_unit_threshold = :lifeline_unit_threshold, "
                "supports_timely_rebate = :supports_timely_rebate, updated_at = :updated_at "
                "WHERE id = :id"
            ),
            {
                "name": provider.name,
                "is_active": provider.is_active,
                "fixed_charge_per_kva": str(provider.fixed_charge_per_kva),
                "meter_rent": str(provider.meter_rent),
                "supports_lifeline": provider.supports_lifeline,
                "lifeline_requires_registration": provider.lifeline_requires_registration,
                "lifeline_unit_threshold": provider.lifeline_unit_threshold,
                "supports_timely_rebate": provider.supports_timely_rebate,
                "updated_at": _now(),
                "id": provider.id,
            },
        )
        self.conn.commit()
        result = self.get_provider_by_code(provider.code)
        if result is None:
            raise RuntimeError(f"Failed to retrieve provider after update (id={provider.id})")
        return result

    def get_slabs(self, provider_id: int) -> list[Slab]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM slabs WHERE provider_id = :provider_id ORDER BY position, min_unit"),
                {"provider_id": provider_id},
            )
            .mappings()
            .fetchall()
        )
        return [_row_to_slab(row) for row in rows]

    def replace_slabs(self, provider_id: int, slabs: list[Slab]) -> list[Slab]:
        self.conn.execute(text("DELETE FROM slabs WHERE provider_id = :provider_id"), {"provider_id": provider_id})
        for i, slab in enumerate(slabs):
            self.conn.execute(
                text(
                    "INSERT INTO slabs (provider_id, min_unit, max_unit, rate_paise_per_kwh, position) "
                    "VALUES (:provider_id, :min_unit, :max_unit, :rate_paise_per_kwh, :position)"
                ),
                {
                    "provider_id": provider_id,
                    "min_unit": slab.min_unit,
                    "max_unit": slab.max_unit,
                    "rate_paise_per_kwh": slab.rate_paise_per_kwh,
                    "position": i,
                },
            )
        self.conn.commit()
        return self.get_slabs(provider_id)

    def get_fppca_rate(self, provider_id: int, year: int, month: int) -> Decimal | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT rate_per_kwh FROM fppca_rates "
                    "WHERE provider_id = :provider_id AND year = :year AND month = :month"
                ),
                {"provider_id": provider_id, "year": year, "month": month},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return _dec(row["rate_per_kwh"])

    def list_fppca_rates(self, provider_id: int) -> list[FppcaRate]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM fppca_rates WHERE provider_id = :provider_id ORDER BY year DESC, month DESC"),
                {"provider_id": provider_id},
            )
            .mappings()
            .fetchall()
        )
        return [
            FppcaRate(
                id=row["id"],
                provider_id=row["provider_id"],
                year=row["year"],
                month=row["month"],
                rate_per_kwh=_dec(row["rate_per_kwh"]),
            )
            for row in rows
        ]

    def upsert_fppca_rate(self, rate: FppcaRate) -> FppcaRate:
        params = {
            "provider_id": rate.provider_id,
            "year": rate.year,
            "month": rate.month,
            "rate_per_kwh": str(rate.rate_per_kwh),
        }
        result = self.conn.execute(
            text(
                "UPDATE fppca_rates SET rate_per_kwh = :rate_per_kwh "
                "WHERE provider_id = :provider_id AND year = :year AND month = :month"
            ),
            params,
        )
        if result.rowcount == 0:
            self.conn.execute(
                text(
                    "INSERT INTO fppca_rates (provider_id, year, month, rate_per_kwh) "
                    "VALUES (:provider_id, :year, :month, :rate_per_kwh)"
                ),
                params,
            )
        self.conn.commit()
        stored = next(
            (r for r in self.list_fppca_rates(rate.provider_id) if r.year == rate.year and r.month == rate.month),
            None,
        )
        if stored is None:
            raise RuntimeError(f"Failed to retrieve FPPCA rate after upsert ({rate.year}-{rate.month:02d})")
        return stored

    def get_duty_rates(self, provider_id: int) -> list[DutyRate]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM duty_rates WHERE provider_id = :provider_id ORDER BY id"),
                {"provider_id": provider_id},
            )
            .mappings()
            .fetchall()
        )
        return [
            DutyRate(id=row["id"], provider_id=row["provider_id"], name=row["name"], percent=_dec(row["percent"]))
            for row in rows
        ]

    def add_duty_rate(self, duty: DutyRate) -> DutyRate:
        result = self.conn.execute(
            text("INSERT INTO duty_rates (provider_id, name, percent) VALUES (:provider_id, :name, :percent)"),
            {"provider_id": duty.provider_id, "name": duty.name, "percent": str(duty.percent)},
        )
        duty_id = result.lastrowid
        self.conn.commit()
        return duty.model_copy(update={"id": duty_id})

    @staticmethod
    def _row_to_rebate_rule(row: RowMapping) -> RebateRule:
        return RebateRule(
            id=row["id"],
            provider_id=row["provider_id"],
            code=row["code"],
            percent=_dec(row["percent"]),
            active=bool(row["active"]),
        )

    def get_active_rebate_rule(self, provider_id: int, code: str) -> RebateRule | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM rebate_rules "
                    "WHERE provider_id = :provider_id AND code = :code AND active = :active"
                ),
                {"provider_id": provider_id, "code": code, "active": True},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_rebate_rule(row)

    def upsert_rebate_rule(self, rule: RebateRule) -> RebateRule:
        params = {
            "provider_id": rule.provider_id,
            "code": rule.code,
            "percent": str(rule.percent),
            "active": rule.active,
        }
        result = self.conn.execute(
            text(
                "UPDATE rebate_rules SET percent = :percent, active = :active "
                "WHERE provider_id = :provider_id AND code = :code"
            ),
            params,
        )
        if result.rowcount == 0:
            self.conn.execute(
                text(
                    "INSERT INTO rebate_rules (provider_id, code, percent, active) "
                    "VALUES (:provider_id, :code, :percent, :active)"
                ),
                params,
            )
        self.conn.commit()
        row = (
            self.conn.execute(
                text("SELECT * FROM rebate_rules WHERE provider_id = :provider_id AND code = :code"),
                {"provider_id": rule.provider_id, "code": rule.code},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            raise RuntimeError(f"Failed to retrieve rebate rule after upsert (code={rule.code})")
        return self._row_to_rebate_rule(row)


class SQLAlchemyEnhancedTariffRepository(EnhancedTariffRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def get_active_provider(self, name: str) -> EnhancedProvider | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM electricity_providers WHERE name = :name AND is_active = :active"),
                {"name": name, "active": True},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return EnhancedProvider(id=row["id"], name=row["name"], is_active=bool(row["is_active"]))

    def get_slabs(self, provider_id: int) -> list[Slab]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM electricity_slabs WHERE provider_id = :provider_id ORDER BY min_unit"),
                {"provider_id": provider_id},
            )
            .mappings()
            .fetchall()
        )
        return [_row_to_slab(row) for row in rows]

    def get_provider_config(self, provider_id: int) -> ProviderConfig | None:
        row = (
            self.conn.execute(
                text("SELECT * FROM electricity_provider_config WHERE provider_id = :provider_id"),
                {"provider_id": provider_id},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return ProviderConfig(
            id=row["id"],
            provider_id=row["provider_id"],
            fixed_charge_per_kva=_dec(row["fixed_charge_per_kva"]),
            duty_percentage=_dec(row["duty_percentage"]),
            meter_rent=_dec(row["meter_rent"]),
            timely_payment_rebate=_dec(row["timely_payment_rebate"]),
        )

    def get_fppca_rate(self, provider_id: int, year: int, month: int) -> Decimal | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT rate_per_unit FROM electricity_fppca_rates "
                    "WHERE provider_id = :provider_id AND year = :year AND month = :month"
                ),
                {"provider_id": provider_id, "year": year, "month": month},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return _dec(row["rate_per_unit"])


class SQLAlchemyVersionedTariffRepository(SQLAlchemyTariffRepository, VersionedTariffRepository):
    # Dates are bound as ISO strings so SQLite compares them as text.

    @staticmethod
    def _row_to_version(row: RowMapping) -> TariffVersion:
        return TariffVersion(
            id=row["id"],
            provider_id=row["provider_id"],
            code=row["code"],
            category=row["category"],
            effective_from=row["effective_from"],
            is_active=bool(row["is_active"]),
        )

    @staticmethod
    def _row_to_free_units_rule(row: RowMapping) -> FreeUnitsRule:
        return FreeUnitsRule(
            id=row["id"],
            provider_id=row["provider_id"],
            free_units=_dec(row["free_units"]),
            effective_from=row["effective_from"],
            effective_to=row["effective_to"],
            is_active=bool(row["is_active"]),
        )

    def get_tariff_version(self, provider_id: int, category: str, on: date) -> TariffVersion | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM tariff_versions "
                    "WHERE provider_id = :provider_id AND category = :category AND is_active = :active "
                    "AND effective_from <= :on "
                    "ORDER BY effective_from DESC LIMIT 1"
                ),
                {"provider_id": provider_id, "category": category, "active": True, "on": on.isoformat()},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_version(row)

    def get_latest_tariff_version(self, provider_id: int, category: str) -> TariffVersion | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM tariff_versions "
                    "WHERE provider_id = :provider_id AND category = :category AND is_active = :active "
                    "ORDER BY effective_from DESC LIMIT 1"
                ),
                {"provider_id": provider_id, "category": category, "active": True},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_version(row)

    def get_version_slabs(self, version_id: int) -> list[Slab]:
        rows = (
            self.conn.execute(
                text("SELECT * FROM tariff_slabs WHERE tariff_version_id = :version_id ORDER BY position, min_unit"),
                {"version_id": version_id},
            )
            .mappings()
            .fetchall()
        )
        return [
            Slab(
                id=row["id"],
                min_unit=row["min_unit"],
                max_unit=row["max_unit"],
                rate_paise_per_kwh=row["rate_paise_per_kwh"],
                position=row["position"],
            )
            for row in rows
        ]

    def get_free_units_rule(self, provider_id: int, on: date) -> FreeUnitsRule | None:
        row = (
            self.conn.execute(
                text(
                    "SELECT * FROM free_units_rules "
                    "WHERE provider_id = :provider_id AND is_active = :active "
                    "AND effective_from <= :on AND (effective_to IS NULL OR effective_to >= :on) "
                    "ORDER BY effective_from DESC LIMIT 1"
                ),
                {"provider_id": provider_id, "active": True, "on": on.isoformat()},
            )
            .mappings()
            .fetchone()
        )
        if row is None:
            return None
        return self._row_to_free_units_rule(row)

    def create_tariff_version(self, version: TariffVersion, slabs: list[Slab]) -> TariffVersion:
        result = self.conn.execute(
            text(
                "INSERT INTO tariff_versions (provider_id, code, category, effective_from, is_active) "
                "VALUES (:provider_id, :code, :category, :effective_from, :is_active)"
            ),
            {
                "provider_id": version.provider_id,
                "code": version.code,
                "category": version.category,
                "effective_from": version.effective_from.isoformat(),
                "is_active": version.is_active,
            },
        )
        version_id = result.lastrowid
        for i, slab in enumerate(slabs):
            self.conn.execute(
                text(
                    "INSERT INTO tariff_slabs (tariff_version_id, min_unit, max_unit, rate_paise_per_kwh, position) "
                    "VALUES (:version_id, :min_unit, :max_unit, :rate_paise_per_kwh, :position)"
                ),
                {
                    "version_id": version_id,
                    "min_unit": slab.min_unit,
                    "max_unit": slab.max_unit,
                    "rate_paise_per_kwh": slab.rate_paise_per_kwh,
                    "position": i,
                },
            )
        self.conn.commit()
        return version.model_copy(update={"id": version_id})

    def add_free_units_rule(self, rule: FreeUnitsRule) -> FreeUnitsRule:
        result = self.conn.execute(
            text(
                "INSERT INTO free_units_rules (provider_id, free_units, effective_from, effective_to, is_active) "
                "VALUES (:provider_id, :free_units, :effective_from, :effective_to, :is_active)"
            ),
            {
                "provider_id": rule.provider_id,
                "free_units": str(rule.free_units),
                "effective_from": rule.effective_from.isoformat(),
                "effective_to": rule.effective_to.isoformat() if rule.effective_to is not None else None,
                "is_active": rule.is_active,
            },
        )
        rule_id = result.lastrowid
        self.conn.commit()
        return rule.model_copy(update={"id": rule_id})
