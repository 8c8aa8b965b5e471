"""Seed the database with demo tariff data for local development.

Usage:
    python -m tariffcalc.scripts.seed
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from rich.console import Console
from rich.table import Table
from sqlalchemy import Connection, text

from tariffcalc.constants import TARIFF_CATEGORIES, TIMELY_PAYMENT
from tariffcalc.db import get_connection, initialize_db
from tariffcalc.logging import configure_logging
from tariffcalc.models import format_inr
from tariffcalc.models.bill import BillingRequest
from tariffcalc.models.provider import Provider, Slab
from tariffcalc.models.versioned import FreeUnitsRule, TariffVersion
from tariffcalc.repositories.sqlalchemy import SQLAlchemyTariffRepository, SQLAlchemyVersionedTariffRepository
from tariffcalc.services.bill_calculator import BillCalculator
from tariffcalc.services.resolvers import get_resolver
from tariffcalc.services.tariff_service import TariffService, validate_slab_table

console = Console()

TABLES_TO_TRUNCATE = [
    "free_units_rules",
    "tariff_slabs",
    "tariff_versions",
    "electricity_fppca_rates",
    "electricity_provider_config",
    "electricity_slabs",
    "electricity_providers",
    "rebate_rules",
    "duty_rates",
    "fppca_rates",
    "slabs",
    "providers",
]

# (min_unit, max_unit, paise/kWh)
CESC_SLABS = [
    (0, 25, 518),
    (26, 60, 569),
    (61, 100, 690),
    (101, 150, 709),
    (151, 200, 731),
    (201, 300, 771),
    (301, 400, 801),
    (401, None, 888),
]

WBSEDCL_SLABS = [
    (0, 102, 626),
    (103, 180, 699),
    (181, 300, 713),
    (301, 600, 842),
    (601, None, 1021),
]

# (year, month, rupees/kWh)
CESC_FPPCA = [
    (2025, 1, "0.32"),
    (2025, 2, "0.29"),
    (2025, 3, "0.35"),
]

PROVIDERS = [
    (
        Provider(
            code="CESC",
            name="CESC Limited",
            fixed_charge_per_kva=Decimal("15.00"),
            meter_rent=Decimal("10.00"),
            supports_lifeline=True,
            lifeline_requires_registration=True,
            lifeline_unit_threshold=25,
            supports_timely_rebate=True,
        ),
        CESC_SLABS,
        CESC_FPPCA,
        [("Electricity duty", "5")],
        [(TIMELY_PAYMENT, "2")],
    ),
    (
        Provider(
            code="WBSEDCL",
            name="West Bengal State Electricity Distribution Company",
            fixed_charge_per_kva=Decimal("20.00"),
            meter_rent=Decimal("12.00"),
            supports_lifeline=True,
            lifeline_requires_registration=False,
            lifeline_unit_threshold=25,
            supports_timely_rebate=False,
        ),
        WBSEDCL_SLABS,
        [],
        [],
        [],
    ),
]


NBPCL = Provider(
    code="NBPCL",
    name="North Bihar Power Distribution Company",
    fixed_charge_per_kva=Decimal("50.00"),
    meter_rent=Decimal("0.00"),
    supports_lifeline=True,
    lifeline_requires_registration=False,
    lifeline_unit_threshold=50,
    supports_timely_rebate=True,
)

# (category, version code, effective from, slabs)
NBPCL_VERSIONS = [
    ("RURAL_DOMESTIC", "2024-25-v1", date(2024, 4, 1), [(0, 50, 245), (51, 100, 280), (101, None, 305)]),
    ("URBAN_DOMESTIC", "2024-25-v1", date(2024, 4, 1), [(0, 100, 412), (101, 200, 473), (201, None, 552)]),
    ("URBAN_DOMESTIC", "2025-26-v1", date(2025, 4, 1), [(0, 100, 442), (101, 200, 507), (201, None, 592)]),
]

NBPCL_FREE_UNITS = (Decimal("125"), date(2025, 8, 1))

def truncate_tables(conn: Connection) -> None:
    for table in TABLES_TO_TRUNCATE:
        conn.execute(text(f"DELETE FROM {table}"))
    conn.commit()


def seed_standard(tariff_service: TariffService) -> list[Provider]:
    created: list[Provider] = []
    for provider, slabs, fppca, duties, rebates in PROVIDERS:
        p = tariff_service.create_provider(provider)
        tariff_service.replace_slabs(
            p.code,
            [Slab(min_unit=lo, max_unit=hi, rate_paise_per_kwh=rate) for lo, hi, rate in slabs],
        )
        for year, month, rate in fppca:
            tariff_service.publish_fppca_rate(p.code, year, month, Decimal(rate))
        for name, percent in duties:
            tariff_service.add_duty_rate(p.code, name, Decimal(percent))
        for code, percent in rebates:
            tariff_service.set_rebate_rule(p.code, code, Decimal(percent))
        created.append(p)
    return created


def seed_enhanced(conn: Connection) -> None:
    """Mirror CESC into the electricity_* tables (no write repository for this schema)."""
    result = conn.execute(
        text("INSERT INTO electricity_providers (name, is_active) VALUES ('CESC', :active)"),
        {"active": True},
    )
    provider_id = result.lastrowid
    for lo, hi, rate in CESC_SLABS:
        conn.execute(
            text(
                "INSERT INTO electricity_slabs (provider_id, min_unit, max_unit, rate_paise_per_kwh) "
                "VALUES (:provider_id, :min_unit, :max_unit, :rate)"
            ),
            {"provider_id": provider_id, "min_unit": lo, "max_unit": hi, "rate": rate},
        )
    conn.execute(
        text(
            "INSERT INTO electricity_provider_config "
            "(provider_id, fixed_charge_per_kva, duty_percentage, meter_rent, timely_payment_rebate) "
            "VALUES (:provider_id, '15.00', '10', '10.00', '2')"
        ),
        {"provider_id": provider_id},
    )
    for year, month, rate in CESC_FPPCA:
        conn.execute(
            text(
                "INSERT INTO electricity_fppca_rates (provider_id, year, month, rate_per_unit) "
                "VALUES (:provider_id, :year, :month, :rate)"
            ),
            {"provider_id": provider_id, "year": year, "month": month, "rate": rate},
        )
    conn.commit()


def seed_versioned(conn: Connection, tariff_service: TariffService) -> Provider:
    """Load NBPCL: standard provider rules plus dated tariff versions and free units."""
    provider = tariff_service.create_provider(NBPCL)
    tariff_service.publish_fppca_rate(provider.code, 2025, 1, Decimal("0.50"))
    tariff_service.add_duty_rate(provider.code, "Electricity duty", Decimal("5"))
    tariff_service.set_rebate_rule(provider.code, TIMELY_PAYMENT, Decimal("1"))

    repo = SQLAlchemyVersionedTariffRepository(conn)
    for category, code, effective_from, rows in NBPCL_VERSIONS:
        slabs = [Slab(min_unit=lo, max_unit=hi, rate_paise_per_kwh=rate) for lo, hi, rate in rows]
        validate_slab_table(slabs)
        repo.create_tariff_version(
            TariffVersion(provider_id=provider.id, code=code, category=category, effective_from=effective_from),
            slabs,
        )
    free_units, effective_from = NBPCL_FREE_UNITS
    repo.add_free_units_rule(
        FreeUnitsRule(provider_id=provider.id, free_units=free_units, effective_from=effective_from)
    )
    return provider


def _print_summary(conn: Connection, providers: list[Provider]) -> None:
    table = Table(title="Sample bills (Jan 2025, 1 kVA)")
    table.add_column("Schema")
    table.add_column("Provider", style="bold")
    table.add_column("Units", justify="right")
    table.add_column("Total payable", justify="right")

    runs = [("standard", p.code, None) for p in providers]
    runs.append(("enhanced", "CESC", None))
    runs.extend(("versioned", NBPCL.code, category) for category in TARIFF_CATEGORIES)

    for schema, code, category in runs:
        calculator = BillCalculator(get_resolver(schema, conn))
        label = code if category is None else f"{code} {category}"
        for units in (20, 120, 350):
            result = calculator.calculate(
                BillingRequest(
                    provider_code=code, year=2025, month=1, units_kwh=units, sanctioned_load_kva=1, category=category
                )
            )
            table.add_row(schema, label, str(units), format_inr(result.total_payable))

    console.print(table)


def main() -> None:
    configure_logging()
    initialize_db()
    conn = get_connection()

    console.print("[bold]Truncating tariff tables...[/bold]")
    truncate_tables(conn)

    console.print("[bold]Seeding providers...[/bold]")
    tariff_service = TariffService(SQLAlchemyTariffRepository(conn))
    providers = seed_standard(tariff_service)
    seed_enhanced(conn)
    seed_versioned(conn, tariff_service)

    _print_summary(conn, providers)
    console.print("[green bold]Seed complete.[/green bold]")


if __name__ == "__main__":
    main()
