from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from tariffcalc.constants import format_period
from tariffcalc.models import format_inr, parse_amount
from tariffcalc.models.provider import Provider
from tariffcalc.services.tariff_service import TariffService

console = Console()


def _show_slabs(provider: Provider, tariff_service: TariffService) -> None:
    slabs = tariff_service.get_slabs(provider.code)
    if not slabs:
        console.print("[yellow]No slabs configured.[/yellow]")
        return

    table = Table(title=f"Slabs ({provider.code})")
    table.add_column("From", justify="right")
    table.add_column("To", justify="right")
    table.add_column("Rate (paise/kWh)", justify="right")
    for slab in slabs:
        table.add_row(
            str(slab.min_unit),
            "∞" if slab.max_unit is None else str(slab.max_unit),
            str(slab.rate_paise_per_kwh),
        )
    console.print(table)

    rates = tariff_service.list_fppca_rates(provider.code)
    if rates:
        fppca_table = Table(title="FPPCA rates")
        fppca_table.add_column("Period")
        fppca_table.add_column("Rate (₹/kWh)", justify="right")
        for rate in rates:
            fppca_table.add_row(format_period(rate.year, rate.month), str(rate.rate_per_kwh))
        console.print(fppca_table)


def _publish_fppca_menu(provider: Provider, tariff_service: TariffService) -> None:
    period = questionary.text("Period (YYYY-MM):").ask() or ""
    try:
        year, month = int(period[:4]), int(period[5:])
    except ValueError:
        console.print("[red]Invalid period.[/red]")
        return

    rate = parse_amount(questionary.text("Rate (₹/kWh, e.g. 0.35):").ask() or "")
    if rate is None:
        console.print("[red]Invalid rate.[/red]")
        return

    try:
        tariff_service.publish_fppca_rate(provider.code, year, month, rate)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        return
    console.print(f"[green]FPPCA rate for {format_period(year, month)} saved.[/green]")


def tariff_management_menu(tariff_service: TariffService) -> None:
    providers = tariff_service.list_providers()
    if not providers:
        console.print("[yellow]No providers configured.[/yellow]")
        return

    table = Table(title="Providers")
    table.add_column("Code", style="bold")
    table.add_column("Name")
    table.add_column("Active", justify="center")
    table.add_column("Fixed/kVA", justify="right")
    table.add_column("Meter rent", justify="right")
    for p in providers:
        table.add_row(
            p.code,
            p.name,
            "yes" if p.is_active else "no",
            format_inr(p.fixed_charge_per_kva),
            format_inr(p.meter_rent),
        )
    console.print()
    console.print(table)

    provider_choices = {f"{p.code} - {p.name}": p for p in providers}
    choice = questionary.select("Select a provider:", choices=list(provider_choices.keys()) + ["Back"]).ask()
    if choice is None or choice == "Back":
        return
    provider = provider_choices[choice]

    while True:
        action = questionary.select(
            f"{provider.code}",
            choices=["Show slabs and FPPCA rates", "Publish FPPCA rate", "Back"],
        ).ask()
        if action is None or action == "Back":
            return
        if action == "Show slabs and FPPCA rates":
            _show_slabs(provider, tariff_service)
        elif action == "Publish FPPCA rate":
            _publish_fppca_menu(provider, tariff_service)
