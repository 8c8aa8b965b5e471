from __future__ import annotations

from decimal import Decimal

import questionary
from rich.console import Console
from rich.table import Table

from tariffcalc.constants import TARIFF_CATEGORIES, format_period
from tariffcalc.errors import BillingError
from tariffcalc.models import format_inr, parse_amount
from tariffcalc.models.bill import BillingRequest, BillResult
from tariffcalc.services.bill_calculator import BillCalculator

console = Console()


def _parse_period(value: str) -> tuple[int, int] | None:
    """Parse 'YYYY-MM' into (year, month). Range checks are left to the calculator."""
    if not value or len(value) != 7 or value[4] != "-":
        return None
    try:
        return int(value[:4]), int(value[5:])
    except ValueError:
        return None


def _ask_amount(prompt: str) -> Decimal:
    while True:
        parsed = parse_amount(questionary.text(prompt).ask() or "")
        if parsed is not None and parsed >= 0:
            return parsed
        console.print("[red]Invalid value. Try again.[/red]")


def show_bill(result: BillResult) -> None:
    console.print()
    heading = result.provider_code if result.category is None else f"{result.provider_code} {result.category}"
    console.print(
        f"[bold]{heading}, {format_period(result.year, result.month)}[/bold] "
        f"({result.days_in_month} days, {result.units_kwh:g} kWh)"
    )

    if result.slab_wise:
        slab_table = Table(title="Energy charge by slab")
        slab_table.add_column("Slab")
        slab_table.add_column("Units", justify="right")
        slab_table.add_column("Rate", justify="right")
        slab_table.add_column("Amount", justify="right")
        for row in result.slab_wise:
            label = f"{row.min_unit}+" if row.max_unit is None else f"{row.min_unit}-{row.max_unit}"
            slab_table.add_row(label, f"{row.units:g}", format_inr(row.rate), format_inr(row.amount))
        console.print(slab_table)

    breakdown = result.breakdown
    table = Table(title="Bill")
    table.add_column("Charge")
    table.add_column("Amount", justify="right")
    table.add_row("Energy charge", format_inr(breakdown.energy_charge))
    table.add_row("Fixed charge", format_inr(breakdown.fixed_charge))
    table.add_row("FPPCA", format_inr(breakdown.fppca_charge))
    table.add_row("Duty", format_inr(breakdown.duty_charge))
    table.add_row("Meter rent", format_inr(breakdown.meter_rent))
    table.add_row("[bold]Total before rebate[/bold]", f"[bold]{format_inr(result.total_before_rebate)}[/bold]")
    for code, amount in breakdown.rebates.items():
        table.add_row(f"Rebate ({code.replace('_', ' ')})", format_inr(-amount))
    console.print(table)
    console.print(f"  [bold]Total payable: {format_inr(result.total_payable)}[/bold]")

    if result.applied_rules.free_units_applied:
        free_units = result.applied_rules.free_units_applied
        console.print(f"  [cyan]{free_units:g} kWh free under the government scheme.[/cyan]")
    if result.applied_rules.lifeline_applied:
        console.print("  [cyan]Eligible for lifeline treatment.[/cyan]")
    if result.fppca_missing:
        console.print(
            "  [yellow]No FPPCA rate is published for this month; "
            "this estimate may be understated.[/yellow]"
        )


def calculate_bill_menu(calculator: BillCalculator) -> BillResult | None:
    console.print()
    console.print("[bold]Calculate Bill[/bold]", style="cyan")

    provider_code = (questionary.text("Provider code (e.g. CESC):").ask() or "").strip().upper()
    if not provider_code:
        console.print("[yellow]Cancelled.[/yellow]")
        return None

    while True:
        period = _parse_period(questionary.text("Billing period (YYYY-MM, e.g. 2025-01):").ask() or "")
        if period is not None:
            break
        console.print("[red]Invalid format. Use YYYY-MM (e.g. 2025-01).[/red]")
    year, month = period

    units = _ask_amount("Units consumed (kWh):")
    load = _ask_amount("Sanctioned load (kVA):")
    timely = questionary.confirm("Opt in to timely payment rebate?", default=False).ask()
    lifeline = questionary.confirm("Registered for lifeline rate?", default=False).ask()

    category = None
    if calculator.resolver.schema == "versioned":
        category = questionary.select("Tariff category:", choices=list(TARIFF_CATEGORIES)).ask()
        if category is None:
            console.print("[yellow]Cancelled.[/yellow]")
            return None

    request = BillingRequest(
        provider_code=provider_code,
        year=year,
        month=month,
        units_kwh=float(units),
        sanctioned_load_kva=float(load),
        timely_payment_opt_in=bool(timely),
        is_lifeline_registered=bool(lifeline),
        category=category,
    )
    try:
        result = calculator.calculate(request)
    except BillingError as exc:
        console.print(f"[red]{exc.message}[/red]")
        return None

    show_bill(result)
    return result
