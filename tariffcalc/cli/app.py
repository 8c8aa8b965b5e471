import questionary
from rich.console import Console

from tariffcalc.cli.calculator_menu import calculate_bill_menu
from tariffcalc.cli.tariff_menu import tariff_management_menu
from tariffcalc.db import get_connection
from tariffcalc.repositories.factory import get_tariff_repository
from tariffcalc.services.bill_calculator import BillCalculator
from tariffcalc.services.resolvers import get_resolver
from tariffcalc.services.tariff_service import TariffService
from tariffcalc.settings import settings

console = Console()


def _build_services() -> tuple[BillCalculator, TariffService]:
    resolver = get_resolver(settings.get_tariff_schema(), get_connection())
    return BillCalculator(resolver), TariffService(get_tariff_repository())


def main_menu() -> None:
    calculator, tariff_service = _build_services()

    console.print()
    console.print("[bold]Electricity Bill Calculator[/bold]", style="cyan")
    console.print()

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "Calculate Bill",
                "Manage Tariffs",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "Calculate Bill":
            calculate_bill_menu(calculator)
        elif choice == "Manage Tariffs":
            tariff_management_menu(tariff_service)
