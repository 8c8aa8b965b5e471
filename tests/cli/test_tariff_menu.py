from decimal import Decimal
from unittest.mock import MagicMock, patch

from tariffcalc.models.provider import FppcaRate, Provider, Slab


def _service():
    service = MagicMock()
    service.list_providers.return_value = [
        Provider(id=1, code="CESC", name="CESC Limited", fixed_charge_per_kva=Decimal("15"), meter_rent=Decimal("10"))
    ]
    service.get_slabs.return_value = [
        Slab(min_unit=0, max_unit=50, rate_paise_per_kwh=500),
        Slab(min_unit=51, rate_paise_per_kwh=650),
    ]
    service.list_fppca_rates.return_value = [
        FppcaRate(provider_id=1, year=2025, month=1, rate_per_kwh=Decimal("0.32"))
    ]
    return service


class TestTariffManagementMenu:
    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_no_providers(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = MagicMock()
        service.list_providers.return_value = []

        tariff_management_menu(service)
        mock_q.select.assert_not_called()

    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_back(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = _service()
        mock_q.select.return_value.ask.return_value = "Back"

        tariff_management_menu(service)
        service.get_slabs.assert_not_called()

    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_show_slabs(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = _service()
        mock_q.select.return_value.ask.side_effect = ["CESC - CESC Limited", "Show slabs and FPPCA rates", "Back"]

        tariff_management_menu(service)
        service.get_slabs.assert_called_once_with("CESC")
        service.list_fppca_rates.assert_called_once_with("CESC")

    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_publish_fppca(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = _service()
        mock_q.select.return_value.ask.side_effect = ["CESC - CESC Limited", "Publish FPPCA rate", None]
        mock_q.text.return_value.ask.side_effect = ["2025-04", "0.35"]

        tariff_management_menu(service)
        service.publish_fppca_rate.assert_called_once_with("CESC", 2025, 4, Decimal("0.35"))

    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_publish_fppca_invalid_period(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = _service()
        mock_q.select.return_value.ask.side_effect = ["CESC - CESC Limited", "Publish FPPCA rate", "Back"]
        mock_q.text.return_value.ask.side_effect = ["April"]

        tariff_management_menu(service)
        service.publish_fppca_rate.assert_not_called()

    @patch("tariffcalc.cli.tariff_menu.questionary")
    def test_publish_fppca_rejected(self, mock_q):
        from tariffcalc.cli.tariff_menu import tariff_management_menu

        service = _service()
        service.publish_fppca_rate.side_effect = ValueError("Invalid month: 13")
        mock_q.select.return_value.ask.side_effect = ["CESC - CESC Limited", "Publish FPPCA rate", "Back"]
        mock_q.text.return_value.ask.side_effect = ["2025-13", "0.35"]

        with patch("tariffcalc.cli.tariff_menu.console") as mock_console:
            tariff_management_menu(service)
        mock_console.print.assert_any_call("[red]Invalid month: 13[/red]")
