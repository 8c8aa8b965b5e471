from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from tariffcalc.models.provider import DutyRate, FppcaRate, RebateRule, Slab
from tariffcalc.services.tariff_service import TariffService, validate_slab_table


def _slabs(rows):
    return [Slab(min_unit=lo, max_unit=hi, rate_paise_per_kwh=rate) for lo, hi, rate in rows]


class TestValidateSlabTable:
    def test_valid_ladder(self):
        validate_slab_table(_slabs([(0, 50, 500), (51, 100, 650), (101, None, 800)]))

    def test_single_unbounded_slab(self):
        validate_slab_table(_slabs([(1, None, 500)]))

    def test_empty(self):
        with pytest.raises(ValueError, match="At least one slab"):
            validate_slab_table([])

    def test_first_slab_must_start_at_zero_or_one(self):
        with pytest.raises(ValueError, match="must start at unit 0 or 1"):
            validate_slab_table(_slabs([(10, None, 500)]))

    def test_gap(self):
        with pytest.raises(ValueError, match="must start at unit 51"):
            validate_slab_table(_slabs([(0, 50, 500), (60, None, 650)]))

    def test_overlap(self):
        with pytest.raises(ValueError, match="must start at unit 51"):
            validate_slab_table(_slabs([(0, 50, 500), (40, None, 650)]))

    def test_bounded_top_slab(self):
        with pytest.raises(ValueError, match="last slab must be unbounded"):
            validate_slab_table(_slabs([(0, 50, 500), (51, 100, 650)]))

    def test_unbounded_middle_slab(self):
        with pytest.raises(ValueError, match="Only the last slab"):
            validate_slab_table(_slabs([(0, None, 500), (51, None, 650)]))

    def test_negative_rate(self):
        with pytest.raises(ValueError, match="negative rate"):
            validate_slab_table(_slabs([(0, None, -1)]))

    def test_inverted_slab(self):
        with pytest.raises(ValueError, match="ends before it starts"):
            validate_slab_table(_slabs([(0, 50, 500), (51, 40, 650), (41, None, 800)]))


class TestTariffService:
    @pytest.fixture(autouse=True)
    def _setup(self, sample_provider):
        self.repo = MagicMock()
        self.provider = sample_provider(id=1)
        self.repo.get_provider_by_code.return_value = self.provider
        self.service = TariffService(self.repo)

    def test_list_providers(self):
        self.repo.list_providers.return_value = [self.provider]
        assert self.service.list_providers() == [self.provider]

    def test_get_provider_missing(self):
        self.repo.get_provider_by_code.return_value = None
        assert self.service.get_provider("XYZ") is None

    def test_create_provider(self, sample_provider):
        self.repo.get_provider_by_code.return_value = None
        new = sample_provider(code="WBSEDCL")
        self.repo.create_provider.return_value = new.model_copy(update={"id": 2})
        result = self.service.create_provider(new)
        self.repo.create_provider.assert_called_once_with(new)
        assert result.id == 2

    def test_create_duplicate_provider(self, sample_provider):
        with pytest.raises(ValueError, match="already exists"):
            self.service.create_provider(sample_provider())
        self.repo.create_provider.assert_not_called()

    def test_create_provider_requires_code(self, sample_provider):
        with pytest.raises(ValueError, match="code is required"):
            self.service.create_provider(sample_provider(code="  "))

    def test_create_provider_negative_charges(self, sample_provider):
        self.repo.get_provider_by_code.return_value = None
        with pytest.raises(ValueError, match="cannot be negative"):
            self.service.create_provider(sample_provider(meter_rent=Decimal("-1")))

    def test_update_provider_keeps_id(self, sample_provider):
        self.repo.update_provider.side_effect = lambda p: p
        result = self.service.update_provider(sample_provider(name="Renamed"))
        assert result.id == 1
        assert result.name == "Renamed"

    def test_update_unknown_provider(self, sample_provider):
        self.repo.get_provider_by_code.return_value = None
        with pytest.raises(ValueError, match="Provider XYZ not found"):
            self.service.update_provider(sample_provider(code="XYZ"))

    def test_replace_slabs_sorts_before_validating(self):
        self.repo.replace_slabs.side_effect = lambda provider_id, slabs: slabs
        unordered = _slabs([(101, None, 800), (0, 50, 500), (51, 100, 650)])
        result = self.service.replace_slabs("CESC", unordered)
        assert [s.min_unit for s in result] == [0, 51, 101]
        self.repo.replace_slabs.assert_called_once()
        assert self.repo.replace_slabs.call_args.args[0] == 1

    def test_replace_slabs_invalid_table(self):
        with pytest.raises(ValueError):
            self.service.replace_slabs("CESC", _slabs([(0, 50, 500)]))
        self.repo.replace_slabs.assert_not_called()

    def test_replace_slabs_unknown_provider(self):
        self.repo.get_provider_by_code.return_value = None
        with pytest.raises(ValueError, match="not found"):
            self.service.replace_slabs("XYZ", _slabs([(0, None, 500)]))

    def test_get_slabs(self, sample_slabs):
        self.repo.get_slabs.return_value = sample_slabs()
        assert len(self.service.get_slabs("CESC")) == 3
        self.repo.get_slabs.assert_called_once_with(1)

    def test_publish_fppca_rate(self):
        self.repo.upsert_fppca_rate.side_effect = lambda rate: rate.model_copy(update={"id": 5})
        result = self.service.publish_fppca_rate("CESC", 2025, 1, Decimal("0.32"))
        stored = self.repo.upsert_fppca_rate.call_args.args[0]
        assert stored == FppcaRate(provider_id=1, year=2025, month=1, rate_per_kwh=Decimal("0.32"))
        assert result.id == 5

    @pytest.mark.parametrize(
        "year,month,rate,match",
        [
            (1999, 1, "0.32", "Invalid year"),
            (2025, 13, "0.32", "Invalid month"),
            (2025, 1, "-0.01", "cannot be negative"),
        ],
    )
    def test_publish_fppca_rate_rejects(self, year, month, rate, match):
        with pytest.raises(ValueError, match=match):
            self.service.publish_fppca_rate("CESC", year, month, Decimal(rate))
        self.repo.upsert_fppca_rate.assert_not_called()

    def test_list_fppca_rates(self):
        self.repo.list_fppca_rates.return_value = []
        assert self.service.list_fppca_rates("CESC") == []
        self.repo.list_fppca_rates.assert_called_once_with(1)

    def test_add_duty_rate(self):
        self.repo.add_duty_rate.side_effect = lambda duty: duty.model_copy(update={"id": 3})
        result = self.service.add_duty_rate("CESC", "Electricity duty", Decimal("5"))
        assert result == DutyRate(id=3, provider_id=1, name="Electricity duty", percent=Decimal("5"))

    def test_add_negative_duty_rate(self):
        with pytest.raises(ValueError):
            self.service.add_duty_rate("CESC", "Electricity duty", Decimal("-5"))

    def test_set_rebate_rule(self):
        self.repo.upsert_rebate_rule.side_effect = lambda rule: rule
        result = self.service.set_rebate_rule("CESC", "timely_payment", Decimal("2"))
        assert result == RebateRule(provider_id=1, code="timely_payment", percent=Decimal("2"), active=True)

    @pytest.mark.parametrize("percent", ["-1", "100.01"])
    def test_set_rebate_rule_out_of_range(self, percent):
        with pytest.raises(ValueError, match="between 0 and 100"):
            self.service.set_rebate_rule("CESC", "timely_payment", Decimal(percent))

    def test_set_rebate_rule_requires_code(self):
        with pytest.raises(ValueError, match="Rebate code is required"):
            self.service.set_rebate_rule("CESC", "", Decimal("2"))
