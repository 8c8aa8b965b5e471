"""Errors raised while computing a bill.

Validation errors are raised before the configuration store is touched.
Configuration errors abort the calculation; no partial bill is returned.
"""

from __future__ import annotations


class BillingError(Exception):
    code = "billing_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidBillingRequest(BillingError):
    code = "invalid_request"


class InvalidYear(InvalidBillingRequest):
    code = "invalid_year"

    def __init__(self, year: int) -> None:
        super().__init__(f"Invalid year: {year}")
        self.year = year


class InvalidMonth(InvalidBillingRequest):
    code = "invalid_month"

    def __init__(self, month: int) -> None:
        super().__init__(f"Invalid month: {month}")
        self.month = month


class NegativeUnits(InvalidBillingRequest):
    code = "negative_units"

    def __init__(self, units: float) -> None:
        super().__init__(f"Units cannot be negative: {units}")
        self.units = units


class NegativeLoad(InvalidBillingRequest):
    code = "negative_load"

    def __init__(self, load: float) -> None:
        super().__init__(f"Sanctioned load cannot be negative: {load}")
        self.load = load


class ConfigurationError(BillingError):
    code = "configuration_error"


class ProviderNotFound(ConfigurationError):
    code = "provider_not_found"

    def __init__(self, provider_code: str) -> None:
        super().__init__(f"Provider {provider_code} not found or inactive")
        self.provider_code = provider_code


class SlabLoadFailure(ConfigurationError):
    code = "slab_load_failure"


class MissingCategory(InvalidBillingRequest):
    code = "missing_category"

    def __init__(self) -> None:
        super().__init__("A tariff category is required for versioned tariffs")


class TariffVersionNotFound(ConfigurationError):
    code = "tariff_version_not_found"

    def __init__(self, provider_code: str, category: str) -> None:
        super().__init__(f"No active {category} tariff for provider {provider_code}")
        self.provider_code = provider_code
        self.category = category
