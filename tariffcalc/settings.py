import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

TARIFF_SCHEMAS = ("standard", "enhanced", "versioned")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TARIFFCALC_", extra="ignore")

    db_url: str = "sqlite:///tariffcalc.db"

    log_level: str = "INFO"
    log_json: bool = False

    tariff_schema: str = "standard"

    # Fallbacks for providers without an electricity_provider_config row
    enhanced_fixed_charge_per_kva: float = 15.00
    enhanced_duty_percent: float = 10.0
    enhanced_meter_rent: float = 10.00

    def get_tariff_schema(self) -> str:
        schema = self.tariff_schema.strip().lower()
        if schema not in TARIFF_SCHEMAS:
            logger.warning(
                "TARIFFCALC_TARIFF_SCHEMA=%r is not one of %s; falling back to 'standard'.",
                self.tariff_schema,
                ", ".join(TARIFF_SCHEMAS),
            )
            return "standard"
        return schema


settings = Settings()
