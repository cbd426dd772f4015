from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Deferrals
    deferrals_per_year: int = 3

    # Validator thresholds
    total_tolerance_pct: Decimal = Decimal("0.05")  # Sum of amounts vs loan amount
    max_gap_months: float = 1.5
    paid_date_lookback_years: int = 1
    term_drift_months: int = 2

    # App
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
