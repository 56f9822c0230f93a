"""Configuration management for FinFlow."""

from datetime import date
from decimal import Decimal
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FINFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Profile
    currency_code: str = "INR"
    monthly_income: Decimal = Decimal("0")
    monthly_budget: Decimal = Decimal("0")

    # Obligations
    default_reminder_lead_days: int = 3  # "due soon" window for new bills

    # Split reconciliation tolerance, in major units
    reconciliation_epsilon: Decimal = Decimal("0.01")

    log_level: str = "WARNING"

    # Fixed "today" for the clock provider; unset means the system date
    reference_date: date | None = None

    # Database path
    database_path: Path = Path.home() / ".finflow" / "finflow.db"

    def __init__(self, **kwargs):
        """Initialize settings and create database directory if needed."""
        super().__init__(**kwargs)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)

    def today(self) -> date:
        """Clock provider: the configured reference date or the system date."""
        return self.reference_date or date.today()


def load_settings(**overrides) -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the FINFLOW_* variables in your "
            f"environment or .env file.\n"
            f"Error: {e}"
        ) from e
