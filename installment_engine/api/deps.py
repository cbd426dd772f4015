"""FastAPI dependency injection."""

from datetime import date

from installment_engine.config import Settings, settings


def get_today() -> date:
    """Reference date for status and quota decisions. Overridden in tests."""
    return date.today()


def get_settings() -> Settings:
    return settings
