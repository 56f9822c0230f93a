"""Shared fixtures."""

from datetime import date

import pytest

from finflow.config import Settings
from finflow.db import Database
from finflow.service import FinanceService

TODAY = date(2024, 6, 15)


class FixedClock:
    """Clock provider that can be moved by tests."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the user's environment."""
    return Settings(
        _env_file=None,
        database_path=tmp_path / "finflow.db",
        currency_code="INR",
        monthly_income="50000",
        monthly_budget="20000",
        default_reminder_lead_days=3,
    )


@pytest.fixture
def db(settings):
    """Create a temporary database."""
    database = Database(settings.database_path)
    yield database
    database.close()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def service(settings, db, clock):
    """Create a FinanceService pinned to a fixed date."""
    return FinanceService(settings, db, clock=clock)
