"""Pytest bootstrap configuration.

Pin settings that the application reads at import time before test
collection, and provide a controllable clock for session lifecycle tests.
"""
import os
from datetime import datetime, timedelta, timezone

# Console renderer without colours keeps captured logs readable
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("PAYMENT__SWEEP_INTERVAL_SECONDS", "30")

import pytest

from application.services.payment_session_service import PaymentSessionService
from core.settings import PaymentSessionSettings
from infrastructure.repositories.session_store import InMemorySessionStore
from infrastructure.tasks import ExpirySweeper


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def session_settings() -> PaymentSessionSettings:
    return PaymentSessionSettings()


@pytest.fixture
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def service(store, session_settings, clock) -> PaymentSessionService:
    return PaymentSessionService(store=store, settings=session_settings, clock=clock)


@pytest.fixture
def sweeper(store, clock) -> ExpirySweeper:
    return ExpirySweeper(store, interval_seconds=30, clock=clock)
