from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from backend.config import Settings
from backend.main import create_app
from backend.service import MonitoringService


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start=datetime(2025, 9, 1, 8, 0, 0)):
        self.now = start

    def __call__(self):
        self.now = self.now + timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(clock):
    return MonitoringService(seed=42, clock=clock)


@pytest.fixture
def farm(service):
    return service.farms.get(1)


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def client(service):
    settings = Settings(MONITOR_ENABLED=False, SEED_ON_STARTUP=False)
    app = create_app(settings=settings, service=service)
    with TestClient(app) as c:
        yield c
