# backend/service.py
import logging
import random
from datetime import datetime

from fastapi import Request

from .alert_store import AlertStore
from .database import SessionScope
from .farms import FarmRegistry
from .monitor import NDVIMonitor
from .ndvi_generator import NDVIGenerator
from .ndvi_store import NDVIStore

log = logging.getLogger(__name__)


class MonitoringService:
    """Owns one set of farms, stores and monitor. One per app, one per test."""

    def __init__(self, farms=None, seed=None, clock=datetime.now):
        sessions = SessionScope()
        self.lock = sessions.lock
        self.farms = farms if isinstance(farms, FarmRegistry) else FarmRegistry(farms)
        self.generator = NDVIGenerator(random.Random(seed))
        self.ndvi_store = NDVIStore(sessions)
        self.alert_store = AlertStore(sessions, clock=clock)
        self.monitor = NDVIMonitor(self.farms, self.ndvi_store, self.alert_store, clock=clock, lock=sessions.lock)

    def simulate(self, farms, days=60):
        total = 0
        with self.lock:
            for farm in farms:
                total += self.ndvi_store.store(self.generator.generate_series(farm, days))
        return total

    def inject_disaster(self, farm, event):
        """Re-store the farm's series with the event applied; None when it has no data."""
        with self.lock:
            series = self.ndvi_store.series(farm.id)
            if not series:
                return None
            self.generator.inject_disaster_event(series, event)
            self.ndvi_store.store(series)
        log.info("%s disaster injected into farm %s", event.type, farm.id)
        return series

    def seed(self, days=60):
        total = self.simulate(self.farms.all(), days)
        log.info("Seeded %d NDVI points for %d farms", total, len(self.farms))
        return total


def get_service(request: Request) -> MonitoringService:
    return request.app.state.service
