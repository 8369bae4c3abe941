# backend/alert_store.py
import logging
import uuid
from datetime import datetime
from typing import Optional

from .errors import InvalidInputError, InvalidStateError, NotFoundError
from .models import Alert

log = logging.getLogger(__name__)

SEVERITIES = ("critical", "high", "medium", "low")
STATUSES = ("active", "acknowledged", "resolved")

# Ratio of baseline at which a farm counts as recovered and its alerts close.
# The monitor only calls auto_resolve once the farm assesses as healthy (>= 90%
# of baseline), so through the sweep the effective threshold is 90%; the 80%
# ratio still governs direct callers.
RECOVERY_RATIO = 0.8

RECENT_ALERTS = 10


class AlertStore:
    """Crop health alerts with at most one active alert per (farm, severity)."""

    def __init__(self, sessions, clock=datetime.now):
        self.session = sessions
        self.clock = clock

    def record(self, alert_data: dict):
        """Open an alert, or refresh the matching active one. Returns (alert, is_duplicate)."""
        severity = alert_data.get("severity")
        if severity not in SEVERITIES:
            raise InvalidInputError(f"Invalid severity '{severity}'")

        with self.session() as db:
            now = self.clock()
            existing = (
                db.query(Alert)
                .filter(
                    Alert.farm_id == alert_data["farm_id"],
                    Alert.status == "active",
                    Alert.severity == severity,
                )
                .first()
            )
            if existing:
                existing.timestamp = now
                existing.current_ndvi = alert_data.get("current_ndvi")
                existing.drop_percentage = alert_data.get("drop_percentage")
                existing.message = alert_data.get("message")
                db.commit()
                return existing, True

            alert = Alert(
                id=str(uuid.uuid4()),
                farm_id=alert_data["farm_id"],
                farmer_name=alert_data.get("farmer_name"),
                alert_type=alert_data.get("alert_type") or "ndvi_drop",
                severity=severity,
                current_ndvi=alert_data.get("current_ndvi"),
                baseline_ndvi=alert_data.get("baseline_ndvi"),
                drop_percentage=alert_data.get("drop_percentage"),
                message=alert_data.get("message"),
                timestamp=now,
                status="active",
                estimated_cause=alert_data.get("estimated_cause"),
                details=dict(alert_data.get("metadata") or {}),
            )
            db.add(alert)
            db.commit()
            log.info("Alert %s opened for farm %s (%s)", alert.id, alert.farm_id, severity)
            return alert, False

    def query(self, status=None, severity=None, farm_id=None, limit=None):
        with self.session() as db:
            q = db.query(Alert)
            if status:
                q = q.filter(Alert.status == status)
            if severity:
                q = q.filter(Alert.severity == severity)
            if farm_id is not None:
                q = q.filter(Alert.farm_id == farm_id)
            q = q.order_by(Alert.timestamp.desc())
            if limit is not None:
                q = q.limit(limit)
            return q.all()

    def active(self):
        return self.query(status="active")

    def for_farm(self, farm_id: int, limit: int = 50):
        return self.query(farm_id=farm_id, limit=limit)

    def get(self, alert_id: str) -> Optional[Alert]:
        with self.session() as db:
            return db.get(Alert, alert_id)

    def acknowledge(self, alert_id: str) -> Alert:
        with self.session() as db:
            alert = db.get(Alert, alert_id)
            if alert is None:
                raise NotFoundError("Alert not found")
            if alert.status != "active":
                raise InvalidStateError("Alert is not active")
            alert.status = "acknowledged"
            alert.acknowledged_at = self.clock()
            db.commit()
            return alert

    def resolve(self, alert_id: str) -> Alert:
        with self.session() as db:
            alert = db.get(Alert, alert_id)
            if alert is None:
                raise NotFoundError("Alert not found")
            alert.status = "resolved"
            alert.resolved_at = self.clock()
            db.commit()
            return alert

    def auto_resolve(self, farm_id: int, current_ndvi: float, baseline_ndvi: float) -> int:
        """Resolve every active alert of a farm whose NDVI is back to RECOVERY_RATIO of baseline."""
        if current_ndvi < baseline_ndvi * RECOVERY_RATIO:
            return 0
        with self.session() as db:
            now = self.clock()
            alerts = db.query(Alert).filter(Alert.farm_id == farm_id, Alert.status == "active").all()
            for alert in alerts:
                alert.status = "resolved"
                alert.resolved_at = now
                alert.details = dict(alert.details or {}, autoResolved=True, recoveryNDVI=current_ndvi)
            db.commit()
        if alerts:
            log.info("Auto-resolved %d alert(s) for recovered farm %s", len(alerts), farm_id)
        return len(alerts)

    def stats(self):
        alerts = self.query()
        stats = {
            "total": len(alerts),
            "active": 0,
            "acknowledged": 0,
            "resolved": 0,
            "bySeverity": {s: 0 for s in SEVERITIES},
            "activeBySeverity": {s: 0 for s in SEVERITIES},
        }
        for alert in alerts:
            if alert.status in STATUSES:
                stats[alert.status] += 1
            if alert.severity in stats["bySeverity"]:
                stats["bySeverity"][alert.severity] += 1
                if alert.status == "active":
                    stats["activeBySeverity"][alert.severity] += 1
        stats["recentAlerts"] = [a.to_dict() for a in alerts[:RECENT_ALERTS]]
        return stats

    def count(self) -> int:
        with self.session() as db:
            return db.query(Alert).count()

    def clear(self) -> int:
        with self.session() as db:
            count = db.query(Alert).delete(synchronize_session=False)
            db.commit()
            return count
