# backend/models.py
from sqlalchemy import Column, String, Float, Date, DateTime, Integer, Text
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.types import JSON
from datetime import datetime

from .database import Base


def _iso(value):
    return value.isoformat() if value is not None else None


class NDVIRecord(Base):
    __tablename__ = "ndvi"
    id = Column(Integer, primary_key=True, autoincrement=True)
    farm_id = Column(Integer, index=True, nullable=False)
    timestamp = Column(Date, index=True, nullable=False)
    ndvi = Column(Float, nullable=False)
    weather_condition = Column(String, default="normal")
    cloud_cover = Column(Float)
    temperature = Column(Float)
    rainfall = Column(Float)
    satellite_image_url = Column(String, nullable=True)


class Alert(Base):
    __tablename__ = "alerts"
    id = Column(String, primary_key=True)
    farm_id = Column(Integer, index=True, nullable=False)
    farmer_name = Column(String)
    alert_type = Column(String, default="ndvi_drop")
    severity = Column(String, index=True)        # low | medium | high | critical
    current_ndvi = Column(Float)
    baseline_ndvi = Column(Float)
    drop_percentage = Column(Float)
    message = Column(Text)
    timestamp = Column(DateTime, default=datetime.now, index=True)
    status = Column(String, default="active", index=True)   # active | acknowledged | resolved
    estimated_cause = Column(String, nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", MutableDict.as_mutable(JSON), default=dict)
    acknowledged_at = Column(DateTime, nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "farmId": self.farm_id,
            "farmerName": self.farmer_name,
            "alertType": self.alert_type,
            "severity": self.severity,
            "currentNDVI": self.current_ndvi,
            "baselineNDVI": self.baseline_ndvi,
            "dropPercentage": self.drop_percentage,
            "message": self.message,
            "timestamp": _iso(self.timestamp),
            "status": self.status,
            "estimatedCause": self.estimated_cause,
            "metadata": dict(self.details or {}),
            "acknowledgedAt": _iso(self.acknowledged_at),
            "resolvedAt": _iso(self.resolved_at),
        }
