# backend/calculations.py
from dataclasses import dataclass

from .errors import InvalidInputError

# drop-percentage bucket edges: healthy < 10 <= warning < 25 <= critical < 50 <= severe
WARNING_DROP_PCT = 10.0
CRITICAL_DROP_PCT = 25.0
SEVERE_DROP_PCT = 50.0

STATUS_SEVERITY = {
    "healthy": "low",
    "warning": "medium",
    "critical": "high",
    "severe": "critical",
}

STATUS_COLOR = {
    "healthy": "#10b981",
    "warning": "#f59e0b",
    "critical": "#f97316",
    "severe": "#ef4444",
}

_HEALTH_MESSAGES = {
    "healthy": "Crop health is excellent ({:.1f}% below baseline)",
    "warning": "Minor stress detected ({:.1f}% below baseline)",
    "critical": "Significant stress detected ({:.1f}% below baseline)",
    "severe": "Severe crop damage detected ({:.1f}% below baseline)",
}


@dataclass(frozen=True)
class HealthAssessment:
    status: str
    severity: str
    color: str
    current_ndvi: float
    baseline_ndvi: float
    drop_percentage: float
    message: str

    def to_dict(self):
        return {
            "status": self.status,
            "severity": self.severity,
            "color": self.color,
            "currentNDVI": self.current_ndvi,
            "baselineNDVI": self.baseline_ndvi,
            "dropPercentage": self.drop_percentage,
            "message": self.message,
        }


def healthy_ndvi(days_since_sowing: int, baseline_ndvi: float) -> float:
    """
    Expected NDVI of an unstressed crop, by growth stage:
      <0 bare soil, 0-15 germination, 15-30 vegetative, 30-60 rapid growth,
      60-90 flowering/pod (peak), 90-120 maturity, then post-harvest stubble.
    """
    d = days_since_sowing
    if d < 0:
        return 0.2
    if d < 15:
        return 0.2 + 0.1 * (d / 15)
    if d < 30:
        return 0.3 + 0.3 * ((d - 15) / 15)
    if d < 60:
        return 0.6 + (baseline_ndvi - 0.6) * ((d - 30) / 30)
    if d < 90:
        return baseline_ndvi
    if d < 120:
        return baseline_ndvi - 0.2 * ((d - 90) / 30)
    return 0.3


def drop_percentage(current_ndvi: float, baseline_ndvi: float) -> float:
    if not baseline_ndvi or baseline_ndvi <= 0:
        raise InvalidInputError("baselineNDVI must be greater than 0")
    return (baseline_ndvi - current_ndvi) / baseline_ndvi * 100


def classify_drop(drop_pct: float) -> str:
    if drop_pct < WARNING_DROP_PCT:
        return "healthy"
    if drop_pct < CRITICAL_DROP_PCT:
        return "warning"
    if drop_pct < SEVERE_DROP_PCT:
        return "critical"
    return "severe"


def assess_ndvi_health(current_ndvi: float, baseline_ndvi: float) -> HealthAssessment:
    drop = drop_percentage(current_ndvi, baseline_ndvi)
    status = classify_drop(drop)
    return HealthAssessment(
        status=status,
        severity=STATUS_SEVERITY[status],
        color=STATUS_COLOR[status],
        current_ndvi=current_ndvi,
        baseline_ndvi=baseline_ndvi,
        drop_percentage=round(drop, 2),
        message=_HEALTH_MESSAGES[status].format(drop),
    )
