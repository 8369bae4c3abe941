# backend/ndvi_generator.py
"""
Synthetic satellite NDVI for the demo farms.

NDVI range used here: 0.2 (bare soil / destroyed crop) to 0.9 (dense canopy).
"""
import random
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from .calculations import healthy_ndvi
from .errors import InvalidInputError

NDVI_MIN = 0.2
NDVI_MAX = 0.9
NOISE = 0.05

RECOVERY_DAYS = 15
RECOVERY_CAP = 0.85

DISASTER_TYPES = ("flood", "drought", "pest")

# weather_condition written into points inside the disaster window
DISASTER_CONDITIONS = {"flood": "flood", "drought": "drought", "pest": "pest_attack"}


@dataclass
class NDVIPoint:
    farm_id: int
    timestamp: date
    ndvi: float
    weather_condition: str = "normal"    # normal | flood | drought | pest_attack | recovering
    cloud_cover: float = 0.0             # %
    temperature: float = 0.0             # deg C
    rainfall: float = 0.0                # mm
    satellite_image_url: Optional[str] = None

    def to_dict(self):
        return {
            "farmId": self.farm_id,
            "timestamp": self.timestamp.isoformat(),
            "ndvi": self.ndvi,
            "weatherCondition": self.weather_condition,
            "satelliteImageUrl": self.satellite_image_url,
            "metadata": {
                "cloudCover": self.cloud_cover,
                "temperature": self.temperature,
                "rainfall": self.rainfall,
            },
        }


@dataclass
class DisasterEvent:
    type: str
    start_day: int = 10      # days back from the most recent point, 0 = last point
    duration: int = 5
    severity: float = 0.8    # 0-1

    def __post_init__(self):
        if self.type not in DISASTER_TYPES:
            raise InvalidInputError(
                f"Invalid disaster type '{self.type}', expected one of: {', '.join(DISASTER_TYPES)}"
            )
        if self.duration <= 0:
            raise InvalidInputError("duration must be positive")
        if self.start_day < 0:
            raise InvalidInputError("startDay must not be negative")


def clamp(value, low=NDVI_MIN, high=NDVI_MAX):
    return max(low, min(high, value))


class NDVIGenerator:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def generate_series(self, farm, days_history: int = 60, today: Optional[date] = None) -> List[NDVIPoint]:
        """One point per day from today - days_history to today inclusive."""
        if days_history < 0:
            raise InvalidInputError("days must not be negative")
        today = today or date.today()
        series = []
        for i in range(days_history, -1, -1):
            day = today - timedelta(days=i)
            base = healthy_ndvi((day - farm.sowing_date).days, farm.baseline_ndvi)
            value = clamp(base + self.rng.uniform(-NOISE, NOISE))
            series.append(NDVIPoint(
                farm_id=farm.id,
                timestamp=day,
                ndvi=round(value, 3),
                weather_condition="normal",
                cloud_cover=self.rng.uniform(0, 20),
                temperature=25 + self.rng.uniform(0, 10),
                rainfall=self.rng.uniform(0, 5),
                satellite_image_url=f"/api/satellite-images/{farm.id}/{day.isoformat()}.jpg",
            ))
        return series

    def inject_disaster_event(self, series: List[NDVIPoint], event: DisasterEvent) -> List[NDVIPoint]:
        """Rewrite a window of the series in place, followed by a recovery tail."""
        n = len(series)
        start = max(0, n - event.start_day - event.duration)
        end = max(0, min(n, n - event.start_day))
        if start >= end:
            return series

        for i in range(start, end):
            point = series[i]
            if event.type == "flood":
                point.ndvi = max(0.2, point.ndvi - event.severity * 0.5)
                point.weather_condition = DISASTER_CONDITIONS["flood"]
                point.rainfall = 100 + self.rng.uniform(0, 100)
            elif event.type == "drought":
                progress = (i - start) / event.duration
                point.ndvi = max(0.2, point.ndvi - event.severity * 0.4 * progress)
                point.weather_condition = DISASTER_CONDITIONS["drought"]
                point.rainfall = 0.0
                point.temperature = 35 + self.rng.uniform(0, 5)
            else:
                point.ndvi = max(0.3, point.ndvi - event.severity * 0.3)
                point.weather_condition = DISASTER_CONDITIONS["pest"]
            point.ndvi = round(point.ndvi, 3)

        # recovery is added on top of whatever the curve already holds at that index
        for i in range(end, min(end + RECOVERY_DAYS, n)):
            progress = (i - end) / RECOVERY_DAYS
            point = series[i]
            point.ndvi = round(min(RECOVERY_CAP, point.ndvi + event.severity * 0.2 * progress), 3)
            point.weather_condition = "recovering"

        return series
