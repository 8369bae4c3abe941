# backend/ndvi_store.py
from datetime import date, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import func

from .models import NDVIRecord
from .ndvi_generator import NDVIPoint


def _to_record(point: NDVIPoint) -> NDVIRecord:
    return NDVIRecord(
        farm_id=point.farm_id,
        timestamp=point.timestamp,
        ndvi=point.ndvi,
        weather_condition=point.weather_condition,
        cloud_cover=point.cloud_cover,
        temperature=point.temperature,
        rainfall=point.rainfall,
        satellite_image_url=point.satellite_image_url,
    )


def _to_point(record: NDVIRecord) -> NDVIPoint:
    return NDVIPoint(
        farm_id=record.farm_id,
        timestamp=record.timestamp,
        ndvi=record.ndvi,
        weather_condition=record.weather_condition,
        cloud_cover=record.cloud_cover,
        temperature=record.temperature,
        rainfall=record.rainfall,
        satellite_image_url=record.satellite_image_url,
    )


class NDVIStore:
    """NDVI time series per farm. Reads hand back detached NDVIPoint copies."""

    def __init__(self, sessions):
        self.session = sessions

    def store(self, points: Iterable[NDVIPoint]) -> int:
        """Replace the whole history of every farm present in the batch."""
        points = list(points)
        farm_ids = {p.farm_id for p in points}
        with self.session() as db:
            if farm_ids:
                db.query(NDVIRecord).filter(NDVIRecord.farm_id.in_(list(farm_ids))).delete(synchronize_session=False)
            db.add_all(_to_record(p) for p in sorted(points, key=lambda p: p.timestamp))
            db.commit()
        return len(points)

    def _ordered(self, db, farm_id):
        return (
            db.query(NDVIRecord)
            .filter(NDVIRecord.farm_id == farm_id)
            .order_by(NDVIRecord.timestamp.asc(), NDVIRecord.id.asc())
        )

    def series(self, farm_id: int) -> List[NDVIPoint]:
        with self.session() as db:
            return [_to_point(r) for r in self._ordered(db, farm_id).all()]

    def history(self, farm_id: int, days: int = 60, today: Optional[date] = None) -> List[NDVIPoint]:
        cutoff = (today or date.today()) - timedelta(days=days)
        with self.session() as db:
            rows = self._ordered(db, farm_id).filter(NDVIRecord.timestamp >= cutoff).all()
            return [_to_point(r) for r in rows]

    def latest(self, farm_id: int) -> Optional[NDVIPoint]:
        with self.session() as db:
            row = (
                db.query(NDVIRecord)
                .filter(NDVIRecord.farm_id == farm_id)
                .order_by(NDVIRecord.timestamp.desc(), NDVIRecord.id.desc())
                .first()
            )
            return _to_point(row) if row else None

    def all_latest(self) -> List[NDVIPoint]:
        """Most recent point of every farm that has data, in one scan."""
        with self.session() as db:
            latest = {}
            for row in db.query(NDVIRecord).order_by(NDVIRecord.id.asc()):
                current = latest.get(row.farm_id)
                if current is None or row.timestamp > current.timestamp:
                    latest[row.farm_id] = row
            return [_to_point(r) for r in latest.values()]

    def clear(self) -> int:
        with self.session() as db:
            count = db.query(NDVIRecord).delete(synchronize_session=False)
            db.commit()
            return count

    def stats(self):
        with self.session() as db:
            total, farms, oldest, newest = db.query(
                func.count(NDVIRecord.id),
                func.count(func.distinct(NDVIRecord.farm_id)),
                func.min(NDVIRecord.timestamp),
                func.max(NDVIRecord.timestamp),
            ).one()
        return {
            "totalDataPoints": total,
            "farmsTracked": farms,
            "dateRange": {
                "oldest": oldest.isoformat() if oldest else None,
                "newest": newest.isoformat() if newest else None,
            },
        }
