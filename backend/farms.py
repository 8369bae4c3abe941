# backend/farms.py
import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import List, Optional


@dataclass(frozen=True)
class AdministrativeData:
    state: str
    district: str
    tehsil: str
    village: str
    pincode: Optional[str] = None


@dataclass(frozen=True)
class Farm:
    id: int
    farmer_name: str
    crop: str
    location: str
    polygon: tuple               # ((lat, lng), ...), at least 3 points, not closed
    area: float                  # hectares
    crop_type: str
    sowing_date: date
    expected_harvest_date: Optional[date]
    baseline_ndvi: float         # healthy-crop reference NDVI
    insurance_value: float       # INR
    administrative: AdministrativeData
    phone: Optional[str] = None

    def __post_init__(self):
        if len(self.polygon) < 3:
            raise ValueError(f"Farm {self.id}: polygon needs at least 3 points")

    def to_dict(self):
        return {
            "id": self.id,
            "farmerName": self.farmer_name,
            "crop": self.crop,
            "location": self.location,
            "polygon": [list(p) for p in self.polygon],
            "area": self.area,
            "cropType": self.crop_type,
            "sowingDate": self.sowing_date.isoformat(),
            "expectedHarvestDate": self.expected_harvest_date.isoformat() if self.expected_harvest_date else None,
            "baselineNDVI": self.baseline_ndvi,
            "insuranceValue": self.insurance_value,
            "contactInfo": {"phone": self.phone},
            "administrativeData": asdict(self.administrative),
        }


def _kolhapur(tehsil, village, pincode):
    return AdministrativeData(state="Maharashtra", district="Kolhapur", tehsil=tehsil,
                              village=village, pincode=pincode)


DEFAULT_FARMS = [
    Farm(
        id=1, farmer_name="rajaram mane", crop="Soybean", location="Kolhapur",
        polygon=((16.705, 74.2433), (16.7055, 74.2445), (16.7045, 74.245), (16.704, 74.2438)),
        area=2.5, crop_type="Soybean (JS 335 variety)",
        sowing_date=date(2025, 7, 15), expected_harvest_date=date(2025, 11, 10),
        baseline_ndvi=0.75, insurance_value=250000,
        administrative=_kolhapur("Shahuwadi", "Nesari", "416213"), phone="+91-9876543210",
    ),
    Farm(
        id=2, farmer_name="sarjerao mane", crop="Soybean", location="Kolhapur",
        polygon=((16.706, 74.2455), (16.7065, 74.2467), (16.7055, 74.2472), (16.705, 74.246)),
        area=3.2, crop_type="Soybean (JS 335 variety)",
        sowing_date=date(2025, 7, 18), expected_harvest_date=date(2025, 11, 12),
        baseline_ndvi=0.72, insurance_value=320000,
        administrative=_kolhapur("Shahuwadi", "Nesari", "416213"), phone="+91-9876543211",
    ),
    Farm(
        id=3, farmer_name="vishal rane", crop="Soybean", location="Kolhapur",
        polygon=((16.7035, 74.242), (16.704, 74.2432), (16.703, 74.2437), (16.7025, 74.2425)),
        area=1.8, crop_type="Soybean (MAUS 71 variety)",
        sowing_date=date(2025, 7, 12), expected_harvest_date=date(2025, 11, 5),
        baseline_ndvi=0.78, insurance_value=180000,
        administrative=_kolhapur("Radhanagari", "Kasba Walva", "416211"), phone="+91-9876543212",
    ),
    Farm(
        id=4, farmer_name="Ramesh Patil", crop="Soybean", location="Kolhapur",
        polygon=((16.707, 74.244), (16.7075, 74.2452), (16.7065, 74.2457), (16.706, 74.2445)),
        area=4.0, crop_type="Soybean (JS 335 variety)",
        sowing_date=date(2025, 7, 20), expected_harvest_date=date(2025, 11, 15),
        baseline_ndvi=0.74, insurance_value=400000,
        administrative=_kolhapur("Karveer", "Nigave", "416207"), phone="+91-9876543213",
    ),
]


def _distinct(values):
    seen = []
    for v in values:
        if v and v not in seen:
            seen.append(v)
    return seen


class FarmRegistry:
    """Read-only lookups over the farm reference data."""

    def __init__(self, farms: Optional[List[Farm]] = None):
        self._farms = list(DEFAULT_FARMS if farms is None else farms)

    def all(self) -> List[Farm]:
        return list(self._farms)

    def __len__(self):
        return len(self._farms)

    def get(self, farm_id: int) -> Optional[Farm]:
        return next((f for f in self._farms if f.id == farm_id), None)

    def by_location(self, location: str) -> List[Farm]:
        return [f for f in self._farms if f.location.lower() == location.lower()]

    def by_crop(self, crop: str) -> List[Farm]:
        return [f for f in self._farms if f.crop.lower() == crop.lower()]

    # --- administrative divisions ---

    def districts(self):
        return _distinct(f.administrative.district for f in self._farms)

    def tehsils(self, district=None):
        farms = [f for f in self._farms if not district or f.administrative.district == district]
        return _distinct(f.administrative.tehsil for f in farms)

    def villages(self, tehsil=None):
        farms = [f for f in self._farms if not tehsil or f.administrative.tehsil == tehsil]
        return _distinct(f.administrative.village for f in farms)

    def by_division(self, district=None, tehsil=None, village=None, search=None, page=1, limit=50):
        farms = self._farms
        if district:
            farms = [f for f in farms if f.administrative.district == district]
        if tehsil:
            farms = [f for f in farms if f.administrative.tehsil == tehsil]
        if village:
            farms = [f for f in farms if f.administrative.village == village]
        if search:
            needle = search.lower()
            farms = [f for f in farms if needle in f.farmer_name.lower()]

        page = max(page, 1)
        limit = max(limit, 1)
        start = (page - 1) * limit
        return {
            "items": farms[start:start + limit],
            "total": len(farms),
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(len(farms) / limit),
        }

    def division_stats(self):
        stats = {"district": {}, "tehsil": {}}
        for farm in self._farms:
            dist = farm.administrative.district or "Unknown"
            tehsil = farm.administrative.tehsil or "Unknown"
            d = stats["district"].setdefault(dist, {"count": 0, "area": 0.0})
            d["count"] += 1
            d["area"] += farm.area or 0
            t = stats["tehsil"].setdefault(tehsil, {"count": 0, "area": 0.0, "district": dist})
            t["count"] += 1
            t["area"] += farm.area or 0
        return stats
