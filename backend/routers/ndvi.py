# backend/routers/ndvi.py
import logging

from fastapi import APIRouter, Depends

from ..calculations import assess_ndvi_health
from ..errors import InvalidInputError, NotFoundError, error_response
from ..ndvi_generator import DISASTER_CONDITIONS, DisasterEvent
from ..schemas import DisasterRequest, SimulateRequest
from ..service import MonitoringService, get_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["NDVI"])


def _require_farm(service, farm_id):
    farm = service.farms.get(farm_id)
    if farm is None:
        raise NotFoundError("Farm not found")
    return farm


@router.get("/farms/{farm_id}/ndvi")
def ndvi_history(farm_id: int, days: int = 60, service: MonitoringService = Depends(get_service)):
    try:
        farm = _require_farm(service, farm_id)
        history = service.ndvi_store.history(farm_id, days)
        return {
            "success": True,
            "farmId": farm_id,
            "farmerName": farm.farmer_name,
            "crop": farm.crop,
            "baselineNDVI": farm.baseline_ndvi,
            "dataPoints": len(history),
            "history": [p.to_dict() for p in history],
        }
    except Exception as e:
        return error_response(e, log, "Error fetching NDVI history")


@router.get("/farms/{farm_id}/ndvi/latest")
def ndvi_latest(farm_id: int, service: MonitoringService = Depends(get_service)):
    try:
        farm = _require_farm(service, farm_id)
        latest = service.ndvi_store.latest(farm_id)
        if latest is None:
            raise NotFoundError("No NDVI data available. Generate NDVI data using POST /api/ndvi/simulate")
        return {
            "success": True,
            "farmId": farm_id,
            "farmerName": farm.farmer_name,
            "latest": latest.to_dict(),
            "health": assess_ndvi_health(latest.ndvi, farm.baseline_ndvi).to_dict(),
        }
    except Exception as e:
        return error_response(e, log, "Error fetching latest NDVI")


@router.get("/ndvi/all")
def ndvi_all(service: MonitoringService = Depends(get_service)):
    try:
        data = []
        for point in service.ndvi_store.all_latest():
            farm = service.farms.get(point.farm_id)
            health = assess_ndvi_health(point.ndvi, farm.baseline_ndvi).to_dict() if farm else None
            data.append({
                **point.to_dict(),
                "farmerName": farm.farmer_name if farm else None,
                "crop": farm.crop if farm else None,
                "location": farm.location if farm else None,
                "health": health,
            })
        return {"success": True, "count": len(data), "data": data}
    except Exception as e:
        return error_response(e, log, "Error fetching all NDVI")


@router.get("/ndvi/stats")
def ndvi_stats(service: MonitoringService = Depends(get_service)):
    try:
        return {"success": True, "stats": service.ndvi_store.stats()}
    except Exception as e:
        return error_response(e, log, "Error fetching NDVI stats")


@router.post("/ndvi/simulate")
def simulate_ndvi(payload: SimulateRequest = None, service: MonitoringService = Depends(get_service)):
    payload = payload or SimulateRequest()
    try:
        farms = service.farms.all()
        if payload.farm_id:
            farms = [_require_farm(service, payload.farm_id)]

        total = service.simulate(farms, payload.days)
        return {
            "success": True,
            "message": f"Generated NDVI data for {len(farms)} farm(s)",
            "farmsProcessed": len(farms),
            "dataPointsGenerated": total,
            "daysPerFarm": payload.days,
        }
    except Exception as e:
        return error_response(e, log, "Error generating NDVI data")


@router.post("/ndvi/disaster")
def inject_disaster(payload: DisasterRequest, service: MonitoringService = Depends(get_service)):
    try:
        if not payload.farm_id:
            raise InvalidInputError("farmId is required")
        event = DisasterEvent(
            type=payload.type,
            start_day=payload.start_day,
            duration=payload.duration,
            severity=payload.severity,
        )
        farm = _require_farm(service, payload.farm_id)

        series = service.inject_disaster(farm, event)
        if series is None:
            raise InvalidInputError(
                "No NDVI data exists for this farm. Generate NDVI data first using POST /api/ndvi/simulate"
            )

        condition = DISASTER_CONDITIONS[event.type]
        return {
            "success": True,
            "message": f"{event.type} disaster injected into farm {farm.id}",
            "disaster": {
                "type": event.type,
                "farmId": farm.id,
                "farmerName": farm.farmer_name,
                "startDay": event.start_day,
                "duration": event.duration,
                "severity": event.severity,
                "affectedDataPoints": sum(1 for p in series if p.weather_condition == condition),
            },
        }
    except Exception as e:
        return error_response(e, log, "Error injecting disaster")


@router.delete("/ndvi/clear")
def clear_ndvi(service: MonitoringService = Depends(get_service)):
    try:
        cleared = service.ndvi_store.clear()
        return {"success": True, "message": "All NDVI data cleared", "clearedCount": cleared}
    except Exception as e:
        return error_response(e, log, "Error clearing NDVI data")
