# backend/routers/farms.py
import logging

from fastapi import APIRouter, Depends, Query

from ..errors import NotFoundError, error_response
from ..service import MonitoringService, get_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["Farms"])


def _listing(farms, **extra):
    return {"success": True, "count": len(farms), "data": [f.to_dict() for f in farms], **extra}


@router.get("/farms")
def list_farms(service: MonitoringService = Depends(get_service)):
    try:
        return _listing(service.farms.all())
    except Exception as e:
        return error_response(e, log, "Server Error")


# registered ahead of /farms/{farm_id} so the literal segments win
@router.get("/farms/by-division")
def farms_by_division(
    district: str = None,
    tehsil: str = None,
    village: str = None,
    search: str = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    service: MonitoringService = Depends(get_service),
):
    try:
        result = service.farms.by_division(district, tehsil, village, search, page, limit)
        return {
            "success": True,
            "count": len(result["items"]),
            "total": result["total"],
            "page": result["page"],
            "limit": result["limit"],
            "totalPages": result["totalPages"],
            "data": [f.to_dict() for f in result["items"]],
            "filters": {"district": district, "tehsil": tehsil, "village": village, "search": search},
        }
    except Exception as e:
        return error_response(e, log, "Error fetching farms by division")


@router.get("/farms/location/{location}")
def farms_by_location(location: str, service: MonitoringService = Depends(get_service)):
    try:
        farms = service.farms.by_location(location)
        if not farms:
            raise NotFoundError(f"No farms found in location: {location}")
        return _listing(farms)
    except Exception as e:
        return error_response(e, log, "Server Error")


@router.get("/farms/crop/{crop}")
def farms_by_crop(crop: str, service: MonitoringService = Depends(get_service)):
    try:
        farms = service.farms.by_crop(crop)
        if not farms:
            raise NotFoundError(f"No farms found growing crop: {crop}")
        return _listing(farms)
    except Exception as e:
        return error_response(e, log, "Server Error")


@router.get("/farms/{farm_id}")
def get_farm(farm_id: int, service: MonitoringService = Depends(get_service)):
    try:
        farm = service.farms.get(farm_id)
        if farm is None:
            raise NotFoundError(f"Farm not found with id: {farm_id}")
        return {"success": True, "data": farm.to_dict()}
    except Exception as e:
        return error_response(e, log, "Server Error")



@router.get("/divisions/districts")
def list_districts(service: MonitoringService = Depends(get_service)):
    try:
        districts = service.farms.districts()
        return {"success": True, "count": len(districts), "data": districts}
    except Exception as e:
        return error_response(e, log, "Error fetching districts")


@router.get("/divisions/tehsils")
def list_tehsils(district: str = None, service: MonitoringService = Depends(get_service)):
    try:
        tehsils = service.farms.tehsils(district)
        return {"success": True, "count": len(tehsils), "data": tehsils}
    except Exception as e:
        return error_response(e, log, "Error fetching tehsils")


@router.get("/divisions/villages")
def list_villages(tehsil: str = None, service: MonitoringService = Depends(get_service)):
    try:
        villages = service.farms.villages(tehsil)
        return {"success": True, "count": len(villages), "data": villages}
    except Exception as e:
        return error_response(e, log, "Error fetching villages")


@router.get("/divisions/stats")
def division_stats(service: MonitoringService = Depends(get_service)):
    try:
        return {"success": True, "data": service.farms.division_stats()}
    except Exception as e:
        return error_response(e, log, "Error fetching division stats")
