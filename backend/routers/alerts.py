# backend/routers/alerts.py
import logging

from fastapi import APIRouter, Depends, Query

from ..errors import InvalidInputError, NotFoundError, error_response
from ..schemas import DemoAlertRequest
from ..service import MonitoringService, get_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["Alerts"])


def _as_bad_request(exc):
    return InvalidInputError(str(exc))


@router.get("/alerts")
def list_alerts(
    status: str = None,
    severity: str = None,
    farm_id: int = Query(None, alias="farmId"),
    service: MonitoringService = Depends(get_service),
):
    try:
        filters = {k: v for k, v in {"status": status, "severity": severity, "farmId": farm_id}.items() if v}
        alerts = service.alert_store.query(status=status, severity=severity, farm_id=farm_id or None)
        return {
            "success": True,
            "count": len(alerts),
            "filters": filters,
            "data": [a.to_dict() for a in alerts],
        }
    except Exception as e:
        return error_response(e, log, "Failed to fetch alerts")


@router.get("/alerts/active")
def active_alerts(service: MonitoringService = Depends(get_service)):
    try:
        alerts = service.alert_store.active()
        return {"success": True, "count": len(alerts), "data": [a.to_dict() for a in alerts]}
    except Exception as e:
        return error_response(e, log, "Failed to fetch active alerts")


@router.get("/alerts/farm/{farm_id}")
def farm_alerts(farm_id: int, limit: int = 50, service: MonitoringService = Depends(get_service)):
    try:
        alerts = service.alert_store.for_farm(farm_id, limit if limit > 0 else 50)
        return {
            "success": True,
            "farmId": farm_id,
            "count": len(alerts),
            "data": [a.to_dict() for a in alerts],
        }
    except Exception as e:
        return error_response(e, log, "Failed to fetch farm alerts")


@router.get("/alerts/stats")
def alert_stats(service: MonitoringService = Depends(get_service)):
    try:
        return {"success": True, "stats": service.alert_store.stats()}
    except Exception as e:
        return error_response(e, log, "Failed to fetch alert statistics")


@router.get("/alerts/{alert_id}")
def get_alert(alert_id: str, service: MonitoringService = Depends(get_service)):
    try:
        alert = service.alert_store.get(alert_id)
        if alert is None:
            raise NotFoundError("Alert not found")
        return {"success": True, "data": alert.to_dict()}
    except Exception as e:
        return error_response(e, log, "Failed to fetch alert")


@router.put("/alerts/{alert_id}/acknowledge")
def acknowledge_alert(alert_id: str, service: MonitoringService = Depends(get_service)):
    try:
        alert = service.alert_store.acknowledge(alert_id)
        return {"success": True, "message": "Alert acknowledged", "alert": alert.to_dict()}
    except NotFoundError as e:
        # acknowledge/resolve report unknown ids as a bad request
        return error_response(_as_bad_request(e))
    except Exception as e:
        return error_response(e, log, "Failed to acknowledge alert")


@router.put("/alerts/{alert_id}/resolve")
def resolve_alert(alert_id: str, service: MonitoringService = Depends(get_service)):
    try:
        alert = service.alert_store.resolve(alert_id)
        return {"success": True, "message": "Alert resolved", "alert": alert.to_dict()}
    except NotFoundError as e:
        return error_response(_as_bad_request(e))
    except Exception as e:
        return error_response(e, log, "Failed to resolve alert")


@router.post("/alerts/test")
def create_test_alert(payload: DemoAlertRequest = None, service: MonitoringService = Depends(get_service)):
    payload = payload or DemoAlertRequest()
    try:
        alert = service.monitor.generate_test_alert(payload.farm_id or 1, payload.severity or "critical")
        return {"success": True, "message": "Test alert generated", "alert": alert.to_dict()}
    except Exception as e:
        return error_response(e, log, "Failed to generate test alert")


@router.delete("/alerts/clear")
def clear_alerts(service: MonitoringService = Depends(get_service)):
    try:
        cleared = service.alert_store.clear()
        return {"success": True, "message": f"Cleared {cleared} alerts", "clearedCount": cleared}
    except Exception as e:
        return error_response(e, log, "Failed to clear alerts")


@router.get("/monitoring/status")
def monitoring_status(service: MonitoringService = Depends(get_service)):
    try:
        return {"success": True, "status": service.monitor.get_monitoring_status()}
    except Exception as e:
        return error_response(e, log, "Failed to get monitoring status")


@router.post("/monitoring/trigger")
def trigger_monitoring(service: MonitoringService = Depends(get_service)):
    try:
        results = service.monitor.monitor_all_farms()
        return {"success": True, "message": "Monitoring check completed", "results": results}
    except Exception as e:
        return error_response(e, log, "Monitoring check failed")
