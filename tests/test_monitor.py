import asyncio
from datetime import date

import pytest

from backend.errors import InvalidInputError, NotFoundError
from backend.monitor import MonitorScheduler, alert_message
from backend.calculations import assess_ndvi_health
from backend.ndvi_generator import NDVIPoint


def reading(farm_id, ndvi, condition="normal"):
    return NDVIPoint(farm_id=farm_id, timestamp=date.today(), ndvi=ndvi, weather_condition=condition)


def set_latest(service, farm_id, ndvi, condition="normal"):
    service.ndvi_store.store([reading(farm_id, ndvi, condition)])


def test_no_reading_is_noop(service, farm):
    assert service.monitor.check_farm_health(farm, None) is None
    assert service.alert_store.count() == 0


def test_severe_reading_opens_critical_alert(service, farm):
    alert = service.monitor.check_farm_health(farm, reading(1, 0.30, "flood"))

    assert alert is not None
    assert alert.severity == "critical"
    assert alert.drop_percentage == 60.0
    assert alert.farmer_name == "rajaram mane"
    assert alert.estimated_cause == "flood"
    assert alert.details["healthStatus"] == "severe"
    assert alert.details["weatherCondition"] == "flood"
    assert alert.message.startswith("SEVERE ALERT: rajaram mane's Soybean (JS 335 variety)")
    assert "60.0% NDVI drop" in alert.message


@pytest.mark.parametrize("ndvi, severity", [(0.60, "medium"), (0.45, "high"), (0.30, "critical")])
def test_severity_follows_health_status(service, farm, ndvi, severity):
    assert service.monitor.check_farm_health(farm, reading(1, ndvi)).severity == severity


def test_normal_weather_has_no_estimated_cause(service, farm):
    assert service.monitor.check_farm_health(farm, reading(1, 0.45)).estimated_cause is None


def test_repeat_reading_is_not_a_new_alert(service, farm):
    first = service.monitor.check_farm_health(farm, reading(1, 0.30))
    assert service.monitor.check_farm_health(farm, reading(1, 0.28)) is None

    assert service.alert_store.count() == 1
    assert service.alert_store.get(first.id).current_ndvi == 0.28


def test_healthy_reading_auto_resolves(service, farm):
    service.monitor.check_farm_health(farm, reading(1, 0.30))
    service.monitor.check_farm_health(farm, reading(1, 0.60))

    assert service.monitor.check_farm_health(farm, reading(1, 0.74)) is None
    assert service.alert_store.active() == []
    assert {a.status for a in service.alert_store.query()} == {"resolved"}


def test_alert_message_per_status(farm):
    assert alert_message(farm, assess_ndvi_health(0.60, 0.75)).startswith("WARNING:")
    assert alert_message(farm, assess_ndvi_health(0.45, 0.75)).startswith("CRITICAL:")
    assert "Crop health issue" in alert_message(farm, assess_ndvi_health(0.75, 0.75))


def test_monitor_all_farms(service):
    set_latest(service, 1, 0.30)
    set_latest(service, 2, 0.71)

    results = service.monitor.monitor_all_farms()

    assert results["farmsChecked"] == 2
    assert results["alertsGenerated"] == 1
    assert results["errors"] == []
    assert results["newAlerts"][0]["farmId"] == 1
    assert results["newAlerts"][0]["severity"] == "critical"

    again = service.monitor.monitor_all_farms()
    assert again["alertsGenerated"] == 0
    assert service.alert_store.count() == 1


def test_sweep_counts_auto_resolved(service):
    set_latest(service, 1, 0.30)
    service.monitor.monitor_all_farms()
    set_latest(service, 1, 0.74)

    results = service.monitor.monitor_all_farms()
    assert results["alertsResolved"] == 1
    assert service.alert_store.active() == []


def test_one_failing_farm_does_not_stop_sweep(service, monkeypatch):
    set_latest(service, 1, 0.30)
    set_latest(service, 3, 0.30)
    real_latest = service.ndvi_store.latest

    def latest(farm_id):
        if farm_id == 2:
            raise RuntimeError("corrupt reading")
        return real_latest(farm_id)

    monkeypatch.setattr(service.ndvi_store, "latest", latest)

    results = service.monitor.monitor_all_farms()
    assert results["farmsChecked"] == 2
    assert results["alertsGenerated"] == 2
    assert results["errors"] == [{"farmId": 2, "farmerName": "sarjerao mane", "error": "corrupt reading"}]


def test_monitoring_status(service):
    set_latest(service, 1, 0.74)    # healthy
    set_latest(service, 2, 0.60)    # warning
    set_latest(service, 3, 0.30)    # severe
    service.monitor.monitor_all_farms()

    status = service.monitor.get_monitoring_status()
    assert status["totalFarms"] == 4
    assert status["farmsWithData"] == 3
    assert status["activeAlerts"] == 2
    assert status["farmHealthDistribution"] == {
        "healthy": 1, "warning": 1, "critical": 0, "severe": 1, "noData": 1,
    }


def test_generate_test_alert(service):
    alert = service.monitor.generate_test_alert(2, "high")
    assert alert.farm_id == 2
    assert alert.severity == "high"
    assert alert.estimated_cause == "test_scenario"
    assert alert.details["isTest"] is True

    with pytest.raises(NotFoundError):
        service.monitor.generate_test_alert(999)
    with pytest.raises(InvalidInputError):
        service.monitor.generate_test_alert(1, "extreme")


class _FailingMonitor:
    calls = 0

    def monitor_all_farms(self):
        self.calls += 1
        raise RuntimeError("boom")


def test_scheduler_ticks_until_stopped(service):
    set_latest(service, 1, 0.30)

    async def scenario():
        scheduler = MonitorScheduler(service.monitor, interval_seconds=0.01)
        scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.1)
        await scheduler.stop()
        return scheduler

    scheduler = asyncio.run(scenario())
    assert scheduler.ticks >= 1
    assert not scheduler.running
    assert service.alert_store.count() == 1


def test_scheduler_survives_failing_sweep():
    monitor = _FailingMonitor()

    async def scenario():
        scheduler = MonitorScheduler(monitor, interval_seconds=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()
        return scheduler

    scheduler = asyncio.run(scenario())
    assert monitor.calls >= 2
    assert scheduler.ticks == monitor.calls


def test_scheduler_tick_runs_sweep_synchronously(service):
    set_latest(service, 1, 0.30)
    MonitorScheduler(service.monitor, interval_seconds=300).tick()
    assert service.alert_store.count() == 1
