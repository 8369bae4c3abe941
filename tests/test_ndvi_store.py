from datetime import date, timedelta

from backend.ndvi_generator import NDVIPoint


def points(farm_id, days, today, ndvi=0.6):
    return [
        NDVIPoint(farm_id=farm_id, timestamp=today - timedelta(days=i), ndvi=ndvi)
        for i in range(days, -1, -1)
    ]


def test_store_and_latest(service, today):
    store = service.ndvi_store
    assert store.latest(1) is None

    assert store.store(points(1, 10, today)) == 11
    latest = store.latest(1)
    assert latest.timestamp == today
    assert latest.farm_id == 1


def test_store_sorts_ascending(service, today):
    store = service.ndvi_store
    store.store(list(reversed(points(1, 5, today))))
    stamps = [p.timestamp for p in store.series(1)]
    assert stamps == sorted(stamps)


def test_store_replaces_whole_farm_history(service, today):
    store = service.ndvi_store
    store.store(points(1, 60, today, ndvi=0.7))
    store.store(points(1, 3, today, ndvi=0.4))

    series = store.series(1)
    assert len(series) == 4
    assert {p.ndvi for p in series} == {0.4}


def test_store_leaves_other_farms_alone(service, today):
    store = service.ndvi_store
    store.store(points(1, 5, today))
    store.store(points(2, 5, today))
    store.store(points(1, 2, today))

    assert len(store.series(1)) == 3
    assert len(store.series(2)) == 6


def test_history_window(service, today):
    store = service.ndvi_store
    store.store(points(1, 90, today))

    history = store.history(1, 30)
    assert len(history) == 31
    assert history[0].timestamp == today - timedelta(days=30)
    assert history[-1].timestamp == today
    assert store.history(2, 30) == []


def test_history_relative_to_given_day(service):
    store = service.ndvi_store
    day = date(2025, 9, 30)
    store.store(points(1, 20, day))
    assert len(store.history(1, 5, today=day)) == 6


def test_all_latest_one_point_per_farm(service, today):
    store = service.ndvi_store
    store.store(points(1, 5, today))
    store.store(points(3, 5, today - timedelta(days=2)))

    latest = {p.farm_id: p for p in store.all_latest()}
    assert set(latest) == {1, 3}
    assert latest[1].timestamp == today
    assert latest[3].timestamp == today - timedelta(days=2)


def test_reads_are_copies(service, today):
    store = service.ndvi_store
    store.store(points(1, 2, today, ndvi=0.6))

    point = store.latest(1)
    point.ndvi = 0.25
    assert store.latest(1).ndvi == 0.6


def test_clear_and_stats(service, today):
    store = service.ndvi_store
    assert store.stats()["totalDataPoints"] == 0
    assert store.stats()["dateRange"]["oldest"] is None

    store.store(points(1, 4, today))
    store.store(points(2, 4, today))
    stats = store.stats()
    assert stats["totalDataPoints"] == 10
    assert stats["farmsTracked"] == 2
    assert stats["dateRange"]["newest"] == today.isoformat()
    assert stats["dateRange"]["oldest"] == (today - timedelta(days=4)).isoformat()

    assert store.clear() == 10
    assert store.all_latest() == []


def test_instances_are_isolated(service, today):
    from backend.service import MonitoringService

    service.ndvi_store.store(points(1, 4, today))
    assert MonitoringService().ndvi_store.latest(1) is None
