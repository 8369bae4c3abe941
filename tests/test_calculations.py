import pytest

from backend.calculations import assess_ndvi_health, classify_drop
from backend.errors import InvalidInputError

SEVERITY_RANK = {"healthy": 0, "warning": 1, "critical": 2, "severe": 3}


def test_severe_scenario():
    health = assess_ndvi_health(0.30, 0.75)
    assert health.drop_percentage == 60.0
    assert health.status == "severe"
    assert health.severity == "critical"
    assert health.color == "#ef4444"
    assert health.message == "Severe crop damage detected (60.0% below baseline)"


@pytest.mark.parametrize("current, status, severity", [
    (0.74, "healthy", "low"),
    (0.60, "warning", "medium"),
    (0.45, "critical", "high"),
    (0.20, "severe", "critical"),
])
def test_buckets(current, status, severity):
    health = assess_ndvi_health(current, 0.75)
    assert (health.status, health.severity) == (status, severity)


@pytest.mark.parametrize("drop, status", [
    (-20.0, "healthy"),
    (9.99, "healthy"),
    (10.0, "warning"),
    (24.99, "warning"),
    (25.0, "critical"),
    (49.99, "critical"),
    (50.0, "severe"),
    (100.0, "severe"),
])
def test_bucket_edges(drop, status):
    assert classify_drop(drop) == status


def test_above_baseline_is_healthy():
    health = assess_ndvi_health(0.85, 0.75)
    assert health.status == "healthy"
    assert health.drop_percentage < 0


def test_drop_is_rounded():
    assert assess_ndvi_health(0.5, 0.7).drop_percentage == 28.57


def test_lower_ndvi_never_less_severe():
    previous = -1
    for step in range(100, -1, -1):
        rank = SEVERITY_RANK[assess_ndvi_health(step / 100, 0.72).status]
        assert rank >= previous
        previous = rank


def test_pure():
    assert assess_ndvi_health(0.5, 0.7) == assess_ndvi_health(0.5, 0.7)


@pytest.mark.parametrize("baseline", [0, -0.5, None])
def test_baseline_must_be_positive(baseline):
    with pytest.raises(InvalidInputError):
        assess_ndvi_health(0.5, baseline)
