import pytest

from semitools.analytics import test_time
from semitools.core.exceptions import ValidationError
from semitools.core.models import TestStep, TestProfile


@pytest.fixture
def profile() -> TestProfile:
    return TestProfile(name="Final Test", steps=[
        TestStep(name="Continuity", duration=2.0),
        TestStep(name="Leakage", duration=3.0),
        TestStep(name="Functional", duration=5.0),
    ])


def test_profile_scenario(profile):
    assert test_time.time_per_device(profile) == pytest.approx(10.0)
    total = test_time.total_test_time(100, test_time.time_per_device(profile))
    assert total == pytest.approx(1000.0)
    assert test_time.total_test_time_for_profile(100, profile) == pytest.approx(1000.0)
    assert test_time.time_with_parallel(total, 2) == pytest.approx(500.0)
    assert test_time.throughput_with_parallel(100, total, 2) == pytest.approx(720.0)
    assert test_time.throughput(100, total) == pytest.approx(360.0)


def test_throughput_zero_time_guard():
    assert test_time.throughput(100, 0) == 0
    assert test_time.throughput(100, -5) == 0


@pytest.mark.parametrize("slots", [0, -3])
def test_non_positive_slots_leave_time_unchanged(slots):
    assert test_time.time_with_parallel(1000.0, slots) == 1000.0


def test_project(profile):
    summary = test_time.project(profile, devices=100, slots=2)
    assert summary.total_test_time == pytest.approx(1000.0)
    assert summary.parallel_time == pytest.approx(500.0)
    assert summary.parallel_throughput == pytest.approx(720.0)

    serial_only = test_time.project(profile, devices=100)
    assert serial_only.parallel_time is None


def test_empty_profile_has_zero_time():
    empty = TestProfile(name="Empty")
    assert test_time.total_step_time(empty) == 0
    assert test_time.project(empty, devices=10).throughput == 0


def test_negative_step_duration_rejected():
    with pytest.raises(ValidationError):
        TestStep(name="Bad", duration=-1.0)


@pytest.mark.parametrize("seconds, expected", [
    (12.34, "12.3 sec"),
    (90, "1.5 min"),
    (5400, "1.50 hrs"),
])
def test_format_time(seconds, expected):
    assert test_time.format_time(seconds) == expected


@pytest.mark.parametrize("seconds, expected", [
    (3723, "1:02:03"),
    (125, "2:05 min"),
    (12.5, "12.5 sec"),
])
def test_format_long_time(seconds, expected):
    assert test_time.format_long_time(seconds) == expected
