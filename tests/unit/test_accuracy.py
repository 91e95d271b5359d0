"""Test the accuracy engine."""

import pytest

from watchdrift.core import models
from watchdrift.processing import accuracy

MS_PER_DAY = 86_400_000


@pytest.mark.parametrize("count", [0, 1])
def test_calculate_accuracy_too_few_measurements(make_measurement, count: int) -> None:
    """Test that fewer than two measurements give an unknown result."""
    measurements = [
        make_measurement(f"m{i}", i * MS_PER_DAY, 0, is_baseline=True)
        for i in range(count)
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.seconds_per_day is None
    assert stats.trend == "unknown"
    assert stats.confidence == "low"
    assert stats.elapsed_days == 0
    assert stats.total_drift_ms == 0
    assert stats.measurement_count == count


@pytest.mark.parametrize("count", [2, 6])
def test_calculate_accuracy_without_baseline(make_measurement, count: int) -> None:
    """Test that a list without baseline degrades to an unknown result."""
    measurements = [
        make_measurement(f"m{i}", i * MS_PER_DAY, -1000 * i) for i in range(count)
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats == models.AccuracyStats(measurement_count=count)


def test_calculate_accuracy_latest_measurement_is_baseline(make_measurement) -> None:
    """Test a fresh baseline with nothing after it."""
    measurements = [
        make_measurement("a", 0, 0, is_baseline=True),
        make_measurement("b", MS_PER_DAY, -2000),
        make_measurement("c", 2 * MS_PER_DAY, -4000, is_baseline=True),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.seconds_per_day is None
    assert stats.trend == "unknown"
    assert stats.measurement_count == 3


def test_calculate_accuracy_is_idempotent(gaining_measurements) -> None:
    """Test that repeated calls give identical results and leave the input alone."""
    before = list(gaining_measurements)

    first = accuracy.calculate_accuracy(gaining_measurements)
    second = accuracy.calculate_accuracy(gaining_measurements)

    assert first == second
    assert gaining_measurements == before


def test_calculate_accuracy_sign_convention(make_measurement) -> None:
    """Test that a watch ahead of the reference is reported as gaining."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("fast", MS_PER_DAY, -5000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.total_drift_ms == 5000
    assert stats.seconds_per_day == 5.0
    assert stats.trend == "gaining"


def test_calculate_accuracy_one_day_two_points(make_measurement) -> None:
    """Test the two-point rate over exactly one day."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("next", MS_PER_DAY, -3000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.total_drift_ms == 3000
    assert stats.elapsed_days == 1
    assert stats.seconds_per_day == 3.0
    assert stats.trend == "gaining"
    assert stats.confidence == "medium"
    assert stats.measurement_count == 2


def test_calculate_accuracy_losing(make_measurement) -> None:
    """Test that a watch falling behind is reported as losing."""
    measurements = [
        make_measurement("base", 0, 1000, is_baseline=True),
        make_measurement("slow", 2 * MS_PER_DAY, 21000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.total_drift_ms == -20000
    assert stats.seconds_per_day == -10.0
    assert stats.trend == "losing"


def test_calculate_accuracy_two_point_rate(make_measurement) -> None:
    """Test that two measurements use the plain rate, rounded to one decimal."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("next", int(2.5 * MS_PER_DAY), -7777),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    expected = round((stats.total_drift_ms / stats.elapsed_days) / 1000, 1)
    assert stats.seconds_per_day == expected == 3.1


def test_calculate_accuracy_collinear_regression(make_measurement) -> None:
    """Test that collinear points give the same rate as any pair of them."""
    days = [0, 1.5, 4]
    measurements = [
        make_measurement(f"m{i}", int(day * MS_PER_DAY), int(2400 * day), i == 0)
        for i, day in enumerate(days)
    ]

    regression = accuracy.calculate_accuracy(measurements)
    two_point = accuracy.calculate_accuracy([measurements[0], measurements[2]])

    assert regression.seconds_per_day == two_point.seconds_per_day == -2.4
    assert regression.trend == "losing"


def test_calculate_accuracy_regression_differs_from_end_points(
    make_measurement,
) -> None:
    """Test that three or more points are fitted rather than joined end to end."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("one", MS_PER_DAY, -3000),
        make_measurement("three", 3 * MS_PER_DAY, -6000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.total_drift_ms == 6000
    assert stats.seconds_per_day == 1.9


def test_calculate_accuracy_stable(make_measurement) -> None:
    """Test that small rates are classified as stable."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("next", 10 * MS_PER_DAY, -3000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.seconds_per_day == 0.3
    assert stats.trend == "stable"


def test_calculate_accuracy_too_little_time(make_measurement) -> None:
    """Test that under 0.01 days gives no rate but still reports the drift."""
    measurements = [
        make_measurement("base", 0, 0, is_baseline=True),
        make_measurement("soon", 10 * 60 * 1000, -1000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.seconds_per_day is None
    assert stats.trend == "unknown"
    assert stats.confidence == "low"
    assert stats.elapsed_days == pytest.approx(600_000 / MS_PER_DAY)
    assert stats.total_drift_ms == 1000


def test_calculate_accuracy_high_confidence(gaining_measurements) -> None:
    """Test a week of daily measurements."""
    stats = accuracy.calculate_accuracy(gaining_measurements)

    assert stats.seconds_per_day == 3.0
    assert stats.confidence == "high"
    assert stats.elapsed_days == 7
    assert stats.total_drift_ms == 21000
    assert stats.measurement_count == 8


def test_calculate_accuracy_uses_latest_period_only(make_measurement) -> None:
    """Test that a baseline reset excludes earlier history but not from the count."""
    measurements = [
        make_measurement("old-base", 0, 0, is_baseline=True),
        make_measurement("old", MS_PER_DAY, -50000),
        make_measurement("new-base", 2 * MS_PER_DAY, 0, is_baseline=True),
        make_measurement("new", 4 * MS_PER_DAY, 4000),
    ]

    stats = accuracy.calculate_accuracy(measurements)

    assert stats.seconds_per_day == -2.0
    assert stats.elapsed_days == 2
    assert stats.measurement_count == 4


def test_calculate_accuracy_unsorted_input(gaining_measurements) -> None:
    """Test that input order does not matter."""
    shuffled = gaining_measurements[::-1]

    assert accuracy.calculate_accuracy(shuffled) == accuracy.calculate_accuracy(
        gaining_measurements
    )


def test_sort_by_time_is_stable(make_measurement) -> None:
    """Test that measurements with equal times keep their order."""
    first = make_measurement("first", MS_PER_DAY, 0)
    second = make_measurement("second", MS_PER_DAY, 10)
    earliest = make_measurement("earliest", 0, 0)

    ordered = accuracy.sort_by_time([first, second, earliest])

    assert [m.id for m in ordered] == ["earliest", "first", "second"]


def test_resolve_current_period_baseline_reset(make_measurement) -> None:
    """Test that the latest baseline starts the period."""
    a = make_measurement("A", 0, 0, is_baseline=True)
    b = make_measurement("B", MS_PER_DAY, -1000)
    c = make_measurement("C", 2 * MS_PER_DAY, 0, is_baseline=True)
    d = make_measurement("D", 3 * MS_PER_DAY, -500)

    baseline, period = accuracy.resolve_current_period([d, b, c, a])

    assert baseline == c
    assert period == [c, d]


def test_resolve_current_period_no_baseline(make_measurement) -> None:
    """Test that no baseline gives no period."""
    measurements = [make_measurement("a", 0, 0), make_measurement("b", 1, 0)]

    baseline, period = accuracy.resolve_current_period(measurements)

    assert baseline is None
    assert period == []


def test_find_applicable_baseline(make_measurement) -> None:
    """Test that each measurement is matched with the baseline before it."""
    a = make_measurement("A", 0, 0, is_baseline=True)
    b = make_measurement("B", MS_PER_DAY, -1000)
    c = make_measurement("C", 2 * MS_PER_DAY, 0, is_baseline=True)
    d = make_measurement("D", 3 * MS_PER_DAY, -500)
    measurements = [a, b, c, d]

    assert accuracy.find_applicable_baseline(b, measurements) == a
    assert accuracy.find_applicable_baseline(c, measurements) == c
    assert accuracy.find_applicable_baseline(d, measurements) == c
    assert accuracy.find_applicable_baseline(a, [b, d]) is None


def test_drift_from_baseline(make_measurement) -> None:
    """Test the drift of one measurement against its baseline."""
    baseline = make_measurement("base", 0, 500, is_baseline=True)
    later = make_measurement("later", 2 * MS_PER_DAY, -3500)

    drift = accuracy.drift_from_baseline(later, baseline)

    assert drift.drift_ms == 4000
    assert drift.elapsed_ms == 2 * MS_PER_DAY
    assert drift.seconds_per_day == pytest.approx(2.0)


def test_drift_from_baseline_under_fifteen_minutes(make_measurement) -> None:
    """Test that no rate is given for very short intervals."""
    baseline = make_measurement("base", 0, 0, is_baseline=True)
    later = make_measurement("later", 14 * 60 * 1000, -100)

    drift = accuracy.drift_from_baseline(later, baseline)

    assert drift.drift_ms == 100
    assert drift.seconds_per_day is None


def test_regression_slope_identical_times(make_measurement) -> None:
    """Test that degenerate x values give a zero slope."""
    baseline = make_measurement("base", MS_PER_DAY, 0, is_baseline=True)
    period = [
        baseline,
        make_measurement("a", MS_PER_DAY, -1000),
        make_measurement("b", MS_PER_DAY, -2000),
    ]

    assert accuracy._regression_slope(period, baseline) == 0.0


@pytest.mark.parametrize(
    "elapsed_days, period_count, expected",
    [
        (6.99, 5, "medium"),
        (7.0, 5, "high"),
        (30, 4, "medium"),
        (1, 2, "medium"),
        (0.99, 10, "low"),
    ],
)
def test_classify_confidence(
    elapsed_days: float, period_count: int, expected: str
) -> None:
    """Test the confidence rules and their boundaries."""
    assert accuracy.classify_confidence(elapsed_days, period_count) == expected


@pytest.mark.parametrize(
    "rate, expected",
    [
        (None, "unknown"),
        (0.0, "stable"),
        (0.49, "stable"),
        (-0.49, "stable"),
        (0.5, "gaining"),
        (-0.5, "losing"),
    ],
)
def test_classify_trend(rate, expected: str) -> None:
    """Test the trend thresholds."""
    assert accuracy.classify_trend(rate) == expected


@pytest.mark.parametrize(
    "rate, expected", [(0.25, 0.3), (-0.25, -0.2), (2.94, 2.9), (-0.04, 0.0)]
)
def test_round_rate(rate: float, expected: float) -> None:
    """Test rounding to one decimal with halves rounded up."""
    assert accuracy._round_rate(rate) == expected
