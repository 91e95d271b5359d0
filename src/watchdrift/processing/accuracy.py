"""Estimate watch drift from measurements anchored to a baseline."""

import dataclasses
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from watchdrift.core import config, models

logger = config.get_logger()

MIN_ELAPSED_DAYS = 0.01
MIN_RATE_ELAPSED_MS = 15 * 60 * 1000
MIN_REGRESSION_POINTS = 3
STABLE_THRESHOLD = 0.5
HIGH_CONFIDENCE_DAYS = 7
HIGH_CONFIDENCE_COUNT = 5
MEDIUM_CONFIDENCE_DAYS = 1
MEDIUM_CONFIDENCE_COUNT = 2


@dataclasses.dataclass
class DriftFromBaseline:
    """Drift of a single measurement relative to its baseline.

    Attributes:
        drift_ms: Accumulated drift, positive when the watch is gaining time.
        elapsed_ms: Reference time elapsed since the baseline.
        seconds_per_day: Average rate over the elapsed time, None when less than
            fifteen minutes have elapsed.
    """

    drift_ms: float
    elapsed_ms: float
    seconds_per_day: Optional[float]


def sort_by_time(
    measurements: Sequence[models.Measurement],
) -> List[models.Measurement]:
    """Sort measurements by reference time, keeping input order on ties."""
    return sorted(measurements, key=lambda m: m.device_time)


def resolve_current_period(
    measurements: Sequence[models.Measurement],
) -> Tuple[Optional[models.Measurement], List[models.Measurement]]:
    """Find the latest baseline and the measurements of its tracking period.

    Older baselines and everything before the latest one remain untouched in the
    input, they are only excluded from the returned period.

    Args:
        measurements: Measurements of a single watch, in any order.

    Returns:
        A tuple of the latest baseline (None if there is no baseline at all) and the
        measurements taken at or after it, baseline included, sorted by time.
    """
    ordered = sort_by_time(measurements)
    baselines = [m for m in ordered if m.is_baseline]
    if not baselines:
        return None, []

    baseline = baselines[-1]
    period = [m for m in ordered if m.device_time >= baseline.device_time]
    return baseline, period


def find_applicable_baseline(
    measurement: models.Measurement,
    measurements: Sequence[models.Measurement],
) -> Optional[models.Measurement]:
    """Return the latest baseline taken at or before the given measurement."""
    candidates = [
        m
        for m in sort_by_time(measurements)
        if m.is_baseline and m.device_time <= measurement.device_time
    ]
    return candidates[-1] if candidates else None


def drift_from_baseline(
    measurement: models.Measurement, baseline: models.Measurement
) -> DriftFromBaseline:
    """Compute the drift of one measurement relative to a baseline.

    Args:
        measurement: The measurement to evaluate.
        baseline: The baseline it is compared against.

    Returns:
        The drift, elapsed time and average rate in seconds/day.
    """
    drift_ms = _drift_ms(measurement, baseline)
    elapsed_ms = measurement.device_time - baseline.device_time

    if elapsed_ms < MIN_RATE_ELAPSED_MS:
        return DriftFromBaseline(drift_ms, elapsed_ms, None)

    seconds_per_day = (drift_ms / elapsed_ms) * models.MS_PER_DAY / 1000
    return DriftFromBaseline(drift_ms, elapsed_ms, seconds_per_day)


def calculate_accuracy(
    measurements: Sequence[models.Measurement],
) -> models.AccuracyStats:
    """Derive drift rate, trend and confidence for a watch.

    Only the current tracking period (latest baseline onward) is used. Three or more
    measurements in the period are fitted with a least-squares line, two are joined
    directly.

    Args:
        measurements: All measurements of a watch, in any order.

    Returns:
        The accuracy statistics. Inputs without enough signal give a rate of None,
        an 'unknown' trend and 'low' confidence.
    """
    measurement_count = len(measurements)
    unknown = models.AccuracyStats(measurement_count=measurement_count)

    if measurement_count < 2:
        return unknown

    baseline, period = resolve_current_period(measurements)
    if baseline is None or len(period) < 2:
        logger.debug("No tracking period with at least two measurements.")
        return unknown

    last = period[-1]
    elapsed_days = (last.device_time - baseline.device_time) / models.MS_PER_DAY
    total_drift_ms = _drift_ms(last, baseline)

    if elapsed_days < MIN_ELAPSED_DAYS:
        logger.debug("Only %.4f days elapsed since baseline.", elapsed_days)
        return models.AccuracyStats(
            elapsed_days=elapsed_days,
            total_drift_ms=total_drift_ms,
            measurement_count=measurement_count,
        )

    if len(period) >= MIN_REGRESSION_POINTS:
        seconds_per_day = _regression_slope(period, baseline)
    else:
        seconds_per_day = (total_drift_ms / elapsed_days) / 1000

    return models.AccuracyStats(
        seconds_per_day=_round_rate(seconds_per_day),
        trend=classify_trend(seconds_per_day),
        confidence=classify_confidence(elapsed_days, len(period)),
        elapsed_days=elapsed_days,
        total_drift_ms=total_drift_ms,
        measurement_count=measurement_count,
    )


def classify_trend(seconds_per_day: Optional[float]) -> models.Trend:
    """Classify a drift rate as stable, gaining or losing."""
    if seconds_per_day is None:
        return "unknown"
    if abs(seconds_per_day) < STABLE_THRESHOLD:
        return "stable"
    if seconds_per_day > 0:
        return "gaining"
    return "losing"


def classify_confidence(elapsed_days: float, period_count: int) -> models.Confidence:
    """Coarse confidence from the tracked duration and number of measurements.

    Args:
        elapsed_days: Days between the baseline and the latest measurement.
        period_count: Number of measurements in the tracking period, baseline
            included.

    Returns:
        'high', 'medium' or 'low'. The first matching rule wins.
    """
    if elapsed_days >= HIGH_CONFIDENCE_DAYS and period_count >= HIGH_CONFIDENCE_COUNT:
        return "high"
    if (
        elapsed_days >= MEDIUM_CONFIDENCE_DAYS
        and period_count >= MEDIUM_CONFIDENCE_COUNT
    ):
        return "medium"
    return "low"


def _drift_ms(measurement: models.Measurement, baseline: models.Measurement) -> float:
    # Negated so that a positive drift means the watch runs fast.
    return -(measurement.delta_ms - baseline.delta_ms)


def _regression_slope(
    period: Sequence[models.Measurement], baseline: models.Measurement
) -> float:
    """Least-squares slope of drift (seconds) against days since baseline.

    Args:
        period: The measurements to fit, baseline included.
        baseline: The baseline of the period.

    Returns:
        The slope in seconds/day. Zero if all x values coincide.
    """
    x = np.array(
        [(m.device_time - baseline.device_time) / models.MS_PER_DAY for m in period],
        dtype=float,
    )
    y = np.array([_drift_ms(m, baseline) / 1000 for m in period], dtype=float)

    n = x.size
    denominator = n * np.sum(x * x) - np.sum(x) ** 2
    if np.ptp(x) == 0 or denominator == 0:
        return 0.0

    slope = (n * np.sum(x * y) - np.sum(x) * np.sum(y)) / denominator
    return float(slope)


def _round_rate(seconds_per_day: float) -> float:
    """Round to one decimal, halves towards positive infinity."""
    return math.floor(seconds_per_day * 10 + 0.5) / 10
