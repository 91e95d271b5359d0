"""Derive chart series for the current tracking period."""

from typing import Sequence

from watchdrift.core import config, models
from watchdrift.processing import accuracy

logger = config.get_logger()


def get_chart_data(measurements: Sequence[models.Measurement]) -> models.ChartData:
    """Build the drift chart of a watch.

    Each plotted point is the average rate since the baseline at the time of that
    measurement, which is noisier than the fitted rate of calculate_accuracy. The
    fitted rate is overlaid as a horizontal line spanning the plotted points. The
    baseline itself is not plotted.

    Args:
        measurements: All measurements of a watch, in any order.

    Returns:
        The chart data. Points and line are empty when fewer than two measurements
        follow the latest baseline; the baseline is still returned if one exists.
    """
    if len(measurements) < 2:
        return models.ChartData()

    stats = accuracy.calculate_accuracy(measurements)
    baseline, period = accuracy.resolve_current_period(measurements)
    if baseline is None:
        return models.ChartData()

    plotted = [m for m in period if m.device_time > baseline.device_time]
    if len(plotted) < 2:
        logger.debug("Fewer than two measurements after baseline, nothing to plot.")
        return models.ChartData(baseline=baseline)

    points = []
    for measurement in plotted:
        drift = accuracy.drift_from_baseline(measurement, baseline)
        days = drift.elapsed_ms / models.MS_PER_DAY
        points.append(models.ChartPoint(x=days, y=(drift.drift_ms / 1000) / days))

    rate = stats.seconds_per_day or 0
    min_x = min(point.x for point in points)
    max_x = max(point.x for point in points)
    regression_line = models.RegressionLine(
        start=models.ChartPoint(x=min_x, y=rate),
        end=models.ChartPoint(x=max_x, y=rate),
    )

    return models.ChartData(
        points=points, regression_line=regression_line, baseline=baseline
    )
