"""Python based runner."""

import logging
import pathlib
from typing import Dict, Optional, Sequence, Union

from rich import progress

from watchdrift.core import config, models
from watchdrift.io import store
from watchdrift.io.readers import readers
from watchdrift.io.writers import writers
from watchdrift.processing import accuracy, chart

logger = config.get_logger()


def run(
    input: Union[pathlib.Path, str],
    output: Optional[Union[pathlib.Path, str]] = None,
    watch_id: Optional[str] = None,
    verbosity: int = logging.WARNING,
) -> Dict[str, writers.WatchReport]:
    """Computes the accuracy of every watch in an export file.

    The export file is loaded into a fresh store, then each watch's accuracy
    statistics and chart series are derived from its full measurement list. When an
    output path is given, one row per watch is saved to it, along with a JSON file of
    the chart series.

    Args:
        input: Path to the .json export file to be read.
        output: Path to save the table to, ending in .csv or .parquet.
        watch_id: Only process the watch with this id. All watches if None.
        verbosity: The logging level for the logger.

    Returns:
        The reports of the processed watches, keyed by watch id.

    Raises:
        InvalidFileTypeError: If the input is not a .json file, or the output is not
            .csv or .parquet.
        ImportValidationError: If the input is not a valid export document.
        WatchNotFoundError: If watch_id is not in the export.
    """
    logger.setLevel(verbosity)

    input = pathlib.Path(input)
    output = pathlib.Path(output) if output is not None else None
    if output is not None:
        writers.WatchReport.validate_output(output)

    measurement_store = load_store(input)

    if watch_id is not None:
        watches = [measurement_store.get_watch(watch_id)]
    else:
        watches = measurement_store.list_watches()

    reports = {}
    with progress.Progress(
        progress.SpinnerColumn(),
        progress.TextColumn("[progress.description]{task.description}"),
        progress.BarColumn(),
        progress.TaskProgressColumn(),
        console=None,
    ) as progress_bar:
        task = progress_bar.add_task(
            f"[cyan]Processing watches in {input.name}...", total=len(watches)
        )
        for watch in watches:
            reports[watch.id] = build_report(
                watch, measurement_store.get_measurements(watch.id)
            )
            progress_bar.update(task, advance=1)

    if output is not None and reports:
        writers.save_reports(reports, output)

    logger.info("Processing for %s completed successfully.", input)
    return reports


def load_store(input: pathlib.Path) -> store.MeasurementStore:
    """Read an export file into a new measurement store."""
    measurement_store = store.MeasurementStore()
    readers.import_document(measurement_store, readers.read_export(input), "replace")
    return measurement_store


def build_report(
    watch: models.Watch, measurements: Sequence[models.Measurement]
) -> writers.WatchReport:
    """Derive the statistics and chart series of one watch."""
    stats = accuracy.calculate_accuracy(measurements)
    logger.debug(
        "Watch %s: %s s/day, trend %s, confidence %s.",
        watch.id,
        stats.seconds_per_day,
        stats.trend,
        stats.confidence,
    )
    return writers.WatchReport(
        watch=watch, stats=stats, chart=chart.get_chart_data(measurements)
    )
