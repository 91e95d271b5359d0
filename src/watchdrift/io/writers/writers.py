"""Module containing the output classes for writing data to files."""

import datetime
import json
import pathlib
from typing import Dict, Union

import polars as pl
import pydantic

from watchdrift.core import config, exceptions, models
from watchdrift.io import store
from watchdrift.io.readers import readers
from watchdrift.processing import formatting

VALID_FILE_TYPES = (".csv", ".parquet")

logger = config.get_logger()


class WatchReport(pydantic.BaseModel):
    """Derived accuracy of a single watch, ready to be saved."""

    watch: models.Watch
    stats: models.AccuracyStats
    chart: models.ChartData

    def to_data_frame(self) -> pl.DataFrame:
        """One-row table of the watch and its statistics."""
        return pl.DataFrame(
            {
                "watch_id": [self.watch.id],
                "name": [self.watch.name],
                "brand": [self.watch.brand],
                "model": [self.watch.model],
                "movement_type": [self.watch.movement_type.value],
                "seconds_per_day": [self.stats.seconds_per_day],
                "formatted_accuracy": [
                    formatting.format_accuracy(self.stats.seconds_per_day)
                ],
                "magnitude": [formatting.classify_magnitude(self.stats.seconds_per_day)],
                "trend": [self.stats.trend],
                "confidence": [self.stats.confidence],
                "elapsed_days": [float(self.stats.elapsed_days)],
                "total_drift_ms": [float(self.stats.total_drift_ms)],
                "measurement_count": [self.stats.measurement_count],
            },
            schema_overrides={
                "brand": pl.String,
                "model": pl.String,
                "seconds_per_day": pl.Float64,
            },
        )

    def save_results(self, output: pathlib.Path) -> None:
        """Save this report as a csv or parquet file.

        Args:
            output: The path and file name of the data to be saved, as either a csv or
                parquet file.
        """
        save_reports({self.watch.id: self}, output)

    @classmethod
    def validate_output(cls, output: pathlib.Path) -> None:
        """Validates that the output path is a valid format.

        Args:
            output: the name of the file to be saved, and the directory it will
                be saved in. Must be a .csv or .parquet file.

        Raises:
            InvalidFileTypeError:If the output file path ends with any extension other
                    than csv or parquet.
        """
        if output.suffix not in VALID_FILE_TYPES:
            raise exceptions.InvalidFileTypeError(
                f"The extension: {output.suffix} is not supported. "
                "Please save the file as .csv or .parquet",
            )


def save_reports(reports: Dict[str, WatchReport], output: pathlib.Path) -> None:
    """Save reports as one table, with the chart series in a JSON sidecar.

    Args:
        reports: Reports keyed by watch id.
        output: The path of the table, ending in .csv or .parquet. The chart series
            are written next to it with a .json extension.
    """
    logger.debug("Saving results.")
    WatchReport.validate_output(output=output)
    output.parent.mkdir(parents=True, exist_ok=True)

    results_dataframe = pl.concat(
        [report.to_data_frame() for report in reports.values()]
    )

    if output.suffix == ".csv":
        results_dataframe.write_csv(output, separator=",")
    elif output.suffix == ".parquet":
        results_dataframe.write_parquet(output)

    logger.info("Results saved in: %s", output)

    save_charts_as_json(reports, output)


def save_charts_as_json(
    reports: Dict[str, WatchReport], output_path: pathlib.Path
) -> None:
    """Save the chart series of each watch as a JSON file.

    Args:
        reports: Reports keyed by watch id.
        output_path: Path where the table was saved. The JSON file will use the
            same name but with .json extension.
    """
    chart_data = {
        "processing_time": datetime.datetime.now().isoformat(timespec="seconds"),
        "watchdrift_version": config.get_version(),
        "charts": {
            watch_id: report.chart.model_dump(mode="json", by_alias=True)
            for watch_id, report in reports.items()
        },
    }

    chart_path = output_path.with_suffix(".json")

    with open(chart_path, "w") as f:
        json.dump(chart_data, f, indent=4)

    logger.debug("Charts saved in: %s", chart_path)


def export_all_data(measurement_store: store.MeasurementStore) -> str:
    """Serialise every watch and its measurements as an export document.

    Derived statistics are not exported; they are recomputed on import.

    Args:
        measurement_store: The store to export.

    Returns:
        The export document as indented JSON.
    """
    watches = []
    for watch in measurement_store.list_watches():
        exported = watch.model_dump(mode="json", by_alias=True)
        exported["measurements"] = [
            measurement.model_dump(mode="json", by_alias=True, exclude={"watch_id"})
            for measurement in measurement_store.get_measurements(watch.id)
        ]
        watches.append(exported)

    export = {
        "version": readers.CURRENT_VERSION,
        "exportedAt": models.now_ms(),
        "data": {"watches": watches},
    }
    return json.dumps(export, indent=2)


def save_export(
    measurement_store: store.MeasurementStore, output: Union[pathlib.Path, str]
) -> pathlib.Path:
    """Write the export document of a store to a .json file.

    Raises:
        InvalidFileTypeError: If the output does not end in .json.
    """
    output = pathlib.Path(output)
    if output.suffix != ".json":
        raise exceptions.InvalidFileTypeError(
            f"The extension: {output.suffix} is not supported. "
            "Please save the export as .json",
        )
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(export_all_data(measurement_store), encoding="utf-8")
    logger.info("Export saved in: %s", output)
    return output
