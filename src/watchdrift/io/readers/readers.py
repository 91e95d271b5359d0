"""Functions to read exported watch data."""

import json
import math
import pathlib
from typing import Any, Literal, Union

import pydantic

from watchdrift.core import config, exceptions, models
from watchdrift.io import store

logger = config.get_logger()

CURRENT_VERSION = 1
VALID_MOVEMENT_TYPES = tuple(movement.value for movement in models.MovementType)
VALID_TIME_SOURCES = tuple(source.value for source in models.TimeSource)

ImportMode = Literal["merge", "replace"]


class ImportResult(pydantic.BaseModel):
    """Counters reported after importing an export document."""

    watches_imported: int = 0
    watches_skipped: int = 0
    measurements_imported: int = 0
    measurements_skipped: int = 0


def read_export(file_name: Union[pathlib.Path, str]) -> dict:
    """Read and validate an export file.

    Args:
        file_name: Path to a .json export file.

    Returns:
        The validated export document.

    Raises:
        InvalidFileTypeError: If the file is not a .json file.
        ImportValidationError: If the contents are not UTF-8 or not a valid export
            document.
    """
    file_name = pathlib.Path(file_name)
    if file_name.suffix != ".json":
        raise exceptions.InvalidFileTypeError(
            f"File type {file_name.suffix} is not supported."
        )
    try:
        text = file_name.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise exceptions.ImportValidationError("Invalid file encoding")
    return parse_export(text)


def parse_export(text: str) -> dict:
    """Parse and validate the text of an export document.

    Raises:
        ImportValidationError: If the text is not JSON or not a valid document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        raise exceptions.ImportValidationError("Invalid JSON format")

    validate_import_data(data)
    return data


def validate_import_data(data: Any) -> None:
    """Check the structure of an export document.

    Args:
        data: The decoded JSON document.

    Raises:
        ImportValidationError: Describing the first problem found.
    """
    if not data or not isinstance(data, dict):
        raise exceptions.ImportValidationError("Invalid JSON data")

    version = data.get("version")
    if not _is_number(version):
        raise exceptions.ImportValidationError("Missing or invalid version field")
    if version > CURRENT_VERSION:
        raise exceptions.ImportValidationError(
            f"Unsupported version: {version}. Maximum supported: {CURRENT_VERSION}"
        )

    if not _is_number(data.get("exportedAt")):
        raise exceptions.ImportValidationError("Missing or invalid exportedAt field")

    content = data.get("data")
    if not content or not isinstance(content, dict):
        raise exceptions.ImportValidationError("Missing or invalid data field")

    watches = content.get("watches")
    if not isinstance(watches, list):
        raise exceptions.ImportValidationError("Missing or invalid watches array")

    for i, watch in enumerate(watches):
        _validate_watch(watch, i)
        if not isinstance(watch.get("measurements"), list):
            raise exceptions.ImportValidationError(
                f"Watch {i}: Missing or invalid measurements array"
            )
        for j, measurement in enumerate(watch["measurements"]):
            _validate_measurement(measurement, i, j)


def import_data(
    measurement_store: store.MeasurementStore, text: str, mode: ImportMode
) -> ImportResult:
    """Load an export document into a store.

    In 'merge' mode, watches and measurements whose ids already exist are skipped.
    In 'replace' mode the store is cleared first.

    Args:
        measurement_store: The store to import into.
        text: The export document.
        mode: Either 'merge' or 'replace'.

    Returns:
        How many watches and measurements were imported or skipped.

    Raises:
        ImportValidationError: If the document is invalid. The store is left
            untouched in that case.
        ValueError: If the mode is unknown.
    """
    return import_document(measurement_store, parse_export(text), mode)


def import_document(
    measurement_store: store.MeasurementStore, data: dict, mode: ImportMode
) -> ImportResult:
    """Load an already validated export document into a store.

    See import_data for the meaning of the modes.
    """
    if mode not in ("merge", "replace"):
        raise ValueError(f"Invalid import mode: {mode}. Choose 'merge' or 'replace'.")

    try:
        records = [
            (
                models.Watch.model_validate(
                    {key: value for key, value in watch.items() if key != "measurements"}
                ),
                [
                    models.Measurement.model_validate({**m, "watchId": watch["id"]})
                    for m in watch["measurements"]
                ],
            )
            for watch in data["data"]["watches"]
        ]
    except pydantic.ValidationError as e:
        raise exceptions.ImportValidationError(f"Invalid record: {e}")

    if mode == "replace":
        measurement_store.clear()

    result = ImportResult()
    for watch, measurements in records:
        if mode == "merge" and measurement_store.watch_exists(watch.id):
            result.watches_skipped += 1
        else:
            measurement_store.add_watch(watch)
            result.watches_imported += 1

        for measurement in measurements:
            if mode == "merge" and measurement_store.measurement_exists(
                measurement.id
            ):
                result.measurements_skipped += 1
                continue
            measurement_store.add_measurement(measurement)
            result.measurements_imported += 1

    logger.info(
        "Imported %s watches and %s measurements.",
        result.watches_imported,
        result.measurements_imported,
    )
    return result


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _validate_watch(watch: Any, index: int) -> None:
    """Check the fields of one exported watch."""
    prefix = f"Watch {index}"
    if not watch or not isinstance(watch, dict):
        raise exceptions.ImportValidationError(f"{prefix}: Invalid watch object")

    for field in ("id", "name"):
        if not isinstance(watch.get(field), str) or not watch[field]:
            raise exceptions.ImportValidationError(
                f"{prefix}: Missing or invalid {field}"
            )

    if watch.get("movementType") not in VALID_MOVEMENT_TYPES:
        raise exceptions.ImportValidationError(
            f"{prefix}: Invalid movementType: {watch.get('movementType')}"
        )

    for field in ("createdAt", "updatedAt"):
        if not _is_number(watch.get(field)):
            raise exceptions.ImportValidationError(
                f"{prefix}: Missing or invalid {field}"
            )


def _validate_measurement(measurement: Any, watch_index: int, index: int) -> None:
    """Check the fields of one exported measurement."""
    prefix = f"Watch {watch_index}, Measurement {index}"
    if not measurement or not isinstance(measurement, dict):
        raise exceptions.ImportValidationError(f"{prefix}: Invalid measurement object")

    if not isinstance(measurement.get("id"), str) or not measurement["id"]:
        raise exceptions.ImportValidationError(f"{prefix}: Missing or invalid id")

    for field in ("watchTime", "deviceTime", "deltaMs"):
        if not _is_number(measurement.get(field)):
            raise exceptions.ImportValidationError(
                f"{prefix}: Missing or invalid {field}"
            )

    if measurement.get("timeSource") not in VALID_TIME_SOURCES:
        raise exceptions.ImportValidationError(
            f"{prefix}: Invalid timeSource: {measurement.get('timeSource')}"
        )

    if not isinstance(measurement.get("isBaseline"), bool):
        raise exceptions.ImportValidationError(
            f"{prefix}: Missing or invalid isBaseline"
        )

    if not _is_number(measurement.get("createdAt")):
        raise exceptions.ImportValidationError(
            f"{prefix}: Missing or invalid createdAt"
        )
