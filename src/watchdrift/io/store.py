"""In-memory store of watches and their measurements."""

from typing import Any, Dict, List, Optional

import pydantic

from watchdrift.core import config, exceptions, models
from watchdrift.io import reference_time
from watchdrift.processing import accuracy

logger = config.get_logger()


class WatchSummary(pydantic.BaseModel):
    """A watch together with the figures shown in a watch list.

    Attributes:
        watch: The watch.
        measurement_count: Number of measurements across all tracking periods.
        latest_offset_ms: Delta of the most recent measurement, None if there is
            none.
        accuracy: Statistics of the current tracking period.
    """

    watch: models.Watch
    measurement_count: int
    latest_offset_ms: Optional[int] = None
    accuracy: models.AccuracyStats


class MeasurementStore:
    """Holds watches and measurements, keyed by id.

    Derived statistics are never stored; they are recomputed from the measurement
    list of a watch whenever asked for.
    """

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._watches: Dict[str, models.Watch] = {}
        self._measurements: Dict[str, models.Measurement] = {}

    def add_watch(self, watch: models.Watch) -> models.Watch:
        """Add a watch, replacing any watch with the same id."""
        self._watches[watch.id] = watch
        logger.debug("Added watch %s.", watch.id)
        return watch

    def get_watch(self, watch_id: str) -> models.Watch:
        """Return the watch with the given id.

        Raises:
            WatchNotFoundError: If the store has no such watch.
        """
        try:
            return self._watches[watch_id]
        except KeyError:
            raise exceptions.WatchNotFoundError(f"Watch {watch_id} not found.")

    def watch_exists(self, watch_id: str) -> bool:
        """Check whether a watch with the given id exists."""
        return watch_id in self._watches

    def list_watches(self) -> List[models.Watch]:
        """All watches, most recently updated first."""
        return sorted(self._watches.values(), key=lambda w: w.updated_at, reverse=True)

    def update_watch(self, watch_id: str, **updates: Any) -> models.Watch:
        """Update fields of a watch and bump its updated_at timestamp.

        Args:
            watch_id: The watch to update.
            **updates: Field names and new values.

        Returns:
            The updated watch.

        Raises:
            WatchNotFoundError: If the store has no such watch.
        """
        watch = self.get_watch(watch_id)
        updated = watch.model_copy(update={**updates, "updated_at": models.now_ms()})
        self._watches[watch_id] = updated
        return updated

    def delete_watch(self, watch_id: str) -> None:
        """Delete a watch and all of its measurements.

        Raises:
            WatchNotFoundError: If the store has no such watch.
        """
        self.get_watch(watch_id)
        del self._watches[watch_id]
        self._measurements = {
            key: m for key, m in self._measurements.items() if m.watch_id != watch_id
        }
        logger.debug("Deleted watch %s.", watch_id)

    def add_measurement(self, measurement: models.Measurement) -> models.Measurement:
        """Add an existing measurement record.

        Raises:
            WatchNotFoundError: If the measurement's watch is not in the store.
        """
        if measurement.watch_id is None:
            raise ValueError("Measurement must reference a watch.")
        self.get_watch(measurement.watch_id)
        self._measurements[measurement.id] = measurement
        return measurement

    def capture_measurement(
        self,
        watch_id: str,
        watch_time: int,
        reference: reference_time.ReferenceTime,
        *,
        is_baseline: bool = False,
    ) -> models.Measurement:
        """Record what the watch showed at a trusted reference time.

        The first measurement of a watch always becomes a baseline.

        Args:
            watch_id: The watch being measured.
            watch_time: Time shown on the watch face, in epoch milliseconds.
            reference: The trusted time at capture.
            is_baseline: Whether to start a new tracking period.

        Returns:
            The stored measurement.

        Raises:
            WatchNotFoundError: If the store has no such watch.
        """
        self.get_watch(watch_id)
        if not self.get_measurements(watch_id):
            is_baseline = True

        measurement = models.Measurement.capture(
            watch_id=watch_id,
            watch_time=watch_time,
            device_time=reference.timestamp,
            time_source=reference.source,
            is_baseline=is_baseline,
        )
        logger.debug(
            "Captured measurement for %s, delta %s ms, baseline %s.",
            watch_id,
            measurement.delta_ms,
            measurement.is_baseline,
        )
        return self.add_measurement(measurement)

    def reset_baseline(
        self,
        watch_id: str,
        watch_time: int,
        reference: reference_time.ReferenceTime,
    ) -> models.Measurement:
        """Start a new tracking period; earlier measurements are kept."""
        return self.capture_measurement(
            watch_id, watch_time, reference, is_baseline=True
        )

    def delete_measurement(self, measurement_id: str) -> None:
        """Delete a measurement.

        Raises:
            MeasurementNotFoundError: If the store has no such measurement.
        """
        if measurement_id not in self._measurements:
            raise exceptions.MeasurementNotFoundError(
                f"Measurement {measurement_id} not found."
            )
        del self._measurements[measurement_id]

    def measurement_exists(self, measurement_id: str) -> bool:
        """Check whether a measurement with the given id exists."""
        return measurement_id in self._measurements

    def get_measurements(self, watch_id: str) -> List[models.Measurement]:
        """Measurements of a watch, oldest first."""
        return accuracy.sort_by_time(
            [m for m in self._measurements.values() if m.watch_id == watch_id]
        )

    def get_latest_measurement(self, watch_id: str) -> Optional[models.Measurement]:
        """The most recent measurement of a watch, None if it has none."""
        measurements = self.get_measurements(watch_id)
        return measurements[-1] if measurements else None

    def summarize(self, watch_id: str) -> WatchSummary:
        """Compute the list-view summary of a watch.

        Raises:
            WatchNotFoundError: If the store has no such watch.
        """
        watch = self.get_watch(watch_id)
        measurements = self.get_measurements(watch_id)
        latest = measurements[-1] if measurements else None
        return WatchSummary(
            watch=watch,
            measurement_count=len(measurements),
            latest_offset_ms=latest.delta_ms if latest else None,
            accuracy=accuracy.calculate_accuracy(measurements),
        )

    def clear(self) -> None:
        """Remove all watches and measurements."""
        self._watches.clear()
        self._measurements.clear()
