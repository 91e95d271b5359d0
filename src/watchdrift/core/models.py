"""Internal data model."""

import enum
import time
import uuid
from typing import List, Literal, Optional

import pydantic
from pydantic import BaseModel, alias_generators, field_validator

MS_PER_DAY = 1000 * 60 * 60 * 24

Trend = Literal["gaining", "losing", "stable", "unknown"]
Confidence = Literal["high", "medium", "low"]


def now_ms() -> int:
    """Current wall clock time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


def generate_id() -> str:
    """Generate a new unique record identifier."""
    return uuid.uuid4().hex


class TimeSource(str, enum.Enum):
    """Provenance of a trusted timestamp."""

    ntp = "ntp"
    device = "device"


class MovementType(str, enum.Enum):
    """Kind of movement inside a watch."""

    automatic = "automatic"
    manual = "manual"
    quartz = "quartz"


class _CamelModel(BaseModel):
    """Base model serialising to camelCase keys, accepting either spelling."""

    model_config = pydantic.ConfigDict(
        alias_generator=alias_generators.to_camel,
        populate_by_name=True,
    )


class Measurement(_CamelModel):
    """A single capture of the watch face against a trusted reference time.

    Measurements are never mutated once created. `delta_ms` is the reference time
    minus the watch time: positive when the watch is behind (slow), negative when it
    is ahead (fast).
    """

    model_config = pydantic.ConfigDict(frozen=True)

    id: str
    watch_id: Optional[str] = None
    watch_time: int
    device_time: int
    delta_ms: int
    time_source: TimeSource
    is_baseline: bool = False
    created_at: int

    @classmethod
    def capture(
        cls,
        watch_id: str,
        watch_time: int,
        device_time: int,
        time_source: TimeSource,
        *,
        is_baseline: bool = False,
    ) -> "Measurement":
        """Creates a new measurement from a capture event.

        Args:
            watch_id: The watch the measurement belongs to.
            watch_time: Time shown on the watch face, in epoch milliseconds.
            device_time: Trusted reference time at capture, in epoch milliseconds.
            time_source: Where the reference time came from.
            is_baseline: Whether this capture starts a new tracking period.

        Returns:
            The new measurement, with a fresh id and delta computed from the two
            timestamps.
        """
        return cls(
            id=generate_id(),
            watch_id=watch_id,
            watch_time=watch_time,
            device_time=device_time,
            delta_ms=device_time - watch_time,
            time_source=time_source,
            is_baseline=is_baseline,
            created_at=now_ms(),
        )

    @field_validator("id")
    def validate_id(cls, v: str) -> str:
        """Validate that the id is not empty.

        Args:
            cls: The class.
            v: The id to validate.

        Returns:
            v: The id if it is not empty.

        Raises:
            ValueError: If the id is an empty string.
        """
        if not v:
            raise ValueError("id must not be empty")
        return v


class Watch(_CamelModel):
    """A watch whose accuracy is being tracked."""

    id: str
    name: str
    brand: Optional[str] = None
    model: Optional[str] = None
    movement_type: MovementType
    created_at: int
    updated_at: int

    @classmethod
    def create(
        cls,
        name: str,
        movement_type: MovementType,
        brand: Optional[str] = None,
        model: Optional[str] = None,
    ) -> "Watch":
        """Creates a new watch with a fresh id and timestamps."""
        timestamp = now_ms()
        return cls(
            id=generate_id(),
            name=name,
            brand=brand,
            model=model,
            movement_type=movement_type,
            created_at=timestamp,
            updated_at=timestamp,
        )

    @field_validator("id", "name")
    def validate_not_empty(cls, v: str) -> str:
        """Validate that identifying strings are not empty.

        Args:
            cls: The class.
            v: The string to validate.

        Returns:
            v: The string if it is not empty.

        Raises:
            ValueError: If the string is empty.
        """
        if not v:
            raise ValueError("must not be empty")
        return v


class AccuracyStats(_CamelModel):
    """Drift statistics derived from the current tracking period.

    Attributes:
        seconds_per_day: Drift rate, positive when the watch gains time. None when
            there is not enough signal to estimate it.
        trend: Qualitative direction of the drift.
        confidence: Coarse confidence in the estimate.
        elapsed_days: Days between the baseline and the latest measurement.
        total_drift_ms: Drift accumulated since the baseline, positive when gaining.
        measurement_count: Number of measurements given, across all periods.
    """

    seconds_per_day: Optional[float] = None
    trend: Trend = "unknown"
    confidence: Confidence = "low"
    elapsed_days: float = 0
    total_drift_ms: float = 0
    measurement_count: int = 0


class ChartPoint(_CamelModel):
    """A point of the drift chart, x in days since baseline, y in seconds/day."""

    x: float
    y: float


class RegressionLine(_CamelModel):
    """Horizontal reference segment at the headline drift rate."""

    start: ChartPoint
    end: ChartPoint


class ChartData(_CamelModel):
    """Chart-ready series for the current tracking period."""

    points: List[ChartPoint] = []
    regression_line: Optional[RegressionLine] = None
    baseline: Optional[Measurement] = None
