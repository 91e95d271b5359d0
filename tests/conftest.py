"""Fixtures used by pytest."""

import json
import pathlib
from typing import Callable

import pytest

from watchdrift.core import models

MS_PER_DAY = 86_400_000
WATCH_ID = "watch-1"

MeasurementFactory = Callable[..., models.Measurement]


def build_measurement(
    measurement_id: str,
    device_time: int,
    delta_ms: int,
    is_baseline: bool = False,
    watch_id: str = WATCH_ID,
) -> models.Measurement:
    """Builds a measurement whose watch time agrees with its delta."""
    return models.Measurement(
        id=measurement_id,
        watch_id=watch_id,
        watch_time=device_time - delta_ms,
        device_time=device_time,
        delta_ms=delta_ms,
        time_source=models.TimeSource.ntp,
        is_baseline=is_baseline,
        created_at=device_time,
    )


@pytest.fixture
def make_measurement() -> MeasurementFactory:
    """Factory fixture for measurements of a single watch."""
    return build_measurement


@pytest.fixture
def gaining_measurements() -> list[models.Measurement]:
    """A watch gaining 3 s/day over a week, measured daily after its baseline."""
    return [
        build_measurement(f"m{day}", day * MS_PER_DAY, -3000 * day, is_baseline=day == 0)
        for day in range(8)
    ]


@pytest.fixture
def sample_export() -> dict:
    """An export document with one tracked watch and one without measurements."""
    return {
        "version": 1,
        "exportedAt": 1_700_000_000_000,
        "data": {
            "watches": [
                {
                    "id": WATCH_ID,
                    "name": "Seamaster",
                    "brand": "Omega",
                    "model": "300M",
                    "movementType": "automatic",
                    "createdAt": 1_600_000_000_000,
                    "updatedAt": 1_600_000_000_000,
                    "measurements": [
                        {
                            "id": "m0",
                            "watchTime": 1_600_000_000_000,
                            "deviceTime": 1_600_000_000_000,
                            "deltaMs": 0,
                            "timeSource": "ntp",
                            "isBaseline": True,
                            "createdAt": 1_600_000_000_000,
                        },
                        {
                            "id": "m1",
                            "watchTime": 1_600_000_000_000 + MS_PER_DAY + 3000,
                            "deviceTime": 1_600_000_000_000 + MS_PER_DAY,
                            "deltaMs": -3000,
                            "timeSource": "device",
                            "isBaseline": False,
                            "createdAt": 1_600_000_000_000 + MS_PER_DAY,
                        },
                    ],
                },
                {
                    "id": "watch-2",
                    "name": "Casio",
                    "brand": None,
                    "model": None,
                    "movementType": "quartz",
                    "createdAt": 1_500_000_000_000,
                    "updatedAt": 1_500_000_000_000,
                    "measurements": [],
                },
            ]
        },
    }


@pytest.fixture
def sample_export_file(tmp_path: pathlib.Path, sample_export: dict) -> pathlib.Path:
    """The sample export document written to disk."""
    path = tmp_path / "export.json"
    path.write_text(json.dumps(sample_export))
    return path
