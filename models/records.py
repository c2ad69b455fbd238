"""Domain records held by the farm registry store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Farm:
    """A monitored physical unit."""

    farm_id: str
    name: str
    location: str
    size: float
    created_at: datetime

    @classmethod
    def create(cls, name: str, location: str, size: float) -> Farm:
        return cls(
            farm_id=str(uuid4()),
            name=name,
            location=location,
            size=size,
            created_at=_utcnow(),
        )


@dataclass(frozen=True, slots=True)
class Sensor:
    """A device attached to exactly one farm."""

    sensor_id: str
    farm_id: str
    sensor_type: str
    location: str
    registered_at: datetime

    @classmethod
    def create(cls, farm_id: str, sensor_type: str, location: str) -> Sensor:
        return cls(
            sensor_id=str(uuid4()),
            farm_id=farm_id,
            sensor_type=sensor_type,
            location=location,
            registered_at=_utcnow(),
        )


@dataclass(frozen=True, slots=True)
class Reading:
    """A single timestamped observation reported by a sensor.

    ``timestamp`` is supplied by the caller; ``received_at`` is stamped when
    the reading is accepted.
    """

    sensor_id: str
    timestamp: datetime
    value: float
    unit: str
    received_at: datetime

    @classmethod
    def create(cls, sensor_id: str, timestamp: datetime, value: float, unit: str) -> Reading:
        return cls(
            sensor_id=sensor_id,
            timestamp=timestamp,
            value=value,
            unit=unit,
            received_at=_utcnow(),
        )
