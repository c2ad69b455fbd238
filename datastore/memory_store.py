from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Dict, List, Optional

from models.records import Farm, Reading, Sensor


@dataclass(frozen=True)
class StoreCounts:
    farms: int
    sensors: int
    readings: int


class InMemoryFarmStore:
    """Volatile store for farms, sensors and readings.

    Every operation runs under a single lock, so concurrent requests see a
    serialized view of the three collections. Records are immutable and are
    handed out as-is; list results are fresh snapshots.
    """

    def __init__(self) -> None:
        self._farms: Dict[str, Farm] = {}
        self._sensors: Dict[str, Sensor] = {}
        self._readings: List[Reading] = []
        self._lock = Lock()

    def put_farm(self, farm: Farm) -> None:
        with self._lock:
            self._farms[farm.farm_id] = farm

    def get_farm(self, farm_id: str) -> Optional[Farm]:
        with self._lock:
            return self._farms.get(farm_id)

    def list_farms(self) -> list[Farm]:
        with self._lock:
            return list(self._farms.values())

    def put_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.sensor_id] = sensor

    def get_sensor(self, sensor_id: str) -> Optional[Sensor]:
        with self._lock:
            return self._sensors.get(sensor_id)

    def list_sensors_by_farm(self, farm_id: str) -> list[Sensor]:
        with self._lock:
            return [sensor for sensor in self._sensors.values() if sensor.farm_id == farm_id]

    def append_reading(self, reading: Reading) -> None:
        with self._lock:
            self._readings.append(reading)

    def list_readings_by_sensor(self, sensor_id: str) -> list[Reading]:
        with self._lock:
            return [reading for reading in self._readings if reading.sensor_id == sensor_id]

    def count(self) -> StoreCounts:
        with self._lock:
            return StoreCounts(
                farms=len(self._farms),
                sensors=len(self._sensors),
                readings=len(self._readings),
            )


@lru_cache
def build_default_store() -> InMemoryFarmStore:
    return InMemoryFarmStore()
