"""Request handling for farms, sensors and readings."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import ValidationError as SchemaValidationError

from app.schemas import (
    FarmCreateRequest,
    ReadingCreateRequest,
    RequestModel,
    SensorCreateRequest,
    describe_validation_errors,
)
from datastore.memory_store import InMemoryFarmStore, StoreCounts, build_default_store
from models.records import Farm, Reading, Sensor
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

INVALID_TIMESTAMP_MESSAGE = (
    "Invalid timestamp format. Use ISO 8601 format (e.g., 2023-10-27T10:00:00+00:00)"
)

_OFFSET_DATE_TIME = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,9}))?)?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2}(?::\d{2})?)",
    re.ASCII,
)

RequestT = TypeVar("RequestT", bound=RequestModel)


class FarmRegistryService:
    """Validates requests, enforces references and mutates the store.

    Each operation either succeeds completely or leaves the store untouched.
    Requests may be passed as schema instances or as raw mappings; mappings
    are validated against the schema first.
    """

    def __init__(self, store: InMemoryFarmStore) -> None:
        self.store = store

    def create_farm(self, request: Union[FarmCreateRequest, Mapping[str, Any]]) -> Farm:
        payload = self._coerce(FarmCreateRequest, request)
        farm = Farm.create(name=payload.name, location=payload.location, size=payload.size)
        self.store.put_farm(farm)
        logger.info("Farm created", extra={"farm_id": farm.farm_id})
        return farm

    def get_farm(self, farm_id: str) -> Farm:
        farm = self.store.get_farm(farm_id)
        if farm is None:
            raise NotFoundError("Farm", farm_id)
        return farm

    def list_farms(self) -> list[Farm]:
        return self.store.list_farms()

    def register_sensor(
        self, request: Union[SensorCreateRequest, Mapping[str, Any]]
    ) -> Sensor:
        payload = self._coerce(SensorCreateRequest, request)
        self.get_farm(payload.farm_id)
        sensor = Sensor.create(
            farm_id=payload.farm_id,
            sensor_type=payload.sensor_type,
            location=payload.location,
        )
        self.store.put_sensor(sensor)
        logger.info(
            "Sensor registered",
            extra={
                "sensor_id": sensor.sensor_id,
                "farm_id": sensor.farm_id,
                "sensor_type": sensor.sensor_type,
            },
        )
        return sensor

    def get_sensor(self, sensor_id: str) -> Sensor:
        sensor = self.store.get_sensor(sensor_id)
        if sensor is None:
            raise NotFoundError("Sensor", sensor_id)
        return sensor

    def list_farm_sensors(self, farm_id: str) -> list[Sensor]:
        # Unknown farms yield an empty list rather than NotFoundError.
        return self.store.list_sensors_by_farm(farm_id)

    def add_reading(
        self, request: Union[ReadingCreateRequest, Mapping[str, Any]]
    ) -> Reading:
        payload = self._coerce(ReadingCreateRequest, request)
        self.get_sensor(payload.sensor_id)
        timestamp = self._parse_timestamp(payload.timestamp)
        reading = Reading.create(
            sensor_id=payload.sensor_id,
            timestamp=timestamp,
            value=payload.value,
            unit=payload.unit,
        )
        self.store.append_reading(reading)
        logger.info(
            "Reading added",
            extra={"sensor_id": reading.sensor_id, "unit": reading.unit},
        )
        return reading

    def list_sensor_readings(self, sensor_id: str) -> list[Reading]:
        self.get_sensor(sensor_id)
        return self.store.list_readings_by_sensor(sensor_id)

    def counts(self) -> StoreCounts:
        return self.store.count()

    @staticmethod
    def _coerce(
        model: Type[RequestT], request: Union[RequestT, Mapping[str, Any]]
    ) -> RequestT:
        if isinstance(request, model):
            return request
        try:
            return model.model_validate(request)
        except SchemaValidationError as exc:
            raise ValidationError(describe_validation_errors(exc.errors())) from exc

    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        """Parse an extended ISO-8601 date-time that carries an explicit offset.

        Only ``YYYY-MM-DDTHH:MM[:SS[.fraction]]`` followed by ``Z`` or
        ``±HH:MM[:SS]`` is accepted. Fractions beyond microseconds are
        truncated.
        """
        match = _OFFSET_DATE_TIME.fullmatch(value)
        if match is None:
            raise ValidationError(INVALID_TIMESTAMP_MESSAGE)

        fields = match.groupdict()
        fraction = (fields["fraction"] or "").ljust(6, "0")[:6]
        try:
            return datetime(
                int(fields["year"]),
                int(fields["month"]),
                int(fields["day"]),
                int(fields["hour"]),
                int(fields["minute"]),
                int(fields["second"] or 0),
                int(fraction),
                tzinfo=_parse_offset(fields["offset"]),
            )
        except ValueError as exc:
            raise ValidationError(INVALID_TIMESTAMP_MESSAGE) from exc


def _parse_offset(offset: str) -> timezone:
    if offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    hours, minutes, *seconds = (int(part) for part in offset[1:].split(":"))
    if minutes > 59 or (seconds and seconds[0] > 59):
        raise ValueError(f"Invalid UTC offset {offset!r}")
    delta = timedelta(hours=hours, minutes=minutes, seconds=seconds[0] if seconds else 0)
    if delta > timedelta(hours=18):
        raise ValueError(f"Invalid UTC offset {offset!r}")
    return timezone(sign * delta)


@lru_cache
def build_default_registry(store: Optional[InMemoryFarmStore] = None) -> FarmRegistryService:
    """Factory that wires the registry with the process-wide store."""
    return FarmRegistryService(store=store or build_default_store())
