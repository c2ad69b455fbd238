from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer

FARM_FIELDS = ("farmId", "name", "location", "size", "createdAt")
SENSOR_FIELDS = ("sensorId", "farmId", "sensorType", "location", "registeredAt")
READING_FIELDS = ("timestamp", "value", "unit", "receivedAt")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _render_record(title: str, payload: Dict[str, Any], fields: Sequence[str]) -> None:
    echo_heading(title)
    echo_key_values((field, payload.get(field)) for field in fields)


def render_farm(payload: Dict[str, Any]) -> None:
    _render_record("Farm", payload, FARM_FIELDS)


def render_sensor(payload: Dict[str, Any]) -> None:
    _render_record("Sensor", payload, SENSOR_FIELDS)


def render_farms(farms: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Farms ({len(farms)})")
    if not farms:
        typer.echo("No farms registered.")
        return
    for farm in farms:
        typer.echo(
            f"  - {farm.get('farmId')}: {farm.get('name')} "
            f"({farm.get('location')}, size {farm.get('size')})"
        )


def render_sensors(farm_id: str, sensors: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Sensors for farm {farm_id} ({len(sensors)})")
    if not sensors:
        typer.echo("No sensors registered.")
        return
    for sensor in sensors:
        typer.echo(
            f"  - {sensor.get('sensorId')}: {sensor.get('sensorType')} at {sensor.get('location')}"
        )


def render_readings(sensor_id: str, readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Readings for sensor {sensor_id} ({len(readings)})")
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('timestamp')}: {reading.get('value')} {reading.get('unit')}"
        )
