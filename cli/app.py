from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_farm,
    render_farms,
    render_readings,
    render_sensor,
    render_sensors,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the farm registry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
)
farms_app = typer.Typer(help="Create and inspect farms.", no_args_is_help=True)
sensors_app = typer.Typer(help="Register and inspect sensors.", no_args_is_help=True)
readings_app = typer.Typer(help="Record and list sensor readings.", no_args_is_help=True)
app.add_typer(farms_app, name="farms")
app.add_typer(sensors_app, name="sensors")
app.add_typer(readings_app, name="readings")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Registry API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@farms_app.command("create")
def create_farm_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Farm name."),
    location: str = typer.Argument(..., help="Free-text farm location."),
    size: float = typer.Argument(..., help="Farm area."),
) -> None:
    """Create a farm and print its identifier."""
    state = _get_state(ctx)
    farm_id = state.client.create_farm(name=name, location=location, size=size)
    typer.secho(f"Farm created. farm_id={farm_id}", fg=typer.colors.GREEN)


@farms_app.command("get")
def get_farm_command(
    ctx: typer.Context,
    farm_id: str = typer.Argument(..., help="Identifier returned by 'farms create'."),
) -> None:
    state = _get_state(ctx)
    render_farm(state.client.get_farm(farm_id))


@farms_app.command("list")
def list_farms_command(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    render_farms(state.client.list_farms())


@sensors_app.command("register")
def register_sensor_command(
    ctx: typer.Context,
    farm_id: str = typer.Argument(..., help="Farm the sensor belongs to."),
    sensor_type: str = typer.Argument(..., help="Sensor type, e.g. soil-moisture."),
    location: str = typer.Argument(..., help="Where the sensor is installed."),
) -> None:
    """Register a sensor against an existing farm."""
    state = _get_state(ctx)
    sensor_id = state.client.register_sensor(
        farm_id=farm_id, sensor_type=sensor_type, location=location
    )
    typer.secho(f"Sensor registered. sensor_id={sensor_id}", fg=typer.colors.GREEN)


@sensors_app.command("get")
def get_sensor_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Identifier returned by 'sensors register'."),
) -> None:
    state = _get_state(ctx)
    render_sensor(state.client.get_sensor(sensor_id))


@sensors_app.command("list")
def list_sensors_command(
    ctx: typer.Context,
    farm_id: str = typer.Argument(..., help="Farm whose sensors should be listed."),
) -> None:
    state = _get_state(ctx)
    render_sensors(farm_id, state.client.list_farm_sensors(farm_id))


@readings_app.command("add")
def add_reading_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Sensor that produced the reading."),
    timestamp: str = typer.Argument(..., help="ISO-8601 date-time with offset."),
    value: float = typer.Argument(..., help="Measured value."),
    unit: str = typer.Argument(..., help="Unit of the measured value."),
) -> None:
    """Record a single sensor reading."""
    state = _get_state(ctx)
    message = state.client.add_reading(
        sensor_id=sensor_id, timestamp=timestamp, value=value, unit=unit
    )
    typer.secho(message or "Reading added.", fg=typer.colors.GREEN)


@readings_app.command("list")
def list_readings_command(
    ctx: typer.Context,
    sensor_id: str = typer.Argument(..., help="Sensor whose readings should be listed."),
) -> None:
    state = _get_state(ctx)
    render_readings(sensor_id, state.client.list_sensor_readings(sensor_id))
