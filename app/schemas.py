"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MISSING_FIELDS_MESSAGE = "Missing required fields"


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    """Request bodies are strictly typed: no string-to-number coercion."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, strict=True
    )


class FarmCreateRequest(RequestModel):
    name: str
    location: str
    size: float = Field(
        ..., allow_inf_nan=False, description="Farm area; the unit is left to the caller."
    )


class SensorCreateRequest(RequestModel):
    farm_id: str
    sensor_type: str = Field(..., examples=["soil-moisture"])
    location: str


class ReadingCreateRequest(RequestModel):
    sensor_id: str
    timestamp: str = Field(
        ...,
        description="ISO-8601 date-time with a UTC offset.",
        examples=["2023-10-27T10:00:00+00:00"],
    )
    value: float = Field(..., allow_inf_nan=False)
    unit: str


class FarmOut(CamelModel):
    """Full farm record."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    farm_id: str
    name: str
    location: str
    size: float
    created_at: datetime


class SensorOut(CamelModel):
    """Full sensor record."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    farm_id: str
    sensor_id: str
    sensor_type: str
    location: str
    registered_at: datetime


class ReadingOut(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    sensor_id: str
    timestamp: datetime
    value: float
    unit: str
    received_at: datetime


class FarmCreatedResponse(CamelModel):
    message: str = "Farm created successfully"
    farm_id: str


class SensorCreatedResponse(CamelModel):
    message: str = "Sensor registered successfully"
    sensor_id: str


class ReadingCreatedResponse(CamelModel):
    message: str = "Reading added successfully"


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    farms: int = Field(..., ge=0)
    sensors: int = Field(..., ge=0)
    readings: int = Field(..., ge=0)


def describe_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Collapse pydantic error details into a single client-facing message.

    Absent and ``null`` fields are both reported as missing; anything else
    names the first offending field.
    """
    located = [
        (error, [part for part in error.get("loc", ()) if part != "body"])
        for error in errors
    ]
    for error, fields in located:
        if error.get("type") == "json_invalid":
            return "Malformed request body"
        if error.get("type") == "missing":
            return MISSING_FIELDS_MESSAGE
        if fields and error.get("input", ...) is None:
            return MISSING_FIELDS_MESSAGE
    for error, fields in located:
        if fields:
            return f"Invalid value for field {str(fields[-1])!r}"
    return "Malformed request body"
