"""HTTP route definitions for the service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas import (
    ErrorResponse,
    FarmCreatedResponse,
    FarmCreateRequest,
    FarmOut,
    HealthResponse,
    ReadingCreatedResponse,
    ReadingCreateRequest,
    ReadingOut,
    SensorCreatedResponse,
    SensorCreateRequest,
    SensorOut,
    describe_validation_errors,
)
from services.errors import NotFoundError, ValidationError
from services.registry import FarmRegistryService, build_default_registry

logger = logging.getLogger(__name__)

router = APIRouter()
health_router = APIRouter()

_BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}}
_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


def get_registry() -> FarmRegistryService:
    return build_default_registry()


@router.post(
    "/farms",
    status_code=status.HTTP_201_CREATED,
    response_model=FarmCreatedResponse,
    responses=_BAD_REQUEST,
    summary="Create a farm.",
)
async def create_farm(
    payload: FarmCreateRequest,
    registry: FarmRegistryService = Depends(get_registry),
) -> FarmCreatedResponse:
    farm = registry.create_farm(payload)
    return FarmCreatedResponse(farm_id=farm.farm_id)


@router.get(
    "/farms",
    response_model=list[FarmOut],
    summary="List every registered farm.",
)
async def list_farms(
    registry: FarmRegistryService = Depends(get_registry),
) -> list[FarmOut]:
    return [FarmOut.model_validate(farm) for farm in registry.list_farms()]


@router.get(
    "/farms/{farm_id}",
    response_model=FarmOut,
    responses=_NOT_FOUND,
    summary="Fetch a single farm.",
)
async def get_farm(
    farm_id: str,
    registry: FarmRegistryService = Depends(get_registry),
) -> FarmOut:
    return FarmOut.model_validate(registry.get_farm(farm_id))


@router.get(
    "/farms/{farm_id}/sensors",
    response_model=list[SensorOut],
    summary="List sensors attached to a farm.",
)
async def list_farm_sensors(
    farm_id: str,
    registry: FarmRegistryService = Depends(get_registry),
) -> list[SensorOut]:
    return [SensorOut.model_validate(sensor) for sensor in registry.list_farm_sensors(farm_id)]


@router.post(
    "/sensors",
    status_code=status.HTTP_201_CREATED,
    response_model=SensorCreatedResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Register a sensor against an existing farm.",
)
async def register_sensor(
    payload: SensorCreateRequest,
    registry: FarmRegistryService = Depends(get_registry),
) -> SensorCreatedResponse:
    sensor = registry.register_sensor(payload)
    return SensorCreatedResponse(sensor_id=sensor.sensor_id)


@router.get(
    "/sensors/{sensor_id}",
    response_model=SensorOut,
    responses=_NOT_FOUND,
    summary="Fetch a single sensor.",
)
async def get_sensor(
    sensor_id: str,
    registry: FarmRegistryService = Depends(get_registry),
) -> SensorOut:
    return SensorOut.model_validate(registry.get_sensor(sensor_id))


@router.get(
    "/sensors/{sensor_id}/readings",
    response_model=list[ReadingOut],
    responses=_NOT_FOUND,
    summary="List readings recorded for a sensor, oldest first.",
)
async def list_sensor_readings(
    sensor_id: str,
    registry: FarmRegistryService = Depends(get_registry),
) -> list[ReadingOut]:
    return [ReadingOut.model_validate(reading) for reading in registry.list_sensor_readings(sensor_id)]


@router.post(
    "/readings",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingCreatedResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND},
    summary="Record a sensor reading.",
)
async def add_reading(
    payload: ReadingCreateRequest,
    registry: FarmRegistryService = Depends(get_registry),
) -> ReadingCreatedResponse:
    registry.add_reading(payload)
    return ReadingCreatedResponse()


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint with store sizes.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(
    registry: FarmRegistryService = Depends(get_registry),
) -> HealthResponse:
    counts = registry.counts()
    return HealthResponse(farms=counts.farms, sensors=counts.sensors, readings=counts.readings)


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    logger.info(
        "Request rejected",
        extra={"reason": message, "status_code": status_code, "path": request.url.path},
    )
    return JSONResponse(status_code=status_code, content={"error": message})


async def _handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(request, status.HTTP_400_BAD_REQUEST, str(exc))


async def _handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(request, status.HTTP_404_NOT_FOUND, str(exc))


async def _handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, describe_validation_errors(exc.errors())
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _handle_validation_error)
    app.add_exception_handler(NotFoundError, _handle_not_found)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
