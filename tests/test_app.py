import uuid
from datetime import datetime
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api import get_registry
from app.main import create_app
from datastore.memory_store import InMemoryFarmStore
from services.registry import FarmRegistryService, build_default_registry


@pytest.fixture
def registry() -> FarmRegistryService:
    return FarmRegistryService(store=InMemoryFarmStore())


@pytest.fixture
def api_client(registry: FarmRegistryService) -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as client:
        yield client


def _create_farm(client: TestClient, **overrides) -> str:
    body = {"name": "Acme", "location": "Field A", "size": 12.5}
    body.update(overrides)
    response = client.post("/api/farms", json=body)
    assert response.status_code == 201
    return response.json()["farmId"]


def _register_sensor(client: TestClient, farm_id: str, location: str = "Row 3") -> str:
    response = client.post(
        "/api/sensors",
        json={"farmId": farm_id, "sensorType": "soil-moisture", "location": location},
    )
    assert response.status_code == 201
    return response.json()["sensorId"]


def test_lifespan_clears_default_registry() -> None:
    app = create_app()

    with TestClient(app):
        during = build_default_registry()

    after = build_default_registry()
    try:
        assert after is not during
        assert after.store is not during.store
    finally:
        build_default_registry.cache_clear()


def test_end_to_end_scenario(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/farms", json={"name": "Acme", "location": "Field A", "size": 12.5}
    )
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Farm created successfully"
    farm_id = body["farmId"]

    response = api_client.post(
        "/api/sensors",
        json={"farmId": farm_id, "sensorType": "soil-moisture", "location": "Row 3"},
    )
    assert response.status_code == 201
    assert response.json()["message"] == "Sensor registered successfully"
    sensor_id = response.json()["sensorId"]

    response = api_client.post(
        "/api/readings",
        json={
            "sensorId": sensor_id,
            "timestamp": "2023-10-27T10:00:00+00:00",
            "value": 23.4,
            "unit": "%",
        },
    )
    assert response.status_code == 201
    assert response.json() == {"message": "Reading added successfully"}

    response = api_client.get(f"/api/farms/{farm_id}/sensors")
    assert response.status_code == 200
    sensors = response.json()
    assert len(sensors) == 1
    assert sensors[0]["sensorId"] == sensor_id
    assert sensors[0]["farmId"] == farm_id
    assert sensors[0]["sensorType"] == "soil-moisture"
    assert sensors[0]["location"] == "Row 3"


def test_get_farm_returns_full_record(api_client: TestClient) -> None:
    farm_id = _create_farm(api_client)

    response = api_client.get(f"/api/farms/{farm_id}")

    assert response.status_code == 200
    farm = response.json()
    assert set(farm) == {"farmId", "name", "location", "size", "createdAt"}
    assert farm["farmId"] == farm_id
    assert farm["name"] == "Acme"
    assert farm["size"] == 12.5
    created_at = datetime.fromisoformat(farm["createdAt"].replace("Z", "+00:00"))
    assert created_at.tzinfo is not None


def test_list_farms(api_client: TestClient) -> None:
    assert api_client.get("/api/farms").json() == []
    first = _create_farm(api_client, name="North")
    second = _create_farm(api_client, name="North")

    farms = api_client.get("/api/farms").json()

    assert first != second
    assert {farm["farmId"] for farm in farms} == {first, second}


@pytest.mark.parametrize("missing", ["name", "location", "size"])
def test_create_farm_missing_field_returns_bad_request(
    api_client: TestClient, registry: FarmRegistryService, missing: str
) -> None:
    body = {"name": "Acme", "location": "Field A", "size": 12.5}
    del body[missing]

    response = api_client.post("/api/farms", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}
    assert registry.counts().farms == 0


def test_create_farm_rejects_string_size(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/farms", json={"name": "Acme", "location": "Field A", "size": "big"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid value for field 'size'"}


def test_create_farm_accepts_zero_size(api_client: TestClient) -> None:
    farm_id = _create_farm(api_client, size=0)

    assert api_client.get(f"/api/farms/{farm_id}").json()["size"] == 0


def test_get_missing_farm_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get(f"/api/farms/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"error": "Farm not found"}


def test_register_sensor_unknown_farm_returns_not_found(
    api_client: TestClient, registry: FarmRegistryService
) -> None:
    response = api_client.post(
        "/api/sensors",
        json={"farmId": "ghost", "sensorType": "soil-moisture", "location": "Row 3"},
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Farm not found"}
    assert registry.counts().sensors == 0


def test_register_sensor_missing_field(api_client: TestClient) -> None:
    farm_id = _create_farm(api_client)

    response = api_client.post("/api/sensors", json={"farmId": farm_id, "sensorType": "ph"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_get_sensor(api_client: TestClient) -> None:
    farm_id = _create_farm(api_client)
    sensor_id = _register_sensor(api_client, farm_id)

    response = api_client.get(f"/api/sensors/{sensor_id}")

    assert response.status_code == 200
    sensor = response.json()
    assert set(sensor) == {"sensorId", "farmId", "sensorType", "location", "registeredAt"}
    assert sensor["farmId"] == farm_id

    missing = api_client.get("/api/sensors/ghost")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Sensor not found"}


def test_list_sensors_for_unknown_farm_is_empty(api_client: TestClient) -> None:
    response = api_client.get("/api/farms/ghost/sensors")

    assert response.status_code == 200
    assert response.json() == []


def test_list_sensors_excludes_other_farms(api_client: TestClient) -> None:
    farm_a = _create_farm(api_client, name="A")
    farm_b = _create_farm(api_client, name="B")
    expected = {_register_sensor(api_client, farm_a, f"Row {i}") for i in range(3)}
    _register_sensor(api_client, farm_b)

    listed = api_client.get(f"/api/farms/{farm_a}/sensors").json()

    assert {sensor["sensorId"] for sensor in listed} == expected


def test_add_reading_invalid_timestamp(
    api_client: TestClient, registry: FarmRegistryService
) -> None:
    sensor_id = _register_sensor(api_client, _create_farm(api_client))

    response = api_client.post(
        "/api/readings",
        json={"sensorId": sensor_id, "timestamp": "not-a-date", "value": 1.0, "unit": "%"},
    )

    assert response.status_code == 400
    assert "Invalid timestamp format" in response.json()["error"]
    assert registry.counts().readings == 0


def test_add_reading_unknown_sensor(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/readings",
        json={
            "sensorId": "ghost",
            "timestamp": "2023-10-27T10:00:00+00:00",
            "value": 1.0,
            "unit": "%",
        },
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Sensor not found"}


def test_add_reading_null_value_is_missing(api_client: TestClient) -> None:
    sensor_id = _register_sensor(api_client, _create_farm(api_client))

    response = api_client.post(
        "/api/readings",
        json={
            "sensorId": sensor_id,
            "timestamp": "2023-10-27T10:00:00+00:00",
            "value": None,
            "unit": "%",
        },
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_list_sensor_readings(api_client: TestClient) -> None:
    sensor_id = _register_sensor(api_client, _create_farm(api_client))
    for value in (1.0, 2.0):
        api_client.post(
            "/api/readings",
            json={
                "sensorId": sensor_id,
                "timestamp": "2023-10-27T10:00:00+00:00",
                "value": value,
                "unit": "%",
            },
        )

    response = api_client.get(f"/api/sensors/{sensor_id}/readings")

    assert response.status_code == 200
    readings = response.json()
    assert [reading["value"] for reading in readings] == [1.0, 2.0]
    assert set(readings[0]) == {"sensorId", "timestamp", "value", "unit", "receivedAt"}
    assert api_client.get("/api/sensors/ghost/readings").status_code == 404


def test_healthcheck_reports_counts(api_client: TestClient) -> None:
    _register_sensor(api_client, _create_farm(api_client))

    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "farms": 1, "sensors": 1, "readings": 0}


def test_malformed_json_body_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/farms",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Malformed request body"}


@pytest.mark.parametrize("literal", [b"NaN", b"Infinity", b"-Infinity"])
def test_create_farm_rejects_non_finite_size(
    api_client: TestClient, registry: FarmRegistryService, literal: bytes
) -> None:
    response = api_client.post(
        "/api/farms",
        content=b'{"name": "Acme", "location": "Field A", "size": ' + literal + b"}",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid value for field 'size'"}
    assert registry.counts().farms == 0
