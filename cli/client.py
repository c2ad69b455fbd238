from __future__ import annotations

from typing import Any, Dict, List, NoReturn

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the farm registry service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=f"{config.base_url}{config.api_prefix}", timeout=config.timeout
        )

    def close(self) -> None:
        self._client.close()

    def create_farm(self, name: str, location: str, size: float) -> str:
        payload = self._request(
            "POST", "/farms", json={"name": name, "location": location, "size": size}
        )
        return self._require_id(payload, "farmId")

    def get_farm(self, farm_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/farms/{farm_id}")

    def list_farms(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/farms")

    def register_sensor(self, farm_id: str, sensor_type: str, location: str) -> str:
        payload = self._request(
            "POST",
            "/sensors",
            json={"farmId": farm_id, "sensorType": sensor_type, "location": location},
        )
        return self._require_id(payload, "sensorId")

    def get_sensor(self, sensor_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/sensors/{sensor_id}")

    def list_farm_sensors(self, farm_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/farms/{farm_id}/sensors")

    def add_reading(self, sensor_id: str, timestamp: str, value: float, unit: str) -> str:
        payload = self._request(
            "POST",
            "/readings",
            json={"sensorId": sensor_id, "timestamp": timestamp, "value": value, "unit": unit},
        )
        return str(payload.get("message", ""))

    def list_sensor_readings(self, sensor_id: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/sensors/{sensor_id}/readings")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _require_id(payload: Dict[str, Any], key: str) -> str:
        value = payload.get(key)
        if not isinstance(value, str):
            raise typer.BadParameter(f"Unexpected response payload: missing {key}.")
        return value

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("error") or data.get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
