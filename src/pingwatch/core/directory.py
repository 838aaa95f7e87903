from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from pingwatch.errors import DirectoryError
from pingwatch.models import Device

logger = logging.getLogger(__name__)

_devices_adapter = TypeAdapter(list[Device])


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("error", ""))
    return ""


class HttpDirectory:
    """Client for the device directory server."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=timeout, transport=transport
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise DirectoryError(None, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.debug(
                "%s %s returned %d: %s", method, url, response.status_code, message
            )
            raise DirectoryError(response.status_code, message)
        return response

    async def list(self) -> list[Device]:
        response = await self._request("GET", "/api/getAll")
        try:
            return _devices_adapter.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise DirectoryError(
                response.status_code, f"Malformed device list: {exc}"
            ) from exc

    async def create(self, address: str, name: str) -> None:
        await self._request("POST", "/api/add", json={"ip": address, "name": name})

    async def update(self, device_id: int, address: str, name: str) -> None:
        await self._request(
            "PUT", "/api/edit", json={"id": device_id, "ip": address, "name": name}
        )

    async def delete(self, address: str) -> None:
        await self._request("DELETE", "/api/delete", json={"ip": address})
