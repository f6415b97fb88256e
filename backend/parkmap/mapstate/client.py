# backend/parkmap/mapstate/client.py
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter

from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut

logger = logging.getLogger(__name__)

_districts = TypeAdapter(list[DistrictOut])
_parks = TypeAdapter(list[ParkOut])
_facilities = TypeAdapter(list[FacilityOut])


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("detail", body.get("error"))
        if isinstance(detail, str) and detail:
            return detail
        # FastAPI の 422 は [{"loc": ..., "msg": ...}, ...]
        if isinstance(detail, list) and detail:
            return "; ".join(str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail)
    return f"Request failed ({response.status_code})"


class ParkMapClient:
    """Async client for the Park Map REST API.

    The session cookie set by ``login`` lives in the wrapped ``httpx.AsyncClient``.
    """

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(0, "Network error") from e
        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid response from server") from e

    # auth

    async def login(self, username: str, password: str) -> bool:
        try:
            await self._request("POST", "/auth/login", json={"username": username, "password": password})
        except ApiError as e:
            if e.status_code == 401:
                return False
            raise
        return True

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout")

    async def is_authenticated(self) -> bool:
        data = await self._request("GET", "/auth/me")
        return bool(data.get("authenticated"))

    # districts

    async def list_districts(self) -> list[DistrictOut]:
        return _districts.validate_python(await self._request("GET", "/districts"))

    async def create_district(self, payload: dict) -> DistrictOut:
        return DistrictOut.model_validate(await self._request("POST", "/districts", json=payload))

    async def update_district(self, district_id: int, payload: dict) -> DistrictOut:
        return DistrictOut.model_validate(await self._request("PUT", f"/districts/{district_id}", json=payload))

    async def delete_district(self, district_id: int) -> None:
        await self._request("DELETE", f"/districts/{district_id}")

    # parks

    async def list_parks(self) -> list[ParkOut]:
        return _parks.validate_python(await self._request("GET", "/parks"))

    async def create_park(self, payload: dict) -> ParkOut:
        return ParkOut.model_validate(await self._request("POST", "/parks", json=payload))

    async def update_park(self, park_id: int, payload: dict) -> ParkOut:
        return ParkOut.model_validate(await self._request("PUT", f"/parks/{park_id}", json=payload))

    async def delete_park(self, park_id: int) -> None:
        await self._request("DELETE", f"/parks/{park_id}")

    # facilities

    async def list_facilities(self) -> list[FacilityOut]:
        return _facilities.validate_python(await self._request("GET", "/facilities"))

    async def create_facility(self, payload: dict) -> FacilityOut:
        return FacilityOut.model_validate(await self._request("POST", "/facilities", json=payload))

    async def update_facility(self, facility_id: int, payload: dict) -> FacilityOut:
        return FacilityOut.model_validate(
            await self._request("PUT", f"/facilities/{facility_id}", json=payload)
        )

    async def delete_facility(self, facility_id: int) -> None:
        await self._request("DELETE", f"/facilities/{facility_id}")

    # photos

    async def upload_photo(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = await self._request("POST", "/upload", files=files)
        return data["url"]
