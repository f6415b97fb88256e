# backend/parkmap/mapstate/forms.py
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import ValidationError

from parkmap.schemas.commons import FACILITY_TYPES, PolygonGeometry
from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut
from parkmap.services.contract.term import ContractTermError, normalize_contract_term
from parkmap.services.geometry.measure import (
    GeometryError,
    containing_ids,
    representative_point,
    try_polygon_area_m2,
)

from .client import ApiError, ParkMapClient

logger = logging.getLogger(__name__)


class FormMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class EntityForm:
    """Shared submit flow: validate, one request in flight, inline error."""

    kind = ""
    fallback_error = "Failed to save"

    def __init__(self, mode: FormMode = FormMode.CREATE, entity_id: Optional[int] = None):
        if mode is FormMode.EDIT and entity_id is None:
            raise ValueError("edit form needs an entity id")
        self.mode = mode
        self.entity_id = entity_id
        self.busy = False
        self.error: Optional[str] = None

    def validation_errors(self) -> List[str]:
        return []

    @property
    def can_submit(self) -> bool:
        return not self.busy and not self.validation_errors()

    def payload(self) -> dict:
        raise NotImplementedError

    async def _send(self, client: ParkMapClient, payload: dict):
        raise NotImplementedError

    async def submit(self, client: ParkMapClient):
        # 送信中・アップロード中・入力エラーの間は送らない
        if not self.can_submit:
            errors = self.validation_errors()
            if errors:
                self.error = errors[0]
            return None
        self.busy = True
        self.error = None
        try:
            return await self._send(client, self.payload())
        except ApiError as e:
            logger.info("%s form submit failed: %s", self.kind, e.message)
            self.error = e.message or self.fallback_error
            return None
        finally:
            self.busy = False


class PolygonForm(EntityForm):
    """Form around a user-editable GeoJSON polygon (kept as JSON text)."""

    def __init__(self, geometry_text: str = "", **kwargs):
        super().__init__(**kwargs)
        self.geometry_text = geometry_text

    def set_geometry(self, geometry: dict) -> None:
        self.geometry_text = json.dumps(geometry)

    def _parse_geometry(self) -> PolygonGeometry:
        try:
            raw = json.loads(self.geometry_text)
        except (TypeError, ValueError) as e:
            raise GeometryError("Geometry is not valid JSON") from e
        try:
            return PolygonGeometry.model_validate(raw)
        except ValidationError as e:
            raise GeometryError("Geometry must be a closed GeoJSON Polygon") from e

    @property
    def geometry(self) -> Optional[dict]:
        try:
            return self._parse_geometry().model_dump()
        except GeometryError:
            return None

    @property
    def geometry_error(self) -> Optional[str]:
        try:
            self._parse_geometry()
        except GeometryError as e:
            return str(e)
        return None

    @property
    def area(self) -> Optional[float]:
        return try_polygon_area_m2(self.geometry)

    def validation_errors(self) -> List[str]:
        errors = []
        if self.geometry_error:
            errors.append(self.geometry_error)
        return errors


class DistrictForm(PolygonForm):
    kind = "district"

    def __init__(self, name: str = "", **kwargs):
        super().__init__(**kwargs)
        self.name = name

    @classmethod
    def create(cls, geometry: dict) -> "DistrictForm":
        return cls(geometry_text=json.dumps(geometry))

    @classmethod
    def edit(cls, district: DistrictOut) -> "DistrictForm":
        geometry = district.geometry.model_dump() if district.geometry else None
        return cls(
            name=district.name or "",
            geometry_text=json.dumps(geometry) if geometry else "",
            mode=FormMode.EDIT,
            entity_id=district.id,
        )

    def validation_errors(self) -> List[str]:
        errors = [] if self.name.strip() else ["Name is required"]
        return errors + super().validation_errors()

    def payload(self) -> dict:
        return {"name": self.name.strip(), "geometry": self.geometry, "area": self.area}

    async def _send(self, client: ParkMapClient, payload: dict) -> DistrictOut:
        if self.mode is FormMode.CREATE:
            return await client.create_district(payload)
        return await client.update_district(self.entity_id, payload)


class ParkForm(PolygonForm):
    kind = "park"

    def __init__(
        self,
        name: str = "",
        description: str = "",
        balance_holder: str = "",
        district_id: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.name = name
        self.description = description
        self.balance_holder = balance_holder
        self.district_id = district_id

    @classmethod
    def create(cls, geometry: dict, districts: Iterable[DistrictOut] = ()) -> "ParkForm":
        form = cls(geometry_text=json.dumps(geometry))
        form.auto_associate_district(districts)
        return form

    @classmethod
    def edit(cls, park: ParkOut) -> "ParkForm":
        geometry = park.geometry.model_dump() if park.geometry else None
        return cls(
            name=park.name or "",
            description=park.description or "",
            balance_holder=park.balance_holder or "",
            district_id=park.district_id,
            geometry_text=json.dumps(geometry) if geometry else "",
            mode=FormMode.EDIT,
            entity_id=park.id,
        )

    def auto_associate_district(self, districts: Iterable[DistrictOut]) -> Optional[int]:
        # 公園の内点を含む区がちょうど1つのときだけ自動で紐付け
        geometry = self.geometry
        if geometry is None:
            return None
        try:
            lat, lng = representative_point(geometry)
        except GeometryError:
            return None
        hits = containing_ids(
            ((d.id, d.geometry.model_dump() if d.geometry else None) for d in districts), lat, lng
        )
        if len(hits) == 1:
            self.district_id = hits[0]
        return self.district_id

    def validation_errors(self) -> List[str]:
        errors = [] if self.name.strip() else ["Name is required"]
        return errors + super().validation_errors()

    def payload(self) -> dict:
        return {
            "name": self.name.strip(),
            "geometry": self.geometry,
            "area": self.area,
            "description": self.description or None,
            "balance_holder": self.balance_holder or None,
            "district_id": self.district_id,
        }

    async def _send(self, client: ParkMapClient, payload: dict) -> ParkOut:
        if self.mode is FormMode.CREATE:
            return await client.create_park(payload)
        return await client.update_park(self.entity_id, payload)


class FacilityForm(EntityForm):
    kind = "facility"

    FIELDS = (
        "name", "type", "latitude", "longitude", "park_id", "photo", "external_id",
        "description", "area", "maf_count", "type_coverage",
        "contract_action", "contract_with", "contract_term",
    )

    def __init__(self, latitude: float, longitude: float, **kwargs):
        values = {k: kwargs.pop(k, None) for k in self.FIELDS if k not in ("latitude", "longitude")}
        super().__init__(**kwargs)
        self.latitude = latitude
        self.longitude = longitude
        self.name: str = values["name"] or ""
        self.type: Optional[str] = values["type"]
        self.park_id: Optional[int] = values["park_id"]
        self.photo: Optional[str] = values["photo"]
        self.external_id: Optional[str] = values["external_id"]
        self.description: Optional[str] = values["description"]
        self.area: Optional[str] = values["area"]
        self.maf_count: Optional[int] = values["maf_count"]
        self.type_coverage: Optional[str] = values["type_coverage"]
        self.contract_action: Optional[str] = values["contract_action"]
        self.contract_with: Optional[str] = values["contract_with"]
        self.contract_term: Optional[str] = values["contract_term"]
        self.uploading = False

    @classmethod
    def create(cls, lat: float, lng: float, parks: Iterable[ParkOut] = ()) -> "FacilityForm":
        form = cls(latitude=lat, longitude=lng)
        form.auto_associate_park(parks)
        return form

    @classmethod
    def edit(cls, facility: FacilityOut) -> "FacilityForm":
        data = facility.model_dump(include=set(cls.FIELDS))
        return cls(mode=FormMode.EDIT, entity_id=facility.id, **data)

    def auto_associate_park(self, parks: Iterable[ParkOut]) -> Optional[int]:
        # 作成時のみ。点を含む公園がちょうど1つなら紐付け、それ以外は手動選択
        if self.mode is not FormMode.CREATE:
            return self.park_id
        hits = containing_ids(
            ((p.id, p.geometry.model_dump() if p.geometry else None) for p in parks),
            self.latitude,
            self.longitude,
        )
        if len(hits) == 1:
            self.park_id = hits[0]
        return self.park_id

    def validation_errors(self) -> List[str]:
        errors = []
        if not self.name.strip():
            errors.append("Name is required")
        if self.type not in FACILITY_TYPES:
            errors.append("Facility type is required")
        if self.park_id is None:
            errors.append("Park is required")
        if self.contract_term:
            try:
                normalize_contract_term(self.contract_term)
            except ContractTermError as e:
                errors.append(str(e))
        return errors

    @property
    def can_submit(self) -> bool:
        return super().can_submit and not self.uploading

    async def attach_photo(self, client: ParkMapClient, filename: str, content: bytes,
                           content_type: Optional[str] = None) -> Optional[str]:
        self.uploading = True
        self.error = None
        try:
            self.photo = await client.upload_photo(filename, content, content_type)
        except ApiError as e:
            self.error = e.message or "Failed to upload photo"
            return None
        finally:
            self.uploading = False
        return self.photo

    def payload(self) -> dict:
        data = {k: getattr(self, k) for k in self.FIELDS}
        data["name"] = self.name.strip()
        data["contract_term"] = normalize_contract_term(self.contract_term)
        return data

    async def _send(self, client: ParkMapClient, payload: dict) -> FacilityOut:
        if self.mode is FormMode.CREATE:
            return await client.create_facility(payload)
        return await client.update_facility(self.entity_id, payload)
