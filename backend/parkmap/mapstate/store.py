# backend/parkmap/mapstate/store.py
from __future__ import annotations

import logging
from typing import List, Optional, TypeVar

from pydantic import ValidationError

from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut

from .client import ApiError, ParkMapClient

logger = logging.getLogger(__name__)

T = TypeVar("T", DistrictOut, ParkOut, FacilityOut)


def _put(items: List[T], item: T) -> None:
    for i, existing in enumerate(items):
        if existing.id == item.id:
            items[i] = item
            return
    items.append(item)


def _find(items: List[T], item_id: Optional[int]) -> Optional[T]:
    if item_id is None:
        return None
    return next((i for i in items if i.id == item_id), None)


class EntityStore:
    """Client-side copies of districts, parks and facilities."""

    def __init__(self):
        self.districts: List[DistrictOut] = []
        self.parks: List[ParkOut] = []
        self.facilities: List[FacilityOut] = []

    async def load(self, client: ParkMapClient) -> None:
        # 一覧ごとに独立して取得。失敗した一覧は空のまま
        for name, fetch in (
            ("districts", client.list_districts),
            ("parks", client.list_parks),
            ("facilities", client.list_facilities),
        ):
            try:
                items = await fetch()
            except (ApiError, ValidationError) as e:
                logger.warning("failed to load %s: %s", name, e)
                items = []
            setattr(self, name, items)

    def district(self, district_id: Optional[int]) -> Optional[DistrictOut]:
        return _find(self.districts, district_id)

    def park(self, park_id: Optional[int]) -> Optional[ParkOut]:
        return _find(self.parks, park_id)

    def facility(self, facility_id: Optional[int]) -> Optional[FacilityOut]:
        return _find(self.facilities, facility_id)

    def put_district(self, district: DistrictOut) -> None:
        _put(self.districts, district)

    def put_park(self, park: ParkOut) -> None:
        _put(self.parks, park)

    def put_facility(self, facility: FacilityOut) -> None:
        _put(self.facilities, facility)

    def remove_district(self, district_id: int) -> None:
        # 公園はそのまま残す（再読込か個別削除まで）
        self.districts = [d for d in self.districts if d.id != district_id]

    def remove_park(self, park_id: int) -> None:
        self.parks = [p for p in self.parks if p.id != park_id]
        self.facilities = [f for f in self.facilities if f.park_id != park_id]

    def remove_facility(self, facility_id: int) -> None:
        self.facilities = [f for f in self.facilities if f.id != facility_id]
