# backend/parkmap/mapstate/filters.py
from __future__ import annotations

from typing import Optional, Set

from parkmap.schemas.commons import FACILITY_TYPES
from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut

from .store import EntityStore


class FilterState:
    """Selected districts, parks and facility types plus the visibility cascade.

    A park is visible when it is selected and its district (if any) is
    selected. A facility is visible when its type is selected and its park
    (if any) is visible. Entities seen for the first time are selected, so
    freshly created items show up on the map.
    """

    def __init__(self):
        self.selected_districts: Set[int] = set()
        self.selected_parks: Set[int] = set()
        self.selected_types: Set[str] = set(FACILITY_TYPES)
        self._known_districts: Set[int] = set()
        self._known_parks: Set[int] = set()

    # store sync

    @staticmethod
    def _merge(current: Set[int], known: Set[int], selected: Set[int]) -> None:
        selected |= current - known
        selected &= current
        known.clear()
        known |= current

    def sync(self, store: EntityStore) -> None:
        self._merge({d.id for d in store.districts}, self._known_districts, self.selected_districts)
        self._merge({p.id for p in store.parks}, self._known_parks, self.selected_parks)

    # districts

    def toggle_district(self, district_id: int) -> bool:
        return _toggle(self.selected_districts, district_id)

    def select_all_districts(self) -> None:
        self.selected_districts |= self._known_districts

    def deselect_all_districts(self) -> None:
        self.selected_districts.clear()

    # parks

    def toggle_park(self, park_id: int) -> bool:
        return _toggle(self.selected_parks, park_id)

    def _district_passes(self, park: ParkOut) -> bool:
        # 削除済みなど未知の区を指す公園は区なしとして扱う
        if park.district_id is None or park.district_id not in self._known_districts:
            return True
        return park.district_id in self.selected_districts

    def _parks_in_scope(self, store: EntityStore) -> Set[int]:
        # 選択中の区に属する公園（区なしを含む）だけが一括操作の対象
        return {p.id for p in store.parks if self._district_passes(p)}

    def select_all_parks(self, store: EntityStore) -> None:
        self.selected_parks |= self._parks_in_scope(store)

    def deselect_all_parks(self, store: EntityStore) -> None:
        self.selected_parks -= self._parks_in_scope(store)

    # facility types

    def toggle_type(self, facility_type: str) -> bool:
        if facility_type not in FACILITY_TYPES:
            raise ValueError(f"unknown facility type: {facility_type}")
        return _toggle(self.selected_types, facility_type)

    def select_all_types(self) -> None:
        self.selected_types = set(FACILITY_TYPES)

    def deselect_all_types(self) -> None:
        self.selected_types.clear()

    # visibility

    def is_district_visible(self, district: DistrictOut) -> bool:
        return district.id in self.selected_districts

    def is_park_visible(self, park: ParkOut) -> bool:
        if park.id not in self.selected_parks:
            return False
        return self._district_passes(park)

    def is_facility_visible(self, facility: FacilityOut, park: Optional[ParkOut]) -> bool:
        # 種別未設定の施設は種別フィルタの対象外
        if facility.type is not None and facility.type not in self.selected_types:
            return False
        # park_id が未知の公園を指す場合は未所属として扱う
        return park is None or self.is_park_visible(park)

    def visible_districts(self, store: EntityStore) -> list[DistrictOut]:
        return [d for d in store.districts if self.is_district_visible(d)]

    def visible_parks(self, store: EntityStore) -> list[ParkOut]:
        return [p for p in store.parks if self.is_park_visible(p)]

    def visible_facilities(self, store: EntityStore) -> list[FacilityOut]:
        return [
            f for f in store.facilities
            if self.is_facility_visible(f, store.park(f.park_id) if f.park_id is not None else None)
        ]


def _toggle(selected: Set, item) -> bool:
    if item in selected:
        selected.discard(item)
        return False
    selected.add(item)
    return True
