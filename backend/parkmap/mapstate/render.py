# backend/parkmap/mapstate/render.py
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut

from .events import Emitter
from .modes import Mode
from .popups import EntityIntent, Popup, district_popup, facility_popup, park_popup
from .surface import Layer, MapSurface

logger = logging.getLogger(__name__)

DISTRICT_STYLE = {"color": "#7c3aed", "weight": 2, "dashArray": "6 4", "fillOpacity": 0.05}
PARK_STYLE = {"color": "#16a34a", "weight": 2, "fillOpacity": 0.25}

FACILITY_COLORS = {
    "SPORTS_PLAYGROUND": "#ea580c",
    "CHILD_PLAYGROUND": "#db2777",
    "NTO": "#ca8a04",
    "TOILET": "#0284c7",
    "CHILL": "#16a34a",
    "CHILDREN_ROOM": "#9333ea",
}

ACTIONS = ("edit", "delete")
KINDS = ("district", "park", "facility")


class MapRenderer:
    """Rebuilds the district, park and facility layers from scratch on every render.

    Popup buttons do not call anything themselves: the page forwards a click
    to ``dispatch`` which emits an ``intent`` event with an ``EntityIntent``.
    """

    def __init__(self, surface: MapSurface, admin: bool = False):
        self.surface = surface
        self.admin = admin
        self.events = Emitter()
        self.districts = surface.add_layer(Layer("districts", z_index=200))
        self.parks = surface.add_layer(Layer("parks", z_index=400))
        self.facilities = surface.add_layer(Layer("facilities", z_index=600, clustered=True))

    @staticmethod
    def _popup(popup: Optional[Popup]) -> Optional[dict]:
        return popup.to_dict() if popup else None

    def render(
        self,
        districts: Iterable[DistrictOut],
        parks: Iterable[ParkOut],
        facilities: Iterable[FacilityOut],
        mode: Mode = Mode.IDLE,
    ) -> None:
        districts, parks = list(districts), list(parks)
        # 施設の配置中はクリックと干渉するのでポップアップを出さない
        popups = mode is not Mode.PLACING_FACILITY
        district_by_id: Dict[int, DistrictOut] = {d.id: d for d in districts}
        park_by_id: Dict[int, ParkOut] = {p.id: p for p in parks}

        self.districts.clear()
        for d in districts:
            if d.geometry is None:
                continue
            self.districts.add({
                "type": "Feature",
                "geometry": d.geometry.model_dump(),
                "properties": {
                    "kind": "district",
                    "id": d.id,
                    "name": d.name,
                    "style": DISTRICT_STYLE,
                    "popup": self._popup(district_popup(d, self.admin)) if popups else None,
                },
            })

        self.parks.clear()
        for p in parks:
            if p.geometry is None:
                continue
            self.parks.add({
                "type": "Feature",
                "geometry": p.geometry.model_dump(),
                "properties": {
                    "kind": "park",
                    "id": p.id,
                    "name": p.name,
                    "district_id": p.district_id,
                    "style": PARK_STYLE,
                    "popup": self._popup(park_popup(p, district_by_id.get(p.district_id), self.admin))
                    if popups else None,
                },
            })

        self.facilities.clear()
        for f in facilities:
            if f.latitude is None or f.longitude is None:
                continue
            self.facilities.add({
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [f.longitude, f.latitude]},
                "properties": {
                    "kind": "facility",
                    "id": f.id,
                    "name": f.name,
                    "type": f.type,
                    "park_id": f.park_id,
                    "color": FACILITY_COLORS.get(f.type or "", "#475569"),
                    "popup": self._popup(facility_popup(f, park_by_id.get(f.park_id), self.admin))
                    if popups else None,
                },
            })

        logger.debug(
            "rendered %d districts, %d parks, %d facilities",
            len(self.districts.features), len(self.parks.features), len(self.facilities.features),
        )

    def dispatch(self, action: str, kind: str, entity_id: int) -> EntityIntent:
        if action not in ACTIONS or kind not in KINDS:
            raise ValueError(f"unknown popup action {action!r} for {kind!r}")
        if not self.admin:
            raise PermissionError("popup actions require admin mode")
        intent = EntityIntent(action, kind, int(entity_id))
        self.events.emit("intent", intent)
        return intent
