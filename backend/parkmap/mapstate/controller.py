# backend/parkmap/mapstate/controller.py
from __future__ import annotations

import logging
from typing import Callable, Optional, Union

from .client import ApiError, ParkMapClient
from .filters import FilterState
from .forms import DistrictForm, FacilityForm, FormMode, ParkForm
from .modes import InteractionModeController, Mode
from .popups import EntityIntent
from .render import MapRenderer
from .store import EntityStore
from .surface import MapSurface

logger = logging.getLogger(__name__)

Form = Union[DistrictForm, ParkForm, FacilityForm]


class MapController:
    """Owns the map page state and re-renders after every change.

    Flow: filter change → visible sets → ``MapRenderer.render``; popup intent
    → edit form or pending delete; creation event → create form; successful
    submit/delete → store update → render.
    """

    def __init__(
        self,
        client: ParkMapClient,
        admin: bool = False,
        surface: Optional[MapSurface] = None,
        alert: Optional[Callable[[str], None]] = None,
    ):
        self.client = client
        self.admin = admin
        self.surface = surface or MapSurface()
        self.store = EntityStore()
        self.filters = FilterState()
        self.modes = InteractionModeController(self.surface)
        self.renderer = MapRenderer(self.surface, admin=admin)
        self.alert = alert or (lambda message: logger.error("%s", message))
        self.active_form: Optional[Form] = None
        self.pending_delete: Optional[EntityIntent] = None
        self.render_count = 0

        self.renderer.events.on("intent", self._on_intent)
        self.modes.events.on("mode_changed", lambda _mode: self.refresh())
        self.modes.events.on("district_drawn", self._on_district_drawn)
        self.modes.events.on("park_drawn", self._on_park_drawn)
        self.modes.events.on("facility_placed", self._on_facility_placed)

    # loading / rendering

    async def load(self) -> None:
        await self.store.load(self.client)
        self.refresh()

    def refresh(self) -> None:
        self.filters.sync(self.store)
        self.renderer.render(
            self.filters.visible_districts(self.store),
            self.filters.visible_parks(self.store),
            self.filters.visible_facilities(self.store),
            mode=self.modes.mode,
        )
        self.render_count += 1

    # filters

    def toggle_district(self, district_id: int) -> None:
        self.filters.toggle_district(district_id)
        self.refresh()

    def toggle_park(self, park_id: int) -> None:
        self.filters.toggle_park(park_id)
        self.refresh()

    def toggle_type(self, facility_type: str) -> None:
        self.filters.toggle_type(facility_type)
        self.refresh()

    def select_all(self, dimension: str) -> None:
        if dimension == "districts":
            self.filters.select_all_districts()
        elif dimension == "parks":
            self.filters.select_all_parks(self.store)
        elif dimension == "types":
            self.filters.select_all_types()
        else:
            raise ValueError(f"unknown filter dimension: {dimension}")
        self.refresh()

    def deselect_all(self, dimension: str) -> None:
        if dimension == "districts":
            self.filters.deselect_all_districts()
        elif dimension == "parks":
            self.filters.deselect_all_parks(self.store)
        elif dimension == "types":
            self.filters.deselect_all_types()
        else:
            raise ValueError(f"unknown filter dimension: {dimension}")
        self.refresh()

    # interaction modes

    def _require_admin(self) -> None:
        if not self.admin:
            raise PermissionError("editing requires admin mode")

    def start_district_draw(self) -> None:
        self._require_admin()
        self.modes.start_district_draw()

    def start_park_draw(self) -> None:
        self._require_admin()
        self.modes.start_park_draw()

    def start_facility_placement(self) -> None:
        self._require_admin()
        self.modes.start_facility_placement()

    def cancel_mode(self) -> None:
        self.modes.cancel()

    def _on_district_drawn(self, geometry: dict) -> None:
        self.active_form = DistrictForm.create(geometry)

    def _on_park_drawn(self, geometry: dict) -> None:
        self.active_form = ParkForm.create(geometry, self.store.districts)

    def _on_facility_placed(self, lat: float, lng: float) -> None:
        self.active_form = FacilityForm.create(lat, lng, self.store.parks)

    # popup intents

    def _on_intent(self, intent: EntityIntent) -> None:
        if intent.action == "edit":
            self.open_edit_form(intent.kind, intent.entity_id)
        elif intent.action == "delete":
            # 削除は confirm_delete() で確定するまで保留
            self.pending_delete = intent

    def open_edit_form(self, kind: str, entity_id: int) -> Optional[Form]:
        if kind == "district":
            entity = self.store.district(entity_id)
            form = DistrictForm.edit(entity) if entity else None
        elif kind == "park":
            entity = self.store.park(entity_id)
            form = ParkForm.edit(entity) if entity else None
        else:
            entity = self.store.facility(entity_id)
            form = FacilityForm.edit(entity) if entity else None
        if form is None:
            logger.warning("no %s with id %s to edit", kind, entity_id)
        self.active_form = form
        return form

    def close_form(self) -> None:
        self.active_form = None

    async def submit_form(self):
        form = self.active_form
        if form is None:
            return None
        result = await form.submit(self.client)
        if result is None:
            return None
        if isinstance(form, DistrictForm):
            self.store.put_district(result)
        elif isinstance(form, ParkForm):
            self.store.put_park(result)
        else:
            self.store.put_facility(result)
        logger.info("%s %s %s", "created" if form.mode is FormMode.CREATE else "updated", form.kind, result.id)
        if self.active_form is form:
            self.active_form = None
        self.refresh()
        return result

    def dismiss_delete(self) -> None:
        self.pending_delete = None

    async def confirm_delete(self) -> bool:
        intent = self.pending_delete
        self.pending_delete = None
        if intent is None:
            return False
        return await self.delete(intent.kind, intent.entity_id)

    async def delete(self, kind: str, entity_id: int) -> bool:
        self._require_admin()
        try:
            if kind == "district":
                await self.client.delete_district(entity_id)
                self.store.remove_district(entity_id)
            elif kind == "park":
                await self.client.delete_park(entity_id)
                self.store.remove_park(entity_id)
            elif kind == "facility":
                await self.client.delete_facility(entity_id)
                self.store.remove_facility(entity_id)
            else:
                raise ValueError(f"unknown entity kind: {kind}")
        except ApiError as e:
            self.alert(f"Failed to delete {kind}: {e.message}")
            return False
        self.refresh()
        return True

    @property
    def mode(self) -> Mode:
        return self.modes.mode
