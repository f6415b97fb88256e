# backend/parkmap/mapstate/modes.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

from .events import Emitter
from .surface import Layer, MapSurface

logger = logging.getLogger(__name__)

SKETCH_Z_INDEX = 900


class Mode(str, Enum):
    IDLE = "idle"
    DRAWING_DISTRICT = "drawing-district"
    DRAWING_PARK = "drawing-park"
    PLACING_FACILITY = "placing-facility"


class PolygonDrawHandler:
    """Collects polygon vertices and owns the sketch layers it puts on the map."""

    def __init__(self, surface: MapSurface, on_created: Callable[[dict], None], color: str = "#2563eb"):
        self.surface = surface
        self.on_created = on_created
        self.color = color
        self.enabled = False
        self.vertices: List[List[float]] = []  # [lng, lat]
        self._owned: List[Layer] = []
        self._markers: Optional[Layer] = None
        self._guide: Optional[Layer] = None

    def enable(self) -> None:
        if self.enabled:
            return
        self.enabled = True
        self._markers = self._own(Layer("draw-vertices", SKETCH_Z_INDEX + 1))
        self._guide = self._own(Layer("draw-guide", SKETCH_Z_INDEX))

    def _own(self, layer: Layer) -> Layer:
        self._owned.append(layer)
        return self.surface.add_layer(layer)

    def add_vertex(self, lat: float, lng: float) -> None:
        if not self.enabled:
            raise RuntimeError("draw handler is not enabled")
        self.vertices.append([lng, lat])
        self._markers.add({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [lng, lat]},
            "properties": {"vertex": len(self.vertices) - 1},
        })
        self._guide.clear()
        if len(self.vertices) >= 2:
            self._guide.add({
                "type": "Feature",
                "geometry": {"type": "LineString", "coordinates": [list(v) for v in self.vertices]},
                "properties": {"style": {"color": self.color, "dashArray": "4 4"}},
            })

    def can_complete(self) -> bool:
        return self.enabled and len(self.vertices) >= 3

    def complete(self) -> bool:
        if not self.can_complete():
            return False
        ring = [list(v) for v in self.vertices] + [list(self.vertices[0])]
        geometry = {"type": "Polygon", "coordinates": [ring]}
        self.disable()
        self.on_created(geometry)
        return True

    def disable(self) -> None:
        # 自分が追加したレイヤーだけを外す
        for layer in self._owned:
            self.surface.remove_layer(layer)
        self._owned.clear()
        self._markers = self._guide = None
        self.vertices = []
        self.enabled = False


class InteractionModeController:
    """idle / drawing-district / drawing-park / placing-facility state machine.

    Events:
        ``mode_changed(mode)``
        ``district_drawn(geometry)``, ``park_drawn(geometry)``
        ``facility_placed(lat, lng)``
    """

    def __init__(self, surface: MapSurface):
        self.surface = surface
        self.events = Emitter()
        self._mode = Mode.IDLE
        self._draw: Optional[PolygonDrawHandler] = None
        self._click_handle: Optional[int] = None

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def draw_handler(self) -> Optional[PolygonDrawHandler]:
        return self._draw

    def _set_mode(self, mode: Mode) -> None:
        if mode is self._mode:
            return
        logger.debug("mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode
        self.events.emit("mode_changed", mode)

    def _teardown(self) -> None:
        if self._draw is not None:
            self._draw.disable()
            self._draw = None
        if self._click_handle is not None:
            self.surface.off_click(self._click_handle)
            self._click_handle = None

    def cancel(self) -> None:
        self._teardown()
        self._set_mode(Mode.IDLE)

    def _start_polygon(self, mode: Mode, event: str, color: str) -> None:
        self._teardown()

        def created(geometry: dict) -> None:
            self._draw = None
            self._set_mode(Mode.IDLE)
            self.events.emit(event, geometry)

        self._draw = PolygonDrawHandler(self.surface, created, color=color)
        self._draw.enable()
        self._set_mode(mode)

    def start_district_draw(self) -> None:
        self._start_polygon(Mode.DRAWING_DISTRICT, "district_drawn", "#7c3aed")

    def start_park_draw(self) -> None:
        self._start_polygon(Mode.DRAWING_PARK, "park_drawn", "#16a34a")

    def start_facility_placement(self) -> None:
        self._teardown()

        def placed(lat: float, lng: float) -> None:
            self._click_handle = None
            self._set_mode(Mode.IDLE)
            self.events.emit("facility_placed", lat, lng)

        self._click_handle = self.surface.once_click(placed)
        self._set_mode(Mode.PLACING_FACILITY)

    # map gestures while drawing

    def add_vertex(self, lat: float, lng: float) -> bool:
        if self._draw is None:
            return False
        self._draw.add_vertex(lat, lng)
        return True

    def finish_draw(self) -> bool:
        if self._draw is None:
            return False
        return self._draw.complete()
