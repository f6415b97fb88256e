# backend/parkmap/mapstate/surface.py
"""In-memory stand-in for the browser map.

Holds named GeoJSON layers ordered by z-index and one-shot click listeners.
The renderer and the draw tools only ever touch layers they created.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Dict, List, Optional

ClickCallback = Callable[[float, float], None]


@dataclass(eq=False)
class Layer:
    name: str
    z_index: int = 400
    clustered: bool = False
    features: List[dict] = field(default_factory=list)

    def clear(self) -> None:
        self.features.clear()

    def add(self, feature: dict) -> None:
        self.features.append(feature)

    def to_geojson(self) -> dict:
        return {"type": "FeatureCollection", "features": list(self.features)}


class MapSurface:
    def __init__(self):
        self._layers: List[Layer] = []
        self._click_listeners: Dict[int, ClickCallback] = {}
        self._handles = count(1)

    # layers

    def add_layer(self, layer: Layer) -> Layer:
        if layer not in self._layers:
            self._layers.append(layer)
        return layer

    def remove_layer(self, layer: Layer) -> None:
        # 同一性で比較（名前の一致では消さない）
        self._layers = [l for l in self._layers if l is not layer]

    def has_layer(self, layer: Layer) -> bool:
        return any(l is layer for l in self._layers)

    def get_layer(self, name: str) -> Optional[Layer]:
        return next((l for l in self._layers if l.name == name), None)

    @property
    def layers(self) -> List[Layer]:
        return sorted(self._layers, key=lambda l: l.z_index)

    # one-shot click listeners

    def once_click(self, callback: ClickCallback) -> int:
        handle = next(self._handles)
        self._click_listeners[handle] = callback
        return handle

    def off_click(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._click_listeners.pop(handle, None)

    @property
    def click_listener_count(self) -> int:
        return len(self._click_listeners)

    def click(self, lat: float, lng: float) -> None:
        listeners = list(self._click_listeners.values())
        self._click_listeners.clear()
        for cb in listeners:
            cb(lat, lng)
