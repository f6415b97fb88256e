"""Map page state: entity store, filters, interaction modes and layer rendering."""
from .client import ApiError, ParkMapClient
from .controller import MapController
from .filters import FilterState
from .forms import DistrictForm, FacilityForm, FormMode, ParkForm
from .modes import InteractionModeController, Mode
from .popups import EntityIntent
from .render import MapRenderer
from .store import EntityStore
from .surface import Layer, MapSurface

__all__ = [
    "ApiError",
    "DistrictForm",
    "EntityIntent",
    "EntityStore",
    "FacilityForm",
    "FilterState",
    "FormMode",
    "InteractionModeController",
    "Layer",
    "MapController",
    "MapRenderer",
    "MapSurface",
    "Mode",
    "ParkForm",
    "ParkMapClient",
]
