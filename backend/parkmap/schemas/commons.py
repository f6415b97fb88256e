# backend/parkmap/schemas/commons.py
from pydantic import BaseModel, field_validator
from typing import List, Literal, get_args

FacilityType = Literal[
    "SPORTS_PLAYGROUND",
    "CHILD_PLAYGROUND",
    "NTO",
    "TOILET",
    "CHILL",
    "CHILDREN_ROOM",
]
FACILITY_TYPES: tuple[str, ...] = get_args(FacilityType)


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[List[float]]]  # [[[lng, lat], ...]] 外輪 + 穴

    @field_validator("coordinates")
    @classmethod
    def _closed_rings(cls, rings):
        if not rings:
            raise ValueError("polygon needs at least one ring")
        for ring in rings:
            if len(ring) < 4:
                raise ValueError("each ring needs at least 4 positions")
            if any(len(pos) < 2 for pos in ring):
                raise ValueError("positions must be [lng, lat]")
            if ring[0][:2] != ring[-1][:2]:
                raise ValueError("rings must be closed (first position == last position)")
        return rings
