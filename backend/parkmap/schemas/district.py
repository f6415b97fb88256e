# backend/parkmap/schemas/district.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from .commons import PolygonGeometry


class DistrictIn(BaseModel):
    name: str
    geometry: PolygonGeometry
    area: Optional[float] = None


class DistrictOut(BaseModel):
    id: int
    name: Optional[str] = None
    geometry: Optional[PolygonGeometry] = None
    area: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DistrictUpdate(BaseModel):
    name: Optional[str] = None
    geometry: Optional[PolygonGeometry] = None
    area: Optional[float] = None
