# backend/parkmap/schemas/park.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from .commons import PolygonGeometry


class ParkIn(BaseModel):
    name: str
    geometry: PolygonGeometry
    area: Optional[float] = None
    description: Optional[str] = None
    balance_holder: Optional[str] = None
    district_id: Optional[int] = None


class ParkOut(BaseModel):
    id: int
    name: Optional[str] = None
    geometry: Optional[PolygonGeometry] = None
    area: Optional[float] = None
    description: Optional[str] = None
    balance_holder: Optional[str] = None
    district_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ParkUpdate(BaseModel):
    name: Optional[str] = None
    geometry: Optional[PolygonGeometry] = None
    area: Optional[float] = None
    description: Optional[str] = None
    balance_holder: Optional[str] = None
    district_id: Optional[int] = None
