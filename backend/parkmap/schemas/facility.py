# backend/parkmap/schemas/facility.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from parkmap.services.contract.term import ContractTermError, normalize_contract_term
from .commons import FacilityType


def _contract_term(v: Optional[str]) -> Optional[str]:
    try:
        return normalize_contract_term(v)
    except ContractTermError as e:
        raise ValueError(str(e)) from e


class FacilityIn(BaseModel):
    name: str
    type: FacilityType
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    park_id: Optional[int] = None
    photo: Optional[str] = None
    external_id: Optional[str] = None
    description: Optional[str] = None
    area: Optional[str] = None
    maf_count: Optional[int] = Field(default=None, ge=0)
    type_coverage: Optional[str] = None
    contract_action: Optional[str] = None
    contract_with: Optional[str] = None
    contract_term: Optional[str] = None  # "[YYYY-MM-DD,YYYY-MM-DD)"

    normalize_term = field_validator("contract_term")(_contract_term)


class FacilityOut(BaseModel):
    id: int
    name: Optional[str] = None
    type: Optional[FacilityType] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    park_id: Optional[int] = None
    photo: Optional[str] = None
    external_id: Optional[str] = None
    description: Optional[str] = None
    area: Optional[str] = None
    maf_count: Optional[int] = None
    type_coverage: Optional[str] = None
    contract_action: Optional[str] = None
    contract_with: Optional[str] = None
    contract_term: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FacilityUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[FacilityType] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    park_id: Optional[int] = None
    photo: Optional[str] = None
    external_id: Optional[str] = None
    description: Optional[str] = None
    area: Optional[str] = None
    maf_count: Optional[int] = Field(default=None, ge=0)
    type_coverage: Optional[str] = None
    contract_action: Optional[str] = None
    contract_with: Optional[str] = None
    contract_term: Optional[str] = None

    normalize_term = field_validator("contract_term")(_contract_term)
