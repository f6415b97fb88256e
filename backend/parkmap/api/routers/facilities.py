import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parkmap.api.deps import require_admin
from parkmap.db import get_db
from parkmap.models.facility import Facility
from parkmap.models.park import Park
from parkmap.schemas.commons import FacilityType
from parkmap.schemas.facility import FacilityIn, FacilityOut, FacilityUpdate
from parkmap.services.storage.photos import delete_photo

logger = logging.getLogger(__name__)
router = APIRouter()


def _out(f: Facility) -> FacilityOut:
    return FacilityOut(
        id=f.id,
        name=f.name,
        type=f.type,
        latitude=f.latitude,
        longitude=f.longitude,
        park_id=f.park_id,
        photo=f.photo,
        external_id=f.external_id,
        description=f.description,
        area=f.area,
        maf_count=f.maf_count,
        type_coverage=f.type_coverage,
        contract_action=f.contract_action,
        contract_with=f.contract_with,
        contract_term=f.contract_term,
        created_at=f.created_at,
        updated_at=f.updated_at,
    )


def _check_park(db: Session, park_id) -> None:
    if park_id is not None and not db.get(Park, park_id):
        raise HTTPException(status_code=400, detail="park not found")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error %s facility", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action} facility")


@router.get("")
@router.get("/")
def list_facilities(
    park_id: int | None = None,
    type: FacilityType | None = None,
    db: Session = Depends(get_db),
) -> list[FacilityOut]:
    q = db.query(Facility)
    if park_id is not None:
        q = q.filter(Facility.park_id == park_id)
    if type is not None:
        q = q.filter(Facility.type == type)
    return [_out(f) for f in q.order_by(Facility.id.asc()).all()]


@router.post("", dependencies=[Depends(require_admin)])
@router.post("/", dependencies=[Depends(require_admin)])
def create_facility(payload: FacilityIn, db: Session = Depends(get_db)) -> FacilityOut:
    _check_park(db, payload.park_id)
    obj = Facility(**payload.model_dump())
    db.add(obj)
    _commit(db, "create")
    db.refresh(obj)
    logger.info("created facility %s (%s) in park %s", obj.id, obj.type, obj.park_id)
    return _out(obj)


@router.get("/{facility_id}")
def get_facility(facility_id: int, db: Session = Depends(get_db)) -> FacilityOut:
    f = db.get(Facility, facility_id)
    if not f:
        raise HTTPException(status_code=404, detail="facility not found")
    return _out(f)


@router.put("/{facility_id}", dependencies=[Depends(require_admin)])
def update_facility(facility_id: int, payload: FacilityUpdate, db: Session = Depends(get_db)) -> FacilityOut:
    f = db.get(Facility, facility_id)
    if not f:
        raise HTTPException(status_code=404, detail="facility not found")
    changes = payload.model_dump(exclude_unset=True)
    if "park_id" in changes:
        _check_park(db, changes["park_id"])
    old_photo = f.photo
    for key, value in changes.items():
        setattr(f, key, value)
    db.add(f)
    _commit(db, "update")
    db.refresh(f)
    # 写真が差し替えられたら旧ファイルを削除
    if old_photo and "photo" in changes and changes["photo"] != old_photo:
        delete_photo(old_photo)
    return _out(f)


@router.delete("/{facility_id}", dependencies=[Depends(require_admin)])
def delete_facility(facility_id: int, db: Session = Depends(get_db)):
    f = db.get(Facility, facility_id)
    if not f:
        raise HTTPException(status_code=404, detail="facility not found")
    photo = f.photo
    db.delete(f)
    _commit(db, "delete")
    delete_photo(photo)
    return {"ok": True}
