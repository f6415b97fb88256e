import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parkmap.api.deps import require_admin
from parkmap.db import get_db
from parkmap.models.district import District
from parkmap.models.facility import Facility
from parkmap.models.park import Park
from parkmap.schemas.park import ParkIn, ParkOut, ParkUpdate
from parkmap.services.storage.photos import delete_photo

logger = logging.getLogger(__name__)
router = APIRouter()


def _out(p: Park) -> ParkOut:
    return ParkOut(
        id=p.id,
        name=p.name,
        geometry=p.geometry,
        area=p.area,
        description=p.description,
        balance_holder=p.balance_holder,
        district_id=p.district_id,
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def _check_district(db: Session, district_id) -> None:
    if district_id is not None and not db.get(District, district_id):
        raise HTTPException(status_code=400, detail="district not found")


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error %s park", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action} park")


@router.get("")
@router.get("/")
def list_parks(district_id: int | None = None, db: Session = Depends(get_db)) -> list[ParkOut]:
    q = db.query(Park)
    if district_id is not None:
        q = q.filter(Park.district_id == district_id)
    return [_out(p) for p in q.order_by(Park.id.asc()).all()]


@router.post("", dependencies=[Depends(require_admin)])
@router.post("/", dependencies=[Depends(require_admin)])
def create_park(payload: ParkIn, db: Session = Depends(get_db)) -> ParkOut:
    _check_district(db, payload.district_id)
    obj = Park(
        name=payload.name,
        geometry=payload.geometry.model_dump(),
        area=payload.area,
        description=payload.description,
        balance_holder=payload.balance_holder,
        district_id=payload.district_id,
    )
    db.add(obj)
    _commit(db, "create")
    db.refresh(obj)
    logger.info("created park %s (%s)", obj.id, obj.name)
    return _out(obj)


@router.get("/{park_id}")
def get_park(park_id: int, db: Session = Depends(get_db)) -> ParkOut:
    p = db.get(Park, park_id)
    if not p:
        raise HTTPException(status_code=404, detail="park not found")
    return _out(p)


@router.put("/{park_id}", dependencies=[Depends(require_admin)])
def update_park(park_id: int, payload: ParkUpdate, db: Session = Depends(get_db)) -> ParkOut:
    p = db.get(Park, park_id)
    if not p:
        raise HTTPException(status_code=404, detail="park not found")
    changes = payload.model_dump(exclude_unset=True)
    if "district_id" in changes:
        _check_district(db, changes["district_id"])
    for key, value in changes.items():
        setattr(p, key, value)
    db.add(p)
    _commit(db, "update")
    db.refresh(p)
    return _out(p)


@router.delete("/{park_id}", dependencies=[Depends(require_admin)])
def delete_park(park_id: int, db: Session = Depends(get_db)):
    p = db.get(Park, park_id)
    if not p:
        raise HTTPException(status_code=404, detail="park not found")
    # 施設も一緒に削除（写真ファイルはコミット後に削除）
    facilities = db.query(Facility).filter(Facility.park_id == park_id).all()
    photos = [f.photo for f in facilities if f.photo]
    for f in facilities:
        db.delete(f)
    db.delete(p)
    _commit(db, "delete")
    for url in photos:
        delete_photo(url)
    logger.info("deleted park %s with %d facilities", park_id, len(facilities))
    return {"ok": True, "deleted_facilities": len(facilities)}
