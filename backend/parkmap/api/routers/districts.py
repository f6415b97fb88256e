import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from parkmap.api.deps import require_admin
from parkmap.db import get_db
from parkmap.models.district import District
from parkmap.models.park import Park
from parkmap.schemas.district import DistrictIn, DistrictOut, DistrictUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


def _out(d: District) -> DistrictOut:
    return DistrictOut(
        id=d.id,
        name=d.name,
        geometry=d.geometry,
        area=d.area,
        created_at=d.created_at,
        updated_at=d.updated_at,
    )


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="District with this name already exists")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error %s district", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action} district")


@router.get("")
@router.get("/")
def list_districts(db: Session = Depends(get_db)) -> list[DistrictOut]:
    rows = db.query(District).order_by(District.id.asc()).all()
    return [_out(d) for d in rows]


@router.post("", dependencies=[Depends(require_admin)])
@router.post("/", dependencies=[Depends(require_admin)])
def create_district(payload: DistrictIn, db: Session = Depends(get_db)) -> DistrictOut:
    obj = District(
        name=payload.name,
        geometry=payload.geometry.model_dump(),
        area=payload.area,
    )
    db.add(obj)
    _commit(db, "create")
    db.refresh(obj)
    logger.info("created district %s (%s)", obj.id, obj.name)
    return _out(obj)


@router.get("/{district_id}")
def get_district(district_id: int, db: Session = Depends(get_db)) -> DistrictOut:
    d = db.get(District, district_id)
    if not d:
        raise HTTPException(status_code=404, detail="district not found")
    return _out(d)


@router.put("/{district_id}", dependencies=[Depends(require_admin)])
def update_district(district_id: int, payload: DistrictUpdate, db: Session = Depends(get_db)) -> DistrictOut:
    d = db.get(District, district_id)
    if not d:
        raise HTTPException(status_code=404, detail="district not found")
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(d, key, value)
    db.add(d)
    _commit(db, "update")
    db.refresh(d)
    return _out(d)


@router.delete("/{district_id}", dependencies=[Depends(require_admin)])
def delete_district(district_id: int, db: Session = Depends(get_db)):
    d = db.get(District, district_id)
    if not d:
        raise HTTPException(status_code=404, detail="district not found")
    # 公園は削除せず district_id のみ解除
    db.query(Park).filter(Park.district_id == district_id).update(
        {Park.district_id: None}, synchronize_session=False
    )
    db.delete(d)
    _commit(db, "delete")
    logger.info("deleted district %s", district_id)
    return {"ok": True}
