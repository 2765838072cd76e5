# hub/routers/firms.py
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from hub.core.enums import UserRole
from hub.database import get_db
from hub.models import B2BSale, Firm, User
from hub.schemas.crm import FirmCreate, FirmDetail, FirmRead, FirmUpdate
from hub.security import get_current_user, require_admin
from hub.utils.dates import apply_date_range

logger = logging.getLogger(__name__)
router = APIRouter()

DEFAULT_LOCK_REASON = "Payment issue"


def _get_or_404(db: Session, firm_id: int) -> Firm:
    firm = db.query(Firm).filter(Firm.id == firm_id).first()
    if not firm:
        raise HTTPException(status_code=404, detail="Firm not found")
    return firm


def _commit_unique(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A firm with this name already exists")


def _sale_count(db: Session, firm_id: int) -> int:
    return db.query(func.count(B2BSale.id)).filter(B2BSale.firm_id == firm_id).scalar() or 0


def _read(firm: Firm, sale_count: int = 0) -> FirmRead:
    f_read = FirmRead.model_validate(firm)
    f_read.sale_count = sale_count
    return f_read


# --------------------------------------------------------------------------
# 1. LIST FIRMS
# --------------------------------------------------------------------------
@router.get("/", response_model=List[FirmRead])
def read_firms(
    search: str = "",
    locked: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(Firm)
    if search:
        query = query.filter(Firm.name.ilike(f"%{search.strip()}%"))
    if locked:
        query = query.filter(Firm.is_locked == True)

    counts = dict(
        db.query(B2BSale.firm_id, func.count(B2BSale.id)).group_by(B2BSale.firm_id).all()
    )
    return [_read(f, counts.get(f.id, 0)) for f in query.order_by(Firm.name).all()]


# --------------------------------------------------------------------------
# 2. DETAIL WITH SALE HISTORY
# --------------------------------------------------------------------------
@router.get("/{firm_id}", response_model=FirmDetail)
def read_firm(
    firm_id: int,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    processed: Optional[bool] = None,
    product: str = "",
    db: Session = Depends(get_db),
):
    firm = _get_or_404(db, firm_id)

    query = (
        db.query(B2BSale)
        .options(selectinload(B2BSale.items))
        .filter(B2BSale.firm_id == firm_id)
    )
    query = apply_date_range(query, B2BSale.created_at, date_from, date_to)
    if processed is not None:
        query = query.filter(B2BSale.is_processed == processed)

    sales = query.order_by(B2BSale.created_at.desc(), B2BSale.id.desc()).all()

    # Product name filter runs over the items of each sale
    if product:
        needle = product.strip().lower()
        sales = [
            s for s in sales
            if any(needle in (item.product_name or "").lower() for item in s.items)
        ]

    return {"firm": _read(firm, _sale_count(db, firm_id)), "sales": sales}


# --------------------------------------------------------------------------
# 3. CREATE
# --------------------------------------------------------------------------
@router.post("/", response_model=FirmRead, status_code=201)
def create_firm(
    firm_in: FirmCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = (firm_in.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Firm name is required")

    data = firm_in.model_dump()
    data["name"] = name
    firm = Firm(**data)
    db.add(firm)
    _commit_unique(db)
    db.refresh(firm)
    return _read(firm)


# --------------------------------------------------------------------------
# 4. UPDATE / LOCK / UNLOCK
# --------------------------------------------------------------------------
@router.put("/{firm_id}", response_model=FirmRead)
def update_firm(
    firm_id: int,
    firm_in: FirmUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    firm = _get_or_404(db, firm_id)

    if firm_in.action in ("lock", "unlock"):
        if current_user.role != UserRole.ADMIN:
            raise HTTPException(status_code=403, detail="Admin only")
        if firm_in.action == "lock":
            firm.is_locked = True
            firm.lock_reason = firm_in.lock_reason or DEFAULT_LOCK_REASON
        else:
            firm.is_locked = False
            firm.lock_reason = None
        db.commit()
        db.refresh(firm)
        logger.info("Firm %s %sed by %s", firm_id, firm_in.action, current_user.username)
        return _read(firm, _sale_count(db, firm_id))

    update_data = firm_in.model_dump(exclude_unset=True, exclude={"action", "lock_reason"})
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in update_data:
        update_data["name"] = (update_data["name"] or "").strip()
        if not update_data["name"]:
            raise HTTPException(status_code=400, detail="Firm name cannot be empty")

    for field, value in update_data.items():
        setattr(firm, field, value)

    _commit_unique(db)
    db.refresh(firm)
    return _read(firm, _sale_count(db, firm_id))


# --------------------------------------------------------------------------
# 5. DELETE (only firms without sales; lock them otherwise)
# --------------------------------------------------------------------------
@router.delete("/{firm_id}")
def delete_firm(
    firm_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    firm = _get_or_404(db, firm_id)

    if _sale_count(db, firm_id) > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete firm with existing sales. Lock it instead.",
        )

    db.delete(firm)
    db.commit()
    logger.info("Firm %s deleted by %s", firm_id, current_user.username)
    return {"success": True}
