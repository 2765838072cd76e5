# hub/routers/suppliers.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from hub.database import get_db
from hub.models import Product, ProductSupplier, Supplier, User
from hub.schemas.products import (
    SupplierCreate, SupplierDetail, SupplierProductRef, SupplierRead, SupplierUpdate,
)
from hub.security import get_current_user, require_admin

logger = logging.getLogger(__name__)
router = APIRouter()


def _product_counts(db: Session) -> dict:
    rows = (
        db.query(Product.current_supplier_id, func.count(Product.id))
        .filter(Product.is_active == True, Product.current_supplier_id.isnot(None))
        .group_by(Product.current_supplier_id)
        .all()
    )
    return dict(rows)


def _get_or_404(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


def _commit_unique(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A supplier with this name already exists")


def _read(supplier: Supplier, count: int = 0) -> SupplierRead:
    s_read = SupplierRead.model_validate(supplier)
    s_read.product_count = count
    return s_read


@router.get("/", response_model=List[SupplierRead])
def read_suppliers(db: Session = Depends(get_db)):
    counts = _product_counts(db)
    suppliers = db.query(Supplier).order_by(Supplier.name).all()
    return [_read(s, counts.get(s.id, 0)) for s in suppliers]


@router.get("/{supplier_id}", response_model=SupplierDetail)
def read_supplier(supplier_id: int, db: Session = Depends(get_db)):
    supplier = _get_or_404(db, supplier_id)

    current_products = (
        db.query(Product)
        .filter(Product.current_supplier_id == supplier_id, Product.is_active == True)
        .order_by(Product.name)
        .all()
    )
    links = (
        db.query(ProductSupplier)
        .options(joinedload(ProductSupplier.supplier))
        .filter(ProductSupplier.supplier_id == supplier_id)
        .all()
    )
    return {
        "supplier": _read(supplier, len(current_products)),
        "current_products": [
            SupplierProductRef(
                id=p.id, name=p.name, image_url=p.image_url,
                list_price=p.list_price, discount_percent=p.discount_percent,
                currency=p.currency,
            )
            for p in current_products
        ],
        "all_product_links": links,
    }


@router.post("/", response_model=SupplierRead, status_code=201)
def create_supplier(
    supplier_in: SupplierCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = (supplier_in.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Supplier name is required")

    supplier = Supplier(
        name=name,
        contact_info=supplier_in.contact_info,
        vade_days=supplier_in.vade_days or 0,
        notes=supplier_in.notes,
    )
    db.add(supplier)
    _commit_unique(db)
    db.refresh(supplier)
    return _read(supplier)


@router.put("/{supplier_id}", response_model=SupplierRead)
def update_supplier(
    supplier_id: int,
    supplier_in: SupplierUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    supplier = _get_or_404(db, supplier_id)

    update_data = supplier_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in update_data:
        update_data["name"] = (update_data["name"] or "").strip()
        if not update_data["name"]:
            raise HTTPException(status_code=400, detail="Supplier name cannot be empty")
    if "vade_days" in update_data and update_data["vade_days"] is None:
        update_data["vade_days"] = 0

    for field, value in update_data.items():
        setattr(supplier, field, value)

    _commit_unique(db)
    db.refresh(supplier)
    return _read(supplier, _product_counts(db).get(supplier.id, 0))


@router.delete("/{supplier_id}")
def delete_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    supplier = _get_or_404(db, supplier_id)

    db.query(Product).filter(Product.current_supplier_id == supplier_id).update(
        {Product.current_supplier_id: None}
    )
    db.query(ProductSupplier).filter(ProductSupplier.supplier_id == supplier_id).delete()
    db.delete(supplier)
    db.commit()
    logger.info("Supplier %s deleted by %s", supplier_id, current_user.username)
    return {"success": True}
