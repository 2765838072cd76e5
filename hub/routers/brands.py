# hub/routers/brands.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hub.database import get_db
from hub.models import Brand, Product, User
from hub.schemas.products import BrandCreate, BrandRead
from hub.security import get_current_user, require_admin

logger = logging.getLogger(__name__)
router = APIRouter()


def _product_counts(db: Session) -> dict:
    rows = (
        db.query(Product.brand_id, func.count(Product.id))
        .filter(Product.is_active == True, Product.brand_id.isnot(None))
        .group_by(Product.brand_id)
        .all()
    )
    return dict(rows)


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Brand name is required")
    return name


def _commit_unique(db: Session):
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="A brand with this name already exists")


@router.get("/", response_model=List[BrandRead])
def read_brands(db: Session = Depends(get_db)):
    counts = _product_counts(db)
    brands = db.query(Brand).order_by(Brand.name).all()
    return [
        BrandRead(id=b.id, name=b.name, product_count=counts.get(b.id, 0))
        for b in brands
    ]


@router.post("/", response_model=BrandRead, status_code=201)
def create_brand(
    brand_in: BrandCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    brand = Brand(name=_clean_name(brand_in.name))
    db.add(brand)
    _commit_unique(db)
    db.refresh(brand)
    return BrandRead(id=brand.id, name=brand.name)


@router.put("/{brand_id}", response_model=BrandRead)
def update_brand(
    brand_id: int,
    brand_in: BrandCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise HTTPException(status_code=404, detail="Brand not found")

    brand.name = _clean_name(brand_in.name)
    _commit_unique(db)
    db.refresh(brand)
    return BrandRead(id=brand.id, name=brand.name, product_count=_product_counts(db).get(brand.id, 0))


@router.delete("/{brand_id}")
def delete_brand(
    brand_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise HTTPException(status_code=404, detail="Brand not found")

    # Products keep existing without a brand
    db.query(Product).filter(Product.brand_id == brand_id).update({Product.brand_id: None})
    db.delete(brand)
    db.commit()
    logger.info("Brand %s deleted by %s", brand_id, current_user.username)
    return {"success": True}
