# hub/routers/products.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, joinedload

from hub.core.config import get_settings
from hub.core.enums import PriceType
from hub.crud.products import get_product, get_variation, sync_current_supplier
from hub.database import get_db
from hub.models import (
    Product, ProductSpecImage, ProductSupplier, ProductVariation, User, VariationGroup,
)
from hub.schemas.products import (
    PriceResult, PricingRead, ProductCreate, ProductDetail, ProductList, ProductRead,
    ProductResponse, ProductSupplierRead, ProductUpdate, SpecImageCreate, SpecImageRead,
    VariationGroupRead, VariationRead, VariationsRead, VariationsSave,
)
from hub.security import require_admin
from hub.services.pricing import CurrencyRates, load_currency_rates, price_product

logger = logging.getLogger(__name__)
router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def _compute_product_read(p: Product, rates: CurrencyRates) -> ProductRead:
    """ORM Product -> ProductRead with price 1 (and price 2) breakdowns attached."""
    p_read = ProductRead.model_validate(p)
    p_read.pricing = PricingRead(**price_product(p, rates).as_dict())
    if p.has_price2:
        p_read.pricing2 = PricingRead(**price_product(p, rates, price_type=PriceType.PRICE2).as_dict())
    return p_read


def _get_or_404(db: Session, product_id: int, active_only: bool = False) -> Product:
    product = get_product(db, product_id, active_only=active_only)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _base_query(db: Session):
    return db.query(Product).options(
        joinedload(Product.brand),
        joinedload(Product.supplier),
        joinedload(Product.variations),
    )


# -----------------------------
# 1. List products
# -----------------------------
@router.get("/", response_model=ProductList)
def read_products(
    search: str = "",
    brand_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    active: bool = True,
    db: Session = Depends(get_db),
):
    query = _base_query(db)
    if active:
        query = query.filter(Product.is_active == True)
    if brand_id:
        query = query.filter(Product.brand_id == brand_id)
    if supplier_id:
        query = query.filter(Product.current_supplier_id == supplier_id)
    if search:
        query = query.filter(Product.name.ilike(f"%{search.strip()}%"))

    rates = load_currency_rates(db)
    products_db = query.order_by(Product.name).all()
    return {"products": [_compute_product_read(p, rates) for p in products_db]}


# -----------------------------
# 2. Fast search for the sale screen (text or scanned id)
# -----------------------------
@router.get("/search", response_model=ProductList)
def search_products(
    q: str = "",
    id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    rates = load_currency_rates(db)

    if id:
        product = get_product(db, id, active_only=True)
        return {"products": [_compute_product_read(product, rates)] if product else []}

    q = q.strip()
    if len(q) < 2:
        return {"products": []}

    products_db = (
        _base_query(db)
        .filter(Product.is_active == True, Product.name.ilike(f"%{q}%"))
        .order_by(Product.name)
        .limit(20)
        .all()
    )
    return {"products": [_compute_product_read(p, rates) for p in products_db]}


# -----------------------------
# 3. Detail
# -----------------------------
@router.get("/{product_id}", response_model=ProductDetail)
def read_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_or_404(db, product_id)
    rates = load_currency_rates(db)

    links = (
        db.query(ProductSupplier)
        .options(joinedload(ProductSupplier.supplier))
        .filter(ProductSupplier.product_id == product_id)
        .all()
    )
    return {
        "product": _compute_product_read(product, rates),
        "variations": [VariationRead.model_validate(v) for v in product.variations],
        "groups": [VariationGroupRead.model_validate(g) for g in product.variation_groups],
        "suppliers": [ProductSupplierRead.model_validate(link) for link in links],
        "spec_images": [SpecImageRead.model_validate(img) for img in product.spec_images],
    }


@router.get("/{product_id}/price", response_model=PriceResult)
def read_product_price(
    product_id: int,
    variation_id: Optional[int] = None,
    price_type: PriceType = PriceType.PRICE1,
    db: Session = Depends(get_db),
):
    """Sale price for one product line (variation override and price 1/2 applied)."""
    product = _get_or_404(db, product_id)
    variation = None
    if variation_id:
        variation = get_variation(db, product_id, variation_id)
        if not variation:
            raise HTTPException(status_code=404, detail="Variation not found")

    breakdown = price_product(product, load_currency_rates(db), variation, price_type)
    return {
        "product_id": product.id,
        "variation_id": variation_id,
        "price_type": price_type,
        "pricing": breakdown.as_dict(),
    }


# -----------------------------
# 4. Create (admin)
# -----------------------------
@router.post("/", response_model=ProductResponse, status_code=201)
def create_product(
    prod_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    if not prod_in.name or not prod_in.name.strip():
        raise HTTPException(status_code=400, detail="Product name is required")

    settings = get_settings()
    new_prod = Product(
        name=prod_in.name.strip(),
        description=prod_in.description,
        netsis_code=prod_in.netsis_code,
        image_url=prod_in.image_url,
        brand_id=prod_in.brand_id,
        current_supplier_id=prod_in.current_supplier_id,
        currency=prod_in.currency,
        list_price=prod_in.list_price,
        discount_percent=prod_in.discount_percent,
        kdv_percent=prod_in.kdv_percent if prod_in.kdv_percent is not None else settings.default_kdv_percent,
        profit_percent=(
            prod_in.profit_percent if prod_in.profit_percent is not None else settings.default_profit_percent
        ),
        has_price2=prod_in.has_price2,
        price2_label=prod_in.price2_label or "Price 2",
        list_price2=prod_in.list_price2,
        discount_percent2=prod_in.discount_percent2,
        is_active=True,
    )
    db.add(new_prod)
    db.flush()

    # Supplier assigned -> keep the product/supplier price link in sync
    sync_current_supplier(db, new_prod)

    db.commit()
    logger.info("Product %s created by %s", new_prod.id, current_user.username)
    product = _get_or_404(db, new_prod.id)
    return {"product": _compute_product_read(product, load_currency_rates(db))}


# -----------------------------
# 5. Update (admin)
# -----------------------------
@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    prod_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    product = _get_or_404(db, product_id)

    update_data = prod_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Product name cannot be empty")

    for field, value in update_data.items():
        if field == "name":
            value = value.strip()
        if field == "price2_label" and not value:
            value = "Price 2"
        setattr(product, field, value)

    if "current_supplier_id" in update_data or "list_price" in update_data or "discount_percent" in update_data:
        sync_current_supplier(db, product)

    db.commit()
    product = _get_or_404(db, product_id)
    return {"product": _compute_product_read(product, load_currency_rates(db))}


# -----------------------------
# 6. Soft delete (admin)
# -----------------------------
@router.delete("/{product_id}", response_model=ProductResponse)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    product = _get_or_404(db, product_id)
    product.is_active = False  # Soft delete, sale history keeps pointing at it
    db.commit()
    logger.info("Product %s deactivated by %s", product_id, current_user.username)
    product = _get_or_404(db, product_id)
    return {"product": _compute_product_read(product, load_currency_rates(db))}


# -----------------------------
# 7. Variations
# -----------------------------
@router.get("/{product_id}/variations", response_model=VariationsRead)
def read_variations(product_id: int, db: Session = Depends(get_db)):
    variations = (
        db.query(ProductVariation)
        .filter(ProductVariation.product_id == product_id)
        .order_by(ProductVariation.sort_order)
        .all()
    )
    groups = (
        db.query(VariationGroup)
        .filter(VariationGroup.product_id == product_id)
        .order_by(VariationGroup.sort_order)
        .all()
    )
    return {"variations": variations, "groups": groups}


@router.post("/{product_id}/variations", response_model=VariationsRead)
def save_variations(
    product_id: int,
    payload: VariationsSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Bulk replace: existing variations and groups are swapped for the payload in one transaction."""
    _get_or_404(db, product_id)

    db.query(ProductVariation).filter(ProductVariation.product_id == product_id).delete()
    db.query(VariationGroup).filter(VariationGroup.product_id == product_id).delete()

    for i, g in enumerate(payload.groups):
        db.add(VariationGroup(product_id=product_id, name=g.name, values=g.values, sort_order=i))

    for i, v in enumerate(payload.variations):
        db.add(ProductVariation(
            product_id=product_id,
            variation_label=v.variation_label,
            has_custom_price=v.has_custom_price,
            list_price=v.list_price or None,
            discount_percent=v.discount_percent or None,
            list_price2=v.list_price2 or None,
            discount_percent2=v.discount_percent2 or None,
            sku=v.sku,
            sort_order=i,
        ))

    db.commit()
    db.expire_all()
    return read_variations(product_id, db)


# -----------------------------
# 8. Spec images (stored as URLs)
# -----------------------------
@router.get("/{product_id}/spec-images", response_model=List[SpecImageRead])
def read_spec_images(product_id: int, db: Session = Depends(get_db)):
    return (
        db.query(ProductSpecImage)
        .filter(ProductSpecImage.product_id == product_id)
        .order_by(ProductSpecImage.sort_order)
        .all()
    )


@router.post("/{product_id}/spec-images", response_model=SpecImageRead, status_code=201)
def add_spec_image(
    product_id: int,
    image_in: SpecImageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    _get_or_404(db, product_id)
    if not image_in.image_url.strip():
        raise HTTPException(status_code=400, detail="image_url is required")

    count = db.query(ProductSpecImage).filter(ProductSpecImage.product_id == product_id).count()
    image = ProductSpecImage(product_id=product_id, image_url=image_in.image_url.strip(), sort_order=count)
    db.add(image)
    db.commit()
    db.refresh(image)
    return image


@router.delete("/{product_id}/spec-images/{image_id}")
def delete_spec_image(
    product_id: int,
    image_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    image = db.query(ProductSpecImage).filter(
        ProductSpecImage.id == image_id,
        ProductSpecImage.product_id == product_id,
    ).first()
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")
    db.delete(image)
    db.commit()
    return {"success": True}
