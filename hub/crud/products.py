from typing import Optional

from sqlalchemy.orm import Session, joinedload

from hub.models import Product, ProductSupplier, ProductVariation


def get_product(db: Session, product_id: int, active_only: bool = False) -> Optional[Product]:
    query = (
        db.query(Product)
        .options(
            joinedload(Product.brand),
            joinedload(Product.supplier),
            joinedload(Product.variations),
        )
        .filter(Product.id == product_id)
    )
    if active_only:
        query = query.filter(Product.is_active == True)
    return query.first()


def get_variation(db: Session, product_id: int, variation_id: int) -> Optional[ProductVariation]:
    return db.query(ProductVariation).filter(
        ProductVariation.id == variation_id,
        ProductVariation.product_id == product_id,
    ).first()


def sync_current_supplier(db: Session, product: Product) -> None:
    """
    Makes product.current_supplier_id the single current supplier link,
    creating the link with the product's price 1 when it does not exist yet.
    """
    if not product.current_supplier_id:
        return

    links = db.query(ProductSupplier).filter(ProductSupplier.product_id == product.id).all()
    current = None
    for link in links:
        if link.supplier_id == product.current_supplier_id:
            current = link
        link.is_current = False

    if current is None:
        current = ProductSupplier(product_id=product.id, supplier_id=product.current_supplier_id)
        db.add(current)

    current.list_price = product.list_price or 0
    current.discount_percent = product.discount_percent or 0
    current.is_current = True
