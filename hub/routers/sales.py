# hub/routers/sales.py
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from hub.core.enums import PaymentMethod, RetailSaleStatus
from hub.crud.products import get_product, get_variation
from hub.database import get_db
from hub.models import RetailSale, RetailSaleItem, User
from hub.schemas.sales import (
    CartLine, CartLineRequest, RetailSaleAction, RetailSaleCreate,
    RetailSaleList, RetailSaleResponse,
)
from hub.security import get_current_user, require_admin
from hub.services import returns
from hub.services.checkout import (
    ExchangeRateMissing, build_cart_line, clamp_total, line_total, sale_totals,
)
from hub.services.errors import InvalidReturnTarget, ReturnQuantityError, SaleItemNotFound
from hub.services.pricing import load_currency_rates, round_money, to_number
from hub.utils.dates import apply_date_range
from hub.utils.numbering import get_next_sale_number

logger = logging.getLogger(__name__)
router = APIRouter()

PAYMENT_METHODS = {m.value for m in PaymentMethod}


def _get_or_404(db: Session, sale_id: int) -> RetailSale:
    sale = (
        db.query(RetailSale)
        .options(selectinload(RetailSale.items))
        .filter(RetailSale.id == sale_id)
        .first()
    )
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale


# --------------------------------------------------------------------------
# 1. PRICE A CART LINE (rate snapshot taken here)
# --------------------------------------------------------------------------
@router.post("/cart-line", response_model=CartLine)
def price_cart_line(
    line_in: CartLineRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = get_product(db, line_in.product_id, active_only=True)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    variation = None
    if line_in.variation_id:
        variation = get_variation(db, product.id, line_in.variation_id)
        if not variation:
            raise HTTPException(status_code=404, detail="Variation not found")

    try:
        return build_cart_line(
            product, load_currency_rates(db), line_in.quantity, variation, line_in.price_type,
        )
    except ExchangeRateMissing as e:
        raise HTTPException(status_code=400, detail=str(e))


# --------------------------------------------------------------------------
# 2. CREATE SALE
# --------------------------------------------------------------------------
@router.post("/", response_model=RetailSaleResponse, status_code=201)
def create_sale(
    sale_in: RetailSaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Stores the cart as submitted. Unit prices, currency and exchange rate were
    frozen when each line was added; only line totals and sale totals are
    computed here.
    """
    if not sale_in.items:
        raise HTTPException(status_code=400, detail="At least one item is required")
    if sale_in.payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="Payment method must be cash or card")

    if to_number(sale_in.discount_amount) < 0:
        raise HTTPException(status_code=400, detail="Discount cannot be negative")

    db_items = []
    for item in sale_in.items:
        if not item.product_name.strip():
            raise HTTPException(status_code=400, detail="Every item needs a product name")
        # line_total uses the cent-rounded price that gets stored
        unit_price_try = round_money(item.unit_price_try)
        db_items.append(RetailSaleItem(
            product_id=item.product_id,
            product_name=item.product_name.strip(),
            product_image=item.product_image,
            brand_name=item.brand_name,
            variation_label=item.variation_label,
            quantity=item.quantity,
            unit_price=round_money(item.unit_price),
            price_type=item.price_type,
            currency=item.currency,
            exchange_rate=item.exchange_rate,
            unit_price_try=unit_price_try,
            line_total=line_total(unit_price_try, item.quantity),
            returned_quantity=0,
        ))

    subtotal, discount, total = sale_totals([i.line_total for i in db_items], sale_in.discount_amount)

    sale = RetailSale(
        sale_number=get_next_sale_number(db, RetailSale),
        employee_id=current_user.id,
        employee_username=current_user.username,
        subtotal=subtotal,
        discount_amount=discount,
        total=total,
        payment_method=PaymentMethod(sale_in.payment_method),
        status=RetailSaleStatus.COMPLETED,
        notes=sale_in.notes,
    )
    sale.items = db_items
    db.add(sale)
    db.commit()

    logger.info("Retail sale #%s created by %s, total %s", sale.sale_number, current_user.username, total)
    return {"sale": _get_or_404(db, sale.id)}


# --------------------------------------------------------------------------
# 3. HISTORY
# --------------------------------------------------------------------------
@router.get("/", response_model=RetailSaleList)
def read_sales(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    employee_id: Optional[int] = None,
    payment_method: Optional[PaymentMethod] = None,
    status: Optional[RetailSaleStatus] = None,
    limit: int = 50,
    offset: int = 0,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(RetailSale)
    query = apply_date_range(query, RetailSale.created_at, date_from, date_to)
    if employee_id:
        query = query.filter(RetailSale.employee_id == employee_id)
    if payment_method:
        query = query.filter(RetailSale.payment_method == payment_method)
    if status:
        query = query.filter(RetailSale.status == status)

    total = query.count()
    sales = (
        query.options(selectinload(RetailSale.items))
        .order_by(RetailSale.created_at.desc(), RetailSale.id.desc())
        .offset(max(offset, 0))
        .limit(max(limit, 1))
        .all()
    )
    return {"sales": sales, "total": total}


@router.get("/{sale_id}", response_model=RetailSaleResponse)
def read_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"sale": _get_or_404(db, sale_id)}


# --------------------------------------------------------------------------
# 4. RETURNS / DISCOUNT EDIT
# --------------------------------------------------------------------------
@router.put("/{sale_id}", response_model=RetailSaleResponse)
def update_sale(
    sale_id: int,
    action_in: RetailSaleAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _get_or_404(db, sale_id)
    action = action_in.action

    try:
        if action == "full_return":
            returns.full_return(sale, RetailSaleStatus)

        elif action == "partial_return":
            if not action_in.item_id or action_in.return_quantity is None:
                raise HTTPException(status_code=400, detail="item_id and return_quantity are required")
            returns.partial_return(sale, action_in.item_id, action_in.return_quantity, RetailSaleStatus)

        elif action == "update_discount":
            discount = to_number(action_in.discount_amount)
            if discount < 0:
                raise HTTPException(status_code=400, detail="Discount cannot be negative")
            sale.discount_amount = discount
            sale.total = clamp_total(sale.subtotal, discount)

    except SaleItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ReturnQuantityError, InvalidReturnTarget) as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    logger.info("Retail sale %s: %s by %s", sale_id, action, current_user.username)
    db.expire_all()
    return {"sale": _get_or_404(db, sale_id)}


# --------------------------------------------------------------------------
# 5. DELETE (admin). Sales are never removed, they become a full return
# --------------------------------------------------------------------------
@router.delete("/{sale_id}", response_model=RetailSaleResponse)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    sale = _get_or_404(db, sale_id)
    returns.full_return(sale, RetailSaleStatus)
    db.commit()
    logger.info("Retail sale %s voided by %s", sale_id, current_user.username)
    db.expire_all()
    return {"sale": _get_or_404(db, sale_id)}
