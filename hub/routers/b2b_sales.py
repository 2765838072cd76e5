# hub/routers/b2b_sales.py
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session, selectinload

from hub.core.enums import B2BSaleStatus
from hub.database import get_db
from hub.models import B2BSale, B2BSaleItem, Firm, User
from hub.schemas.b2b import B2BSaleAction, B2BSaleCreate, B2BSaleList, B2BSaleResponse
from hub.security import get_current_user
from hub.services import returns
from hub.services.errors import FirmLocked, InvalidReturnTarget, ReturnQuantityError, SaleItemNotFound
from hub.utils.dates import apply_date_range
from hub.utils.numbering import get_next_sale_number

logger = logging.getLogger(__name__)
router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def _get_or_404(db: Session, sale_id: int) -> B2BSale:
    sale = (
        db.query(B2BSale)
        .options(selectinload(B2BSale.items))
        .filter(B2BSale.id == sale_id)
        .first()
    )
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale


def check_firm_open(firm: Firm) -> None:
    if firm.is_locked:
        raise FirmLocked(f"This firm is locked: {firm.lock_reason or 'No reason given'}. Cannot create sales.")


def _item_from_payload(payload) -> B2BSaleItem:
    return B2BSaleItem(
        product_id=payload.product_id,
        product_name=payload.product_name.strip(),
        product_image=payload.product_image,
        brand_name=payload.brand_name,
        netsis_code=payload.netsis_code,
        variation_label=payload.variation_label,
        quantity=payload.quantity,
        price_type=payload.price_type,
        returned_quantity=0,
        is_swap=False,
    )


# --------------------------------------------------------------------------
# 1. CREATE
# --------------------------------------------------------------------------
@router.post("/", response_model=B2BSaleResponse, status_code=201)
def create_b2b_sale(
    sale_in: B2BSaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not sale_in.firm_id:
        raise HTTPException(status_code=400, detail="Firm is required")
    if not sale_in.items:
        raise HTTPException(status_code=400, detail="At least one item is required")

    firm = db.query(Firm).filter(Firm.id == sale_in.firm_id).first()
    if not firm:
        raise HTTPException(status_code=404, detail="Firm not found")
    try:
        check_firm_open(firm)
    except FirmLocked as e:
        raise HTTPException(status_code=403, detail=str(e))

    for item in sale_in.items:
        if not item.product_name.strip():
            raise HTTPException(status_code=400, detail="Every item needs a product name")

    sale = B2BSale(
        sale_number=get_next_sale_number(db, B2BSale),
        firm_id=firm.id,
        firm_name=firm.name,
        employee_id=current_user.id,
        employee_username=current_user.username,
        status=B2BSaleStatus.ACTIVE,
        is_processed=False,
        note=sale_in.note,
    )
    sale.items = [_item_from_payload(item) for item in sale_in.items]
    db.add(sale)
    db.commit()

    logger.info("B2B sale #%s created for firm %s by %s", sale.sale_number, firm.id, current_user.username)
    return {"sale": _get_or_404(db, sale.id)}


# --------------------------------------------------------------------------
# 2. LIST / DETAIL
# --------------------------------------------------------------------------
@router.get("/", response_model=B2BSaleList)
def read_b2b_sales(
    firm_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    processed: Optional[bool] = None,
    status: Optional[B2BSaleStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(B2BSale).options(selectinload(B2BSale.items))
    if firm_id:
        query = query.filter(B2BSale.firm_id == firm_id)
    if processed is not None:
        query = query.filter(B2BSale.is_processed == processed)
    if status:
        query = query.filter(B2BSale.status == status)
    query = apply_date_range(query, B2BSale.created_at, date_from, date_to)

    return {"sales": query.order_by(B2BSale.created_at.desc(), B2BSale.id.desc()).all()}


@router.get("/{sale_id}", response_model=B2BSaleResponse)
def read_b2b_sale(sale_id: int, db: Session = Depends(get_db)):
    return {"sale": _get_or_404(db, sale_id)}


# --------------------------------------------------------------------------
# 3. ACTIONS (processed flag, returns, swap, note)
# --------------------------------------------------------------------------
@router.put("/{sale_id}", response_model=B2BSaleResponse)
def update_b2b_sale(
    sale_id: int,
    action_in: B2BSaleAction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _get_or_404(db, sale_id)
    action = action_in.action

    try:
        if action == "mark_processed":
            sale.is_processed = True
            sale.processed_at = datetime.now(timezone.utc)
            sale.processed_by = current_user.id

        elif action == "unmark_processed":
            sale.is_processed = False
            sale.processed_at = None
            sale.processed_by = None

        elif action == "full_return":
            returns.full_return(sale, B2BSaleStatus)

        elif action == "partial_return":
            if not action_in.item_id or action_in.return_quantity is None:
                raise HTTPException(status_code=400, detail="item_id and return_quantity are required")
            returns.partial_return(sale, action_in.item_id, action_in.return_quantity, B2BSaleStatus)

        elif action == "swap":
            if not action_in.item_id or action_in.return_quantity is None:
                raise HTTPException(status_code=400, detail="item_id and return_quantity are required")
            if action_in.new_product is None or not action_in.new_product.product_name.strip():
                raise HTTPException(status_code=400, detail="new_product is required for a swap")
            new_item = _item_from_payload(action_in.new_product)
            returns.swap(
                sale, action_in.item_id, action_in.return_quantity, new_item,
                swap_note=action_in.new_product.swap_note,
            )

        elif action == "update_note":
            sale.note = action_in.note

    except SaleItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ReturnQuantityError, InvalidReturnTarget) as e:
        raise HTTPException(status_code=400, detail=str(e))

    db.commit()
    logger.info("B2B sale %s: %s by %s", sale_id, action, current_user.username)
    db.expire_all()
    return {"sale": _get_or_404(db, sale_id)}


# --------------------------------------------------------------------------
# 4. DELIVERY NOTE (irsaliye)
# --------------------------------------------------------------------------
@router.get("/{sale_id}/irsaliye", response_class=HTMLResponse)
def render_irsaliye(sale_id: int, request: Request, db: Session = Depends(get_db)):
    """Printable delivery note: only goods still with the firm are listed."""
    sale = _get_or_404(db, sale_id)
    firm = db.query(Firm).filter(Firm.id == sale.firm_id).first()

    lines = []
    for item in sale.items:
        remaining = returns.remaining_quantity(item)
        if remaining > 0:
            lines.append({"item": item, "remaining": remaining})

    return templates.TemplateResponse(
        request,
        "irsaliye.html",
        {
            "sale": sale,
            "firm": firm,
            "lines": lines,
            "printed_at": datetime.now(timezone.utc),
        },
    )
