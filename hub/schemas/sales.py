from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from hub.core.enums import PaymentMethod, PriceType, RetailSaleStatus
from hub.schemas.common import LooseDecimal, TrimmedStr


# --- Cart ---
class CartLineRequest(BaseModel):
    """Ask the server to price a product line for the cart."""
    product_id: int
    variation_id: Optional[int] = None
    price_type: PriceType = PriceType.PRICE1
    quantity: int = Field(1, gt=0)


class CartLine(BaseModel):
    """A priced cart line. unit_price is in `currency`, unit_price_try is frozen at add time."""
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    brand_name: Optional[str] = None
    variation_label: Optional[str] = None
    quantity: int = Field(..., gt=0)
    unit_price: LooseDecimal
    price_type: PriceType = PriceType.PRICE1
    currency: str = "TRY"
    exchange_rate: LooseDecimal = 1
    unit_price_try: LooseDecimal
    line_total: Optional[LooseDecimal] = None


# --- Creation ---
class RetailSaleCreate(BaseModel):
    items: List[CartLine] = []
    payment_method: Optional[str] = None
    discount_amount: Optional[LooseDecimal] = None
    notes: TrimmedStr = None


class RetailSaleAction(BaseModel):
    action: Literal["full_return", "partial_return", "update_discount"]
    item_id: Optional[int] = None
    return_quantity: Optional[int] = None
    discount_amount: Optional[LooseDecimal] = None


# --- Reading (history) ---
class RetailSaleItemRead(BaseModel):
    id: int
    sale_id: int
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    brand_name: Optional[str] = None
    variation_label: Optional[str] = None
    quantity: int
    unit_price: float
    price_type: PriceType
    currency: str
    exchange_rate: float
    unit_price_try: float
    line_total: float
    returned_quantity: int

    class Config:
        from_attributes = True


class RetailSaleRead(BaseModel):
    id: int
    sale_number: int
    employee_id: Optional[int] = None
    employee_username: str
    subtotal: float
    discount_amount: float
    total: float
    payment_method: PaymentMethod
    status: RetailSaleStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[RetailSaleItemRead] = []

    class Config:
        from_attributes = True


class RetailSaleResponse(BaseModel):
    sale: RetailSaleRead


class RetailSaleList(BaseModel):
    sales: List[RetailSaleRead]
    total: int
