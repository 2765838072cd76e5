from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from hub.core.enums import B2BSaleStatus, PriceType
from hub.schemas.common import TrimmedStr


class B2BItemCreate(BaseModel):
    product_id: Optional[int] = None
    product_name: str
    product_image: TrimmedStr = None
    brand_name: TrimmedStr = None
    netsis_code: TrimmedStr = None
    variation_label: TrimmedStr = None
    quantity: int = Field(..., gt=0)
    price_type: PriceType = PriceType.PRICE1


class B2BSaleCreate(BaseModel):
    firm_id: Optional[int] = None
    items: List[B2BItemCreate] = []
    note: TrimmedStr = None


class SwapProduct(B2BItemCreate):
    quantity: Optional[int] = Field(None, gt=0)  # defaults to the returned quantity
    swap_note: TrimmedStr = None


class B2BSaleAction(BaseModel):
    action: Literal[
        "mark_processed", "unmark_processed", "full_return",
        "partial_return", "swap", "update_note",
    ]
    item_id: Optional[int] = None
    return_quantity: Optional[int] = None
    new_product: Optional[SwapProduct] = None
    note: TrimmedStr = None


class B2BSaleItemRead(BaseModel):
    id: int
    sale_id: int
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    brand_name: Optional[str] = None
    netsis_code: Optional[str] = None
    variation_label: Optional[str] = None
    quantity: int
    price_type: PriceType
    returned_quantity: int
    is_swap: bool
    swap_source_item_id: Optional[int] = None
    swap_note: Optional[str] = None

    class Config:
        from_attributes = True


class B2BSaleRead(BaseModel):
    id: int
    sale_number: int
    firm_id: int
    firm_name: str
    employee_id: Optional[int] = None
    employee_username: str
    status: B2BSaleStatus
    is_processed: bool
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[B2BSaleItemRead] = []

    class Config:
        from_attributes = True


class B2BSaleResponse(BaseModel):
    sale: B2BSaleRead


class B2BSaleList(BaseModel):
    sales: List[B2BSaleRead]
