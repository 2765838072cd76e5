from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from hub.core.enums import Currency, PriceType
from hub.schemas.common import LooseDecimal, TrimmedStr


# --- Brands ---
class BrandCreate(BaseModel):
    name: str


class BrandRead(BaseModel):
    id: int
    name: str
    product_count: int = 0

    class Config:
        from_attributes = True


# --- Suppliers ---
class SupplierCreate(BaseModel):
    name: str
    contact_info: TrimmedStr = None
    vade_days: int = Field(0, ge=0)
    notes: TrimmedStr = None


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact_info: TrimmedStr = None
    vade_days: Optional[int] = Field(None, ge=0)
    notes: TrimmedStr = None


class SupplierRead(BaseModel):
    id: int
    name: str
    contact_info: Optional[str] = None
    vade_days: int = 0
    notes: Optional[str] = None
    product_count: int = 0

    class Config:
        from_attributes = True


# --- Pricing ---
class PricingRead(BaseModel):
    buy_price: float
    profit_amount: float
    price_before_vat: float
    vat_amount: float
    sale_price: float
    currency: str
    exchange_rate: float
    sale_price_local: Optional[float] = None  # null when the exchange rate is not set
    local_available: bool
    is_foreign: bool


# --- Variations ---
class VariationIn(BaseModel):
    variation_label: str
    has_custom_price: bool = False
    list_price: Optional[LooseDecimal] = None
    discount_percent: Optional[LooseDecimal] = None
    list_price2: Optional[LooseDecimal] = None
    discount_percent2: Optional[LooseDecimal] = None
    sku: TrimmedStr = None


class VariationGroupIn(BaseModel):
    name: str
    values: List[str] = []


class VariationsSave(BaseModel):
    variations: List[VariationIn] = []
    groups: List[VariationGroupIn] = []


class VariationRead(BaseModel):
    id: int
    product_id: int
    variation_label: str
    has_custom_price: bool
    list_price: Optional[float] = None
    discount_percent: Optional[float] = None
    list_price2: Optional[float] = None
    discount_percent2: Optional[float] = None
    sku: Optional[str] = None
    is_active: bool
    sort_order: int

    class Config:
        from_attributes = True


class VariationGroupRead(BaseModel):
    id: int
    product_id: int
    name: str
    values: List[str]
    sort_order: int

    class Config:
        from_attributes = True


class VariationsRead(BaseModel):
    variations: List[VariationRead]
    groups: List[VariationGroupRead]


# --- Supplier links / spec images ---
class ProductSupplierRead(BaseModel):
    id: int
    product_id: int
    supplier_id: int
    list_price: float
    discount_percent: float
    notes: Optional[str] = None
    is_current: bool
    supplier: Optional[SupplierRead] = None

    class Config:
        from_attributes = True


class SpecImageCreate(BaseModel):
    image_url: str


class SpecImageRead(BaseModel):
    id: int
    product_id: int
    image_url: str
    sort_order: int

    class Config:
        from_attributes = True


# --- Product input ---
class ProductCreate(BaseModel):
    name: str
    description: TrimmedStr = None
    netsis_code: TrimmedStr = None
    image_url: TrimmedStr = None
    brand_id: Optional[int] = None
    current_supplier_id: Optional[int] = None

    currency: Currency = Currency.TRY
    list_price: LooseDecimal = 0
    discount_percent: LooseDecimal = 0
    kdv_percent: Optional[LooseDecimal] = None  # None -> configured default
    profit_percent: Optional[LooseDecimal] = None

    has_price2: bool = False
    price2_label: TrimmedStr = None
    list_price2: LooseDecimal = 0
    discount_percent2: LooseDecimal = 0


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: TrimmedStr = None
    netsis_code: TrimmedStr = None
    image_url: TrimmedStr = None
    brand_id: Optional[int] = None
    current_supplier_id: Optional[int] = None
    currency: Optional[Currency] = None
    list_price: Optional[LooseDecimal] = None
    discount_percent: Optional[LooseDecimal] = None
    kdv_percent: Optional[LooseDecimal] = None
    profit_percent: Optional[LooseDecimal] = None
    has_price2: Optional[bool] = None
    price2_label: TrimmedStr = None
    list_price2: Optional[LooseDecimal] = None
    discount_percent2: Optional[LooseDecimal] = None
    qr_code: TrimmedStr = None
    is_active: Optional[bool] = None


# --- Product output ---
class BrandRef(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class SupplierRef(BaseModel):
    id: int
    name: str
    vade_days: int = 0

    class Config:
        from_attributes = True


class ProductRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    netsis_code: Optional[str] = None
    image_url: Optional[str] = None
    brand_id: Optional[int] = None
    current_supplier_id: Optional[int] = None

    currency: Currency
    list_price: float
    discount_percent: float
    kdv_percent: float
    profit_percent: float
    has_price2: bool
    price2_label: str
    list_price2: float
    discount_percent2: float

    qr_code: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    brand: Optional[BrandRef] = None
    supplier: Optional[SupplierRef] = None
    variations: List[VariationRead] = []

    # Computed
    pricing: Optional[PricingRead] = None
    pricing2: Optional[PricingRead] = None

    class Config:
        from_attributes = True


class ProductDetail(BaseModel):
    product: ProductRead
    variations: List[VariationRead] = []
    groups: List[VariationGroupRead] = []
    suppliers: List[ProductSupplierRead] = []
    spec_images: List[SpecImageRead] = []


class PriceResult(BaseModel):
    product_id: int
    variation_id: Optional[int] = None
    price_type: PriceType
    pricing: PricingRead


class ProductList(BaseModel):
    products: List[ProductRead]


class ProductResponse(BaseModel):
    product: ProductRead


class SupplierProductRef(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None
    list_price: float
    discount_percent: float
    currency: Currency


class SupplierDetail(BaseModel):
    supplier: SupplierRead
    current_products: List[SupplierProductRef]
    all_product_links: List[ProductSupplierRead]
