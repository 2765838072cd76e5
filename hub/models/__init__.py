# hub/models/__init__.py

# 1. Declarative base
from hub.database import Base

# 2. Users and settings
from .users import User
from .settings import AppSetting, CURRENCY_RATES_KEY

# 3. Catalog
from .products import (
    Brand,
    Supplier,
    Product,
    ProductVariation,
    VariationGroup,
    ProductSupplier,
    ProductSpecImage,
)

# 4. Firms (B2B customers)
from .crm import Firm

# 5. Sales
from .sales import RetailSale, RetailSaleItem
from .b2b import B2BSale, B2BSaleItem

# 6. Notes board
from .notes import Note
