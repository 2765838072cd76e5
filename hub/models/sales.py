from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hub.core.enums import PaymentMethod, PriceType, RetailSaleStatus
from hub.database import Base


# --- Retail sale header ---
class RetailSale(Base):
    __tablename__ = "retail_sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_number = Column(Integer, unique=True, index=True, nullable=False)

    employee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    employee_username = Column(String, nullable=False)

    subtotal = Column(Numeric(12, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0, nullable=False)  # flat amount, not a percent
    total = Column(Numeric(12, 2), default=0, nullable=False)

    payment_method = Column(Enum(PaymentMethod), nullable=False)
    status = Column(Enum(RetailSaleStatus), default=RetailSaleStatus.COMPLETED, nullable=False)
    notes = Column(String, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "RetailSaleItem", back_populates="sale",
        cascade="all, delete-orphan", order_by="RetailSaleItem.id",
    )

    __mapper_args__ = {"version_id_col": version}


# --- Retail sale line. Prices are frozen at checkout ---
class RetailSaleItem(Base):
    __tablename__ = "retail_sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("retail_sales.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    brand_name = Column(String, nullable=True)
    variation_label = Column(String, nullable=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)  # original currency
    price_type = Column(Enum(PriceType), default=PriceType.PRICE1, nullable=False)
    currency = Column(String, nullable=False)
    exchange_rate = Column(Numeric(18, 6), default=1, nullable=False)
    unit_price_try = Column(Numeric(12, 2), nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)

    returned_quantity = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sale = relationship("RetailSale", back_populates="items")
