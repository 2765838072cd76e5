# hub/models/products.py
from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey, Numeric, Enum, JSON, DateTime,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hub.core.enums import Currency
from hub.database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)
    contact_info = Column(String, nullable=True)
    vade_days = Column(Integer, default=0, nullable=False)  # payment term, days
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# --- PRODUCT ---
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    description = Column(String, nullable=True)
    netsis_code = Column(String, index=True, nullable=True)
    image_url = Column(String, nullable=True)

    brand_id = Column(Integer, ForeignKey("brands.id", ondelete="SET NULL"), nullable=True)
    current_supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)

    # Pricing (price 1)
    currency = Column(Enum(Currency), default=Currency.TRY, nullable=False)
    list_price = Column(Numeric(12, 2), default=0, nullable=False)
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    kdv_percent = Column(Numeric(5, 2), default=20, nullable=False)
    profit_percent = Column(Numeric(6, 2), default=35, nullable=False)

    # Pricing (price 2)
    has_price2 = Column(Boolean, default=False, nullable=False)
    price2_label = Column(String, default="Price 2", nullable=False)
    list_price2 = Column(Numeric(12, 2), default=0, nullable=False)
    discount_percent2 = Column(Numeric(5, 2), default=0, nullable=False)

    qr_code = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    brand = relationship("Brand")
    supplier = relationship("Supplier")
    variations = relationship(
        "ProductVariation", back_populates="product",
        cascade="all, delete-orphan", order_by="ProductVariation.sort_order",
    )
    variation_groups = relationship(
        "VariationGroup", back_populates="product",
        cascade="all, delete-orphan", order_by="VariationGroup.sort_order",
    )
    supplier_links = relationship("ProductSupplier", back_populates="product", cascade="all, delete-orphan")
    spec_images = relationship(
        "ProductSpecImage", back_populates="product",
        cascade="all, delete-orphan", order_by="ProductSpecImage.sort_order",
    )


# --- VARIATIONS (size / color ...) ---
class ProductVariation(Base):
    __tablename__ = "product_variations"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    variation_label = Column(String, nullable=False)  # e.g. "M8 / Zinc"
    sku = Column(String, index=True, nullable=True)

    # Only read when has_custom_price is set, otherwise the parent price applies
    has_custom_price = Column(Boolean, default=False, nullable=False)
    list_price = Column(Numeric(12, 2), nullable=True)
    discount_percent = Column(Numeric(5, 2), nullable=True)
    list_price2 = Column(Numeric(12, 2), nullable=True)
    discount_percent2 = Column(Numeric(5, 2), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    product = relationship("Product", back_populates="variations")


class VariationGroup(Base):
    __tablename__ = "variation_groups"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)  # e.g. "Size"
    values = Column(JSON, default=list, nullable=False)  # e.g. ["M6", "M8"]
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="variation_groups")


# --- SUPPLIER PRICE HISTORY ---
class ProductSupplier(Base):
    __tablename__ = "product_suppliers"
    __table_args__ = (UniqueConstraint("product_id", "supplier_id", name="uq_product_supplier"),)

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False)
    list_price = Column(Numeric(12, 2), default=0, nullable=False)
    discount_percent = Column(Numeric(5, 2), default=0, nullable=False)
    notes = Column(String, nullable=True)
    is_current = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="supplier_links")
    supplier = relationship("Supplier")


class ProductSpecImage(Base):
    __tablename__ = "product_spec_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    image_url = Column(String, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="spec_images")
