from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hub.core.enums import B2BSaleStatus, PriceType
from hub.database import Base


class B2BSale(Base):
    __tablename__ = "b2b_sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_number = Column(Integer, unique=True, index=True, nullable=False)

    firm_id = Column(Integer, ForeignKey("firms.id"), nullable=False)
    firm_name = Column(String, nullable=False)
    employee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    employee_username = Column(String, nullable=False)

    status = Column(Enum(B2BSaleStatus), default=B2BSaleStatus.ACTIVE, nullable=False)

    # Administrative "fulfilled" flag, independent of the return state
    is_processed = Column(Boolean, default=False, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    processed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    note = Column(String, nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    firm = relationship("Firm", back_populates="sales")
    items = relationship(
        "B2BSaleItem", back_populates="sale",
        cascade="all, delete-orphan", order_by="B2BSaleItem.id",
    )

    __mapper_args__ = {"version_id_col": version}


class B2BSaleItem(Base):
    __tablename__ = "b2b_sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("b2b_sales.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    brand_name = Column(String, nullable=True)
    netsis_code = Column(String, nullable=True)
    variation_label = Column(String, nullable=True)

    quantity = Column(Integer, nullable=False)
    price_type = Column(Enum(PriceType), default=PriceType.PRICE1, nullable=False)
    returned_quantity = Column(Integer, default=0, nullable=False)

    # Replacement line created by a swap. swap_source_item_id is a reference, not ownership.
    is_swap = Column(Boolean, default=False, nullable=False)
    swap_source_item_id = Column(Integer, ForeignKey("b2b_sale_items.id", ondelete="SET NULL"), nullable=True)
    swap_note = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sale = relationship("B2BSale", back_populates="items")
