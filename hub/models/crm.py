# hub/models/crm.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from hub.database import Base


class Firm(Base):
    """
    B2B customer account.
    A locked firm stays readable but cannot receive new B2B sales.
    """
    __tablename__ = "firms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, index=True, nullable=False)

    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    tax_number = Column(String, nullable=True)
    tax_office = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    is_locked = Column(Boolean, default=False, nullable=False)
    lock_reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sales = relationship("B2BSale", back_populates="firm")
