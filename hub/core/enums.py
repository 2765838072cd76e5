"""
Core Enums - constants shared by models, schemas and services
"""
import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"


class Currency(str, enum.Enum):
    TRY = "TRY"
    USD = "USD"
    EUR = "EUR"


class PriceType(str, enum.Enum):
    """Price 1 / Price 2 selection, chosen per line item"""
    PRICE1 = "price1"
    PRICE2 = "price2"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"


class RetailSaleStatus(str, enum.Enum):
    COMPLETED = "completed"
    PARTIALLY_RETURNED = "partially_returned"
    RETURNED = "returned"


class B2BSaleStatus(str, enum.Enum):
    ACTIVE = "active"
    PARTIALLY_RETURNED = "partially_returned"
    RETURNED = "returned"


class NoteVisibility(str, enum.Enum):
    SELF = "self"
    GLOBAL = "global"
