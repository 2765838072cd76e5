"""
Price calculation pipeline.

    list price -> discount -> buy price -> + profit -> + KDV (VAT) -> sale price
    -> (foreign currency only) x exchange rate -> local (TRY) sale price

Every screen and endpoint that shows or freezes a price goes through
``calculate``. No rounding happens between steps; only the local amount is
rounded to kuruş (2 decimals), when it is displayed or frozen on a sale line.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy.orm import Session

from hub.core.enums import Currency, PriceType
from hub.models import AppSetting, CURRENCY_RATES_KEY

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")
LOCAL_CURRENCY = Currency.TRY.value


def to_number(val: Any, default: Decimal = ZERO) -> Decimal:
    """Permissive numeric coercion: missing or invalid values become ``default``."""
    if val is None or isinstance(val, bool):
        return default
    try:
        if isinstance(val, str):
            val = val.strip().replace(",", ".")
            if not val:
                return default
        num = val if isinstance(val, Decimal) else Decimal(str(val))
    except (InvalidOperation, ValueError, TypeError):
        return default
    if not num.is_finite():
        return default
    return num


def round_money(val: Decimal) -> Decimal:
    return val.quantize(CENTS, rounding=ROUND_HALF_UP)


def _currency_code(currency: Any) -> str:
    if isinstance(currency, Currency):
        return currency.value
    return str(currency or LOCAL_CURRENCY).upper()


@dataclass(frozen=True)
class CurrencyRates:
    """Manually maintained TRY rates. 0 means the rate has not been set."""
    usd_try: Decimal = ZERO
    eur_try: Decimal = ZERO

    @classmethod
    def from_setting(cls, value: Optional[dict]) -> "CurrencyRates":
        value = value or {}
        return cls(
            usd_try=to_number(value.get("usd_try")),
            eur_try=to_number(value.get("eur_try")),
        )

    def rate_for(self, currency: Any) -> Decimal:
        code = _currency_code(currency)
        if code == LOCAL_CURRENCY:
            return ONE
        if code == Currency.USD.value:
            return self.usd_try
        if code == Currency.EUR.value:
            return self.eur_try
        return ZERO

    def as_dict(self) -> dict:
        return {"usd_try": float(self.usd_try), "eur_try": float(self.eur_try)}


@dataclass(frozen=True)
class PricingInput:
    list_price: Decimal = ZERO
    discount_percent: Decimal = ZERO
    kdv_percent: Decimal = ZERO
    profit_percent: Decimal = ZERO
    currency: str = LOCAL_CURRENCY

    @classmethod
    def coerce(cls, list_price=None, discount_percent=None, kdv_percent=None,
               profit_percent=None, currency=None) -> "PricingInput":
        return cls(
            list_price=to_number(list_price),
            discount_percent=to_number(discount_percent),
            kdv_percent=to_number(kdv_percent),
            profit_percent=to_number(profit_percent),
            currency=_currency_code(currency),
        )


@dataclass(frozen=True)
class PricingBreakdown:
    buy_price: Decimal
    profit_amount: Decimal
    price_before_vat: Decimal
    vat_amount: Decimal
    sale_price: Decimal  # in the product's own currency
    currency: str
    exchange_rate: Decimal
    sale_price_local: Optional[Decimal]  # None when the rate is not set
    is_foreign: bool

    @property
    def local_available(self) -> bool:
        return self.sale_price_local is not None

    @property
    def sale_price_local_rounded(self) -> Optional[Decimal]:
        if self.sale_price_local is None:
            return None
        return round_money(self.sale_price_local)

    def as_dict(self) -> dict:
        """Display form, money rounded to 2 decimals."""
        return {
            "buy_price": round_money(self.buy_price),
            "profit_amount": round_money(self.profit_amount),
            "price_before_vat": round_money(self.price_before_vat),
            "vat_amount": round_money(self.vat_amount),
            "sale_price": round_money(self.sale_price),
            "currency": self.currency,
            "exchange_rate": self.exchange_rate,
            "sale_price_local": self.sale_price_local_rounded,
            "local_available": self.local_available,
            "is_foreign": self.is_foreign,
        }


def calculate(pricing: PricingInput, rates: Optional[CurrencyRates] = None) -> PricingBreakdown:
    rates = rates or CurrencyRates()

    buy_price = pricing.list_price * (ONE - pricing.discount_percent / HUNDRED)
    profit_amount = buy_price * (pricing.profit_percent / HUNDRED)
    price_before_vat = buy_price + profit_amount
    vat_amount = price_before_vat * (pricing.kdv_percent / HUNDRED)
    sale_price = price_before_vat + vat_amount

    is_foreign = pricing.currency != LOCAL_CURRENCY
    rate = rates.rate_for(pricing.currency)

    if not is_foreign:
        sale_local = sale_price
    elif rate > ZERO:
        sale_local = sale_price * rate
    else:
        sale_local = None

    return PricingBreakdown(
        buy_price=buy_price,
        profit_amount=profit_amount,
        price_before_vat=price_before_vat,
        vat_amount=vat_amount,
        sale_price=sale_price,
        currency=pricing.currency,
        exchange_rate=rate,
        sale_price_local=sale_local,
        is_foreign=is_foreign,
    )


def resolve_pricing_input(product, variation=None, price_type=PriceType.PRICE1) -> PricingInput:
    """
    Picks the list price / discount for a product line.

    A variation with ``has_custom_price`` overrides list price and discount
    (price 2 falls back to its price 1 values when unset). KDV, profit and
    currency always come from the parent product.
    """
    use_price2 = PriceType(price_type) == PriceType.PRICE2 and bool(product.has_price2)

    if variation is not None and variation.has_custom_price:
        if use_price2:
            list_price = to_number(variation.list_price2) or to_number(variation.list_price)
            discount = to_number(variation.discount_percent2) or to_number(variation.discount_percent)
        else:
            list_price = to_number(variation.list_price)
            discount = to_number(variation.discount_percent)
    elif use_price2:
        list_price = to_number(product.list_price2)
        discount = to_number(product.discount_percent2)
    else:
        list_price = to_number(product.list_price)
        discount = to_number(product.discount_percent)

    return PricingInput(
        list_price=list_price,
        discount_percent=discount,
        kdv_percent=to_number(product.kdv_percent),
        profit_percent=to_number(product.profit_percent),
        currency=_currency_code(product.currency),
    )


def price_product(product, rates: CurrencyRates, variation=None,
                  price_type=PriceType.PRICE1) -> PricingBreakdown:
    return calculate(resolve_pricing_input(product, variation, price_type), rates)


def load_currency_rates(db: Session) -> CurrencyRates:
    """Reads the `currency_rates` settings row; missing row means no conversion available."""
    row = db.query(AppSetting).filter(AppSetting.key == CURRENCY_RATES_KEY).first()
    if row is None:
        logger.warning("currency_rates setting missing, foreign prices cannot be converted")
        return CurrencyRates()
    return CurrencyRates.from_setting(row.value)
