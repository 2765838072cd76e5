"""
Retail checkout math.

Cart lines arrive with their price already frozen (unit price in the
product currency, the exchange rate used, and the TRY unit price). The
sale stores those values as-is; nothing is recomputed from the catalog later.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Tuple

from hub.core.enums import PriceType
from hub.services.pricing import (
    ZERO, ONE, CurrencyRates, price_product, round_money, to_number,
)


class ExchangeRateMissing(ValueError):
    """Foreign-priced product cannot be added to a cart while its TRY rate is unset."""


def line_total(unit_price_try, quantity) -> Decimal:
    return round_money(to_number(unit_price_try) * to_number(quantity))


def sale_totals(line_totals: Iterable[Decimal], discount_amount=None) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Returns (subtotal, discount, total).
    The discount is a flat amount taken once off the subtotal; the total is clamped at zero.
    """
    subtotal = round_money(sum((to_number(t) for t in line_totals), ZERO))
    discount = to_number(discount_amount)
    return subtotal, discount, clamp_total(subtotal, discount)


def clamp_total(subtotal, discount) -> Decimal:
    total = round_money(to_number(subtotal) - to_number(discount))
    return max(ZERO, total)


def build_cart_line(product, rates: CurrencyRates, quantity: int, variation=None,
                    price_type=PriceType.PRICE1) -> dict:
    """Prices one product line for the cart, snapshotting the current exchange rate."""
    breakdown = price_product(product, rates, variation, price_type)
    if not breakdown.local_available:
        raise ExchangeRateMissing(
            f"Exchange rate for {breakdown.currency} is not set, local price unavailable"
        )

    unit_price_try = breakdown.sale_price_local_rounded
    use_price2 = PriceType(price_type) == PriceType.PRICE2 and bool(product.has_price2)
    return {
        "product_id": product.id,
        "product_name": product.name,
        "product_image": product.image_url,
        "brand_name": product.brand.name if product.brand else None,
        "variation_label": variation.variation_label if variation is not None else None,
        "quantity": quantity,
        "unit_price": round_money(breakdown.sale_price),
        "price_type": PriceType.PRICE2 if use_price2 else PriceType.PRICE1,
        "currency": breakdown.currency,
        "exchange_rate": breakdown.exchange_rate if breakdown.is_foreign else ONE,
        "unit_price_try": unit_price_try,
        "line_total": line_total(unit_price_try, quantity),
    }
