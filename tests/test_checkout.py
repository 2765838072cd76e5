from decimal import Decimal
from types import SimpleNamespace

import pytest

from hub.core.enums import PriceType
from hub.services.checkout import (
    ExchangeRateMissing, build_cart_line, clamp_total, line_total, sale_totals,
)
from hub.services.pricing import CurrencyRates


def _product(currency="TRY", **overrides):
    fields = dict(
        id=1, name="Hex Bolt M8", image_url=None, brand=SimpleNamespace(name="Norm"),
        list_price=Decimal("100"), discount_percent=Decimal("10"),
        kdv_percent=Decimal("20"), profit_percent=Decimal("35"), currency=currency,
        has_price2=False, list_price2=Decimal("0"), discount_percent2=Decimal("0"),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_total_clamped_at_zero():
    assert clamp_total(Decimal("100.00"), Decimal("150.00")) == Decimal("0.00")
    subtotal, discount, total = sale_totals([Decimal("60"), Decimal("40")], "150")
    assert subtotal == Decimal("100.00")
    assert discount == Decimal("150")
    assert total == Decimal("0")


def test_invalid_discount_treated_as_zero():
    _, discount, total = sale_totals([Decimal("10.50")], "not a number")
    assert discount == Decimal("0")
    assert total == Decimal("10.50")


def test_line_total_rounds_to_kurus():
    assert line_total(Decimal("145.805"), 1) == Decimal("145.81")
    assert line_total(Decimal("33.33"), 3) == Decimal("99.99")


def test_cart_line_for_try_product():
    line = build_cart_line(_product(), CurrencyRates(), 2)
    assert line["unit_price"] == Decimal("145.80")
    assert line["unit_price_try"] == Decimal("145.80")
    assert line["exchange_rate"] == Decimal("1")
    assert line["line_total"] == Decimal("291.60")
    assert line["brand_name"] == "Norm"
    assert line["price_type"] == PriceType.PRICE1


def test_cart_line_snapshots_exchange_rate():
    p = _product(currency="USD", list_price=Decimal("10"), discount_percent=Decimal("0"),
                 profit_percent=Decimal("0"))
    line = build_cart_line(p, CurrencyRates(usd_try=Decimal("32.5")), 1)
    assert line["currency"] == "USD"
    assert line["unit_price"] == Decimal("12.00")
    assert line["exchange_rate"] == Decimal("32.5")
    assert line["unit_price_try"] == Decimal("390.00")


def test_cart_line_rejected_without_rate():
    with pytest.raises(ExchangeRateMissing):
        build_cart_line(_product(currency="EUR"), CurrencyRates(usd_try=Decimal("30")), 1)


def test_price2_request_falls_back_when_product_has_none():
    line = build_cart_line(_product(), CurrencyRates(), 1, price_type=PriceType.PRICE2)
    assert line["price_type"] == PriceType.PRICE1
