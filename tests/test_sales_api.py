import pytest


def _cart_line(client, headers, product_id, quantity=1, **extra):
    resp = client.post(
        "/api/sales/cart-line",
        json={"product_id": product_id, "quantity": quantity, **extra},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def _create_sale(client, headers, items, payment_method="cash", discount=None):
    payload = {"items": items, "payment_method": payment_method}
    if discount is not None:
        payload["discount_amount"] = discount
    return client.post("/api/sales/", json=payload, headers=headers)


def test_cart_line_prices_product(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id, quantity=2)
    assert float(line["unit_price"]) == 145.8
    assert float(line["unit_price_try"]) == 145.8
    assert float(line["line_total"]) == 291.6
    assert line["currency"] == "TRY"


def test_cart_line_foreign_uses_current_rate(client, employee_headers, usd_product):
    line = _cart_line(client, employee_headers, usd_product.id)
    assert float(line["unit_price"]) == 12.0
    assert float(line["exchange_rate"]) == 30.0
    assert float(line["unit_price_try"]) == 360.0


def test_cart_line_rejected_without_rate(client, employee_headers, admin_headers, usd_product):
    client.put(
        "/api/settings/",
        json={"key": "currency_rates", "value": {"usd_try": 0, "eur_try": 0}},
        headers=admin_headers,
    )
    resp = client.post(
        "/api/sales/cart-line", json={"product_id": usd_product.id}, headers=employee_headers,
    )
    assert resp.status_code == 400
    assert "USD" in resp.json()["error"]


def test_create_sale_freezes_submitted_prices(client, employee_headers, admin_headers, product):
    line = _cart_line(client, employee_headers, product.id, quantity=2)
    resp = _create_sale(client, employee_headers, [line], discount="10")
    assert resp.status_code == 201, resp.text
    sale = resp.json()["sale"]

    assert sale["sale_number"] == 1
    assert sale["employee_username"] == "ali"
    assert sale["status"] == "completed"
    assert sale["subtotal"] == 291.6
    assert sale["discount_amount"] == 10
    assert sale["total"] == 281.6
    assert sale["items"][0]["unit_price_try"] == 145.8

    # Catalog change later does not touch the stored sale
    resp = client.put(f"/api/products/{product.id}", json={"list_price": 500}, headers=admin_headers)
    assert resp.status_code == 200
    again = client.get(f"/api/sales/{sale['id']}", headers=employee_headers).json()["sale"]
    assert again["items"][0]["unit_price_try"] == 145.8
    assert again["total"] == 281.6


def test_sale_numbers_are_sequential(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    first = _create_sale(client, employee_headers, [line]).json()["sale"]
    second = _create_sale(client, employee_headers, [line], payment_method="card").json()["sale"]
    assert second["sale_number"] == first["sale_number"] + 1


def test_discount_larger_than_subtotal_gives_zero_total(client, employee_headers):
    item = {
        "product_name": "Manual line", "quantity": 1, "unit_price": "100",
        "currency": "TRY", "exchange_rate": "1", "unit_price_try": "100",
    }
    sale = _create_sale(client, employee_headers, [item], discount="150").json()["sale"]
    assert sale["subtotal"] == 100
    assert sale["total"] == 0


@pytest.mark.parametrize("payload,message", [
    ({"items": [], "payment_method": "cash"}, "At least one item is required"),
    ({"items": [{"product_name": "x", "quantity": 1, "unit_price": 1, "unit_price_try": 1}],
      "payment_method": "cheque"}, "Payment method must be cash or card"),
    ({"items": [{"product_name": "x", "quantity": 1, "unit_price": 1, "unit_price_try": 1}]},
     "Payment method must be cash or card"),
])
def test_create_sale_validation(client, employee_headers, payload, message):
    resp = client.post("/api/sales/", json=payload, headers=employee_headers)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}


def test_sales_require_session(client):
    assert client.get("/api/sales/").status_code == 401
    assert client.post("/api/sales/", json={"items": []}).status_code == 401


def test_list_filters_and_paging(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    for method in ("cash", "card", "cash"):
        _create_sale(client, employee_headers, [line], payment_method=method)

    resp = client.get("/api/sales/", params={"payment_method": "cash"}, headers=employee_headers)
    body = resp.json()
    assert body["total"] == 2
    assert all(s["payment_method"] == "cash" for s in body["sales"])

    page = client.get("/api/sales/", params={"limit": 1, "offset": 1}, headers=employee_headers).json()
    assert page["total"] == 3
    assert len(page["sales"]) == 1
    # Newest first
    assert page["sales"][0]["sale_number"] == 2


def test_partial_then_full_return(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id, quantity=3)
    sale = _create_sale(client, employee_headers, [line]).json()["sale"]
    item_id = sale["items"][0]["id"]

    resp = client.put(
        f"/api/sales/{sale['id']}",
        json={"action": "partial_return", "item_id": item_id, "return_quantity": 1},
        headers=employee_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["sale"]["status"] == "partially_returned"
    assert resp.json()["sale"]["items"][0]["returned_quantity"] == 1

    over = client.put(
        f"/api/sales/{sale['id']}",
        json={"action": "partial_return", "item_id": item_id, "return_quantity": 3},
        headers=employee_headers,
    )
    assert over.status_code == 400
    still = client.get(f"/api/sales/{sale['id']}", headers=employee_headers).json()["sale"]
    assert still["items"][0]["returned_quantity"] == 1

    resp = client.put(f"/api/sales/{sale['id']}", json={"action": "full_return"}, headers=employee_headers)
    assert resp.json()["sale"]["status"] == "returned"
    assert resp.json()["sale"]["items"][0]["returned_quantity"] == 3


def test_return_of_foreign_item_is_404(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    a = _create_sale(client, employee_headers, [line]).json()["sale"]
    b = _create_sale(client, employee_headers, [line]).json()["sale"]
    resp = client.put(
        f"/api/sales/{a['id']}",
        json={"action": "partial_return", "item_id": b["items"][0]["id"], "return_quantity": 1},
        headers=employee_headers,
    )
    assert resp.status_code == 404


def test_update_discount_recomputes_total(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    sale = _create_sale(client, employee_headers, [line]).json()["sale"]

    resp = client.put(
        f"/api/sales/{sale['id']}",
        json={"action": "update_discount", "discount_amount": "5.80"},
        headers=employee_headers,
    )
    assert resp.json()["sale"]["total"] == 140.0

    resp = client.put(
        f"/api/sales/{sale['id']}",
        json={"action": "update_discount", "discount_amount": 1000},
        headers=employee_headers,
    )
    assert resp.json()["sale"]["total"] == 0


def test_unknown_action_is_400(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    sale = _create_sale(client, employee_headers, [line]).json()["sale"]
    resp = client.put(f"/api/sales/{sale['id']}", json={"action": "explode"}, headers=employee_headers)
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_delete_is_admin_only_soft_return(client, employee_headers, admin_headers, product):
    line = _cart_line(client, employee_headers, product.id, quantity=2)
    sale = _create_sale(client, employee_headers, [line]).json()["sale"]

    assert client.delete(f"/api/sales/{sale['id']}", headers=employee_headers).status_code == 403

    resp = client.delete(f"/api/sales/{sale['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["sale"]["status"] == "returned"
    assert client.get(f"/api/sales/{sale['id']}", headers=admin_headers).status_code == 200


def test_stored_line_total_matches_stored_unit_price(client, employee_headers):
    item = {
        "product_name": "Manual line", "quantity": 1000, "unit_price": "10.005",
        "currency": "TRY", "exchange_rate": "1", "unit_price_try": "10.005",
    }
    sale = _create_sale(client, employee_headers, [item]).json()["sale"]
    line = sale["items"][0]
    assert line["unit_price_try"] == 10.01
    assert line["unit_price"] == 10.01
    assert line["line_total"] == 10010.0
    assert sale["subtotal"] == 10010.0


def test_exchange_rate_kept_at_full_precision(client, employee_headers):
    item = {
        "product_name": "Imported drill", "quantity": 1, "unit_price": "10",
        "currency": "USD", "exchange_rate": "32.123456", "unit_price_try": "321.23",
    }
    sale = _create_sale(client, employee_headers, [item]).json()["sale"]
    assert sale["items"][0]["exchange_rate"] == 32.123456


def test_negative_discount_rejected(client, employee_headers, product):
    line = _cart_line(client, employee_headers, product.id)
    resp = _create_sale(client, employee_headers, [line], discount="-50")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Discount cannot be negative"}

    sale = _create_sale(client, employee_headers, [line]).json()["sale"]
    resp = client.put(
        f"/api/sales/{sale['id']}",
        json={"action": "update_discount", "discount_amount": -10},
        headers=employee_headers,
    )
    assert resp.status_code == 400
    assert client.get(f"/api/sales/{sale['id']}", headers=employee_headers).json()["sale"]["total"] == 145.8
