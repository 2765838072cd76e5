from hub.models import ProductSupplier, Supplier


def _new_product(client, headers, **fields):
    payload = {"name": "Anchor Bolt", "list_price": 100, "discount_percent": 10}
    payload.update(fields)
    return client.post("/api/products/", json=payload, headers=headers)


def test_create_product_applies_defaults_and_pricing(client, admin_headers):
    resp = _new_product(client, admin_headers)
    assert resp.status_code == 201, resp.text
    product = resp.json()["product"]
    assert product["kdv_percent"] == 20
    assert product["profit_percent"] == 35
    assert product["currency"] == "TRY"
    assert product["pricing"]["sale_price"] == 145.8
    assert product["pricing"]["sale_price_local"] == 145.8
    assert product["pricing2"] is None


def test_product_writes_are_admin_only(client, employee_headers, product):
    assert _new_product(client, employee_headers).status_code == 403
    assert client.put(f"/api/products/{product.id}", json={"name": "x"}, headers=employee_headers).status_code == 403
    assert client.delete(f"/api/products/{product.id}", headers=employee_headers).status_code == 403
    assert client.get(f"/api/products/{product.id}").status_code == 200


def test_foreign_product_without_rate_shows_unavailable(client, admin_headers):
    product = _new_product(client, admin_headers, currency="EUR", list_price=10).json()["product"]
    assert product["pricing"]["is_foreign"] is True
    assert product["pricing"]["sale_price_local"] is None
    assert product["pricing"]["local_available"] is False


def test_price2_breakdown(client, admin_headers):
    product = _new_product(
        client, admin_headers, has_price2=True, list_price2=200, discount_percent2=0, price2_label="Bayi",
    ).json()["product"]
    assert product["price2_label"] == "Bayi"
    assert product["pricing2"]["buy_price"] == 200

    price = client.get(f"/api/products/{product['id']}/price", params={"price_type": "price2"}).json()
    assert price["pricing"]["buy_price"] == 200


def test_update_validation(client, admin_headers, product):
    assert client.put(f"/api/products/{product.id}", json={}, headers=admin_headers).status_code == 400
    assert client.put(f"/api/products/{product.id}", json={"name": "  "}, headers=admin_headers).status_code == 400
    assert client.put("/api/products/999", json={"name": "x"}, headers=admin_headers).status_code == 404


def test_soft_delete_hides_from_default_list(client, admin_headers, product):
    resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)
    assert resp.json()["product"]["is_active"] is False

    assert client.get("/api/products/").json()["products"] == []
    all_products = client.get("/api/products/", params={"active": "false"}).json()["products"]
    assert [p["id"] for p in all_products] == [product.id]


def test_search_needs_two_chars_or_id(client, product):
    assert client.get("/api/products/search", params={"q": "H"}).json()["products"] == []
    found = client.get("/api/products/search", params={"q": "bolt"}).json()["products"]
    assert [p["name"] for p in found] == ["Hex Bolt M8"]
    by_id = client.get("/api/products/search", params={"id": product.id}).json()["products"]
    assert by_id[0]["id"] == product.id


def test_current_supplier_link_is_kept_single(client, admin_headers, db):
    s1 = Supplier(name="Norm Civata")
    s2 = Supplier(name="Ege Hirdavat")
    db.add_all([s1, s2])
    db.commit()

    product = _new_product(client, admin_headers, current_supplier_id=s1.id).json()["product"]
    client.put(f"/api/products/{product['id']}", json={"current_supplier_id": s2.id}, headers=admin_headers)

    detail = client.get(f"/api/products/{product['id']}").json()
    current = {link["supplier_id"]: link["is_current"] for link in detail["suppliers"]}
    assert current == {s1.id: False, s2.id: True}

    db.expire_all()
    assert db.query(ProductSupplier).filter(ProductSupplier.is_current == True).count() == 1


def test_variations_bulk_replace_and_custom_price(client, admin_headers, product):
    payload = {
        "groups": [{"name": "Size", "values": ["M8", "M10"]}],
        "variations": [
            {"variation_label": "M8"},
            {"variation_label": "M10", "has_custom_price": True, "list_price": "200", "discount_percent": "0"},
        ],
    }
    resp = client.post(f"/api/products/{product.id}/variations", json=payload, headers=admin_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [v["variation_label"] for v in body["variations"]] == ["M8", "M10"]
    assert body["groups"][0]["values"] == ["M8", "M10"]

    m10 = body["variations"][1]
    price = client.get(f"/api/products/{product.id}/price", params={"variation_id": m10["id"]}).json()
    # 200 + 35% profit + 20% KDV
    assert price["pricing"]["sale_price"] == 324.0

    resp = client.post(
        f"/api/products/{product.id}/variations",
        json={"variations": [{"variation_label": "Only"}], "groups": []},
        headers=admin_headers,
    )
    assert [v["variation_label"] for v in resp.json()["variations"]] == ["Only"]
    assert resp.json()["groups"] == []


def test_spec_images(client, admin_headers, employee_headers, product):
    url = f"/api/products/{product.id}/spec-images"
    assert client.post(url, json={"image_url": "https://img/x.png"}, headers=employee_headers).status_code == 403

    img = client.post(url, json={"image_url": "https://img/x.png"}, headers=admin_headers).json()
    assert img["sort_order"] == 0
    assert len(client.get(url).json()) == 1

    assert client.delete(f"{url}/{img['id']}", headers=admin_headers).status_code == 200
    assert client.get(url).json() == []


def test_brand_crud(client, admin_headers, employee_headers, product, db):
    resp = client.post("/api/brands/", json={"name": "Norm"}, headers=employee_headers)
    assert resp.status_code == 201
    brand_id = resp.json()["id"]

    dup = client.post("/api/brands/", json={"name": "Norm"}, headers=employee_headers)
    assert dup.status_code == 409
    assert dup.json() == {"error": "A brand with this name already exists"}

    client.put(f"/api/products/{product.id}", json={"brand_id": brand_id}, headers=admin_headers)
    brands = client.get("/api/brands/").json()
    assert brands[0]["product_count"] == 1

    assert client.delete(f"/api/brands/{brand_id}", headers=employee_headers).status_code == 403
    assert client.delete(f"/api/brands/{brand_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/products/{product.id}").json()["product"]["brand_id"] is None


def test_supplier_crud(client, admin_headers, employee_headers):
    resp = client.post(
        "/api/suppliers/", json={"name": "Norm Civata", "vade_days": 60}, headers=employee_headers,
    )
    assert resp.status_code == 201
    supplier_id = resp.json()["id"]

    assert client.post("/api/suppliers/", json={"name": "Norm Civata"}, headers=employee_headers).status_code == 409
    assert client.post("/api/suppliers/", json={"name": " "}, headers=employee_headers).status_code == 400
    assert client.put(f"/api/suppliers/{supplier_id}", json={}, headers=employee_headers).status_code == 400

    resp = client.put(f"/api/suppliers/{supplier_id}", json={"notes": "Pays late"}, headers=employee_headers)
    assert resp.json()["notes"] == "Pays late"

    product = _new_product(client, admin_headers, current_supplier_id=supplier_id).json()["product"]
    detail = client.get(f"/api/suppliers/{supplier_id}").json()
    assert [p["id"] for p in detail["current_products"]] == [product["id"]]
    assert len(detail["all_product_links"]) == 1

    assert client.delete(f"/api/suppliers/{supplier_id}", headers=employee_headers).status_code == 403
    assert client.delete(f"/api/suppliers/{supplier_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/products/{product['id']}").json()["product"]["current_supplier_id"] is None
