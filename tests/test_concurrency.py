import pytest
from sqlalchemy.orm.exc import StaleDataError

from hub.core.enums import B2BSaleStatus
from hub.database import get_db
from hub.main import app
from hub.models import B2BSale
from hub.services import returns


def _b2b_sale(client, headers, firm_id):
    resp = client.post(
        "/api/b2b-sales/",
        json={"firm_id": firm_id, "items": [{"product_name": "Hex Bolt M8", "quantity": 10}]},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["sale"]


def test_second_writer_on_same_version_fails(client, employee_headers, firm, session_factory):
    sale_id = _b2b_sale(client, employee_headers, firm.id)["id"]

    first = session_factory()
    second = session_factory()
    try:
        mine = first.get(B2BSale, sale_id)
        theirs = second.get(B2BSale, sale_id)
        item_id = mine.items[0].id
        assert mine.version == theirs.version == 1

        returns.partial_return(mine, item_id, 4, B2BSaleStatus)
        first.commit()
        first.close()

        theirs.note = "Deliver Monday"
        with pytest.raises(StaleDataError):
            second.commit()
        second.rollback()
    finally:
        first.close()
        second.close()

    current = client.get(f"/api/b2b-sales/{sale_id}").json()["sale"]
    assert current["status"] == "partially_returned"
    assert current["items"][0]["returned_quantity"] == 4
    assert current["note"] is None


def test_stale_request_returns_409(client, employee_headers, firm, session_factory):
    sale_id = _b2b_sale(client, employee_headers, firm.id)["id"]

    # Request session that loaded the sale before someone else changed it
    stale = session_factory()
    stale.get(B2BSale, sale_id)

    other = session_factory()
    other.get(B2BSale, sale_id).is_processed = True
    other.commit()
    other.close()

    def stale_db():
        try:
            yield stale
        finally:
            stale.close()

    app.dependency_overrides[get_db] = stale_db
    resp = client.put(
        f"/api/b2b-sales/{sale_id}",
        json={"action": "update_note", "note": "Gate 3"},
        headers=employee_headers,
    )
    assert resp.status_code == 409
    assert resp.json() == {"error": "Record was modified concurrently"}
