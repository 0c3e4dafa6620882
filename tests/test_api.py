from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from atelier.api import create_app
from atelier.cart import MemoryCartStorage
from atelier.catalog import MemoryCatalog
from atelier.checkout import MemoryLedger
from atelier.orders import MemoryOrderRepository
from atelier.shop import Shop

from conftest import FixedClock, ScriptedGateway

ADDRESS = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "address1": "12 St James's Square",
    "city": "Portland",
    "state": "OR",
    "postal_code": "97201",
}


@pytest.fixture
def shop(catalog: MemoryCatalog, gateway: ScriptedGateway, clock: FixedClock) -> Shop:
    return Shop(
        MemoryCartStorage(),
        catalog,
        gateway,
        MemoryOrderRepository(clock=clock),
        MemoryLedger(clock=clock),
        clock=clock,
    )


@pytest.fixture
def client(shop: Shop) -> Iterator[TestClient]:
    with TestClient(create_app(shop)) as client:
        yield client


def fill_cart(client: TestClient) -> dict:
    client.post("/cart/items", json={"product_id": "p1", "quantity": 1, "size": "M"})
    response = client.post("/cart/items", json={"product_id": "p2"})
    assert response.status_code == 200
    return response.json()


def reach_review(client: TestClient) -> dict:
    assert client.post("/checkout").status_code == 200
    assert client.put("/checkout/shipping-address", json=ADDRESS).status_code == 200
    assert client.post("/checkout/advance").status_code == 200
    assert client.post("/checkout/payment-method/collect").status_code == 200
    response = client.post("/checkout/advance")
    assert response.status_code == 200
    return response.json()


class TestCart:
    def test_empty(self, client: TestClient) -> None:
        body = client.get("/cart").json()

        assert body["items"] == []
        assert body["summary"]["total"] == 0
        assert body["summary"]["shipping"] == 0

    def test_add_merges_and_prices(self, client: TestClient) -> None:
        client.post("/cart/items", json={"product_id": "p1", "quantity": 1, "size": "M"})
        body = client.post("/cart/items", json={"product_id": "p1", "quantity": 2, "size": "M"}).json()

        assert len(body["items"]) == 1
        assert body["items"][0]["quantity"] == 3
        assert body["items"][0]["unit_price"] == 5000
        assert body["summary"]["subtotal"] == 15000
        assert body["summary"]["display"]["total"] == "$162.00"

    def test_update_and_remove(self, client: TestClient) -> None:
        line_id = fill_cart(client)["items"][0]["id"]

        body = client.patch(f"/cart/items/{line_id}", json={"quantity": 4}).json()
        assert body["items"][0]["quantity"] == 4

        body = client.patch(f"/cart/items/{line_id}", json={"quantity": 0}).json()
        assert [item["product_id"] for item in body["items"]] == ["p2"]

        body = client.delete(f"/cart/items/{body['items'][0]['id']}").json()
        assert body["items"] == []

    def test_clear(self, client: TestClient) -> None:
        fill_cart(client)

        assert client.delete("/cart").json()["items"] == []
        assert client.delete("/cart").status_code == 200

    def test_validation_error(self, client: TestClient) -> None:
        response = client.post("/cart/items", json={"product_id": "p1", "quantity": 0})

        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "validation"

    def test_unknown_product(self, client: TestClient) -> None:
        response = client.post("/cart/items", json={"product_id": "nope"})

        assert response.status_code == 502
        assert response.json()["detail"]["kind"] == "catalog"


class TestCheckout:
    def test_no_checkout_yet(self, client: TestClient) -> None:
        assert client.get("/checkout").status_code == 404

    def test_shipping_methods(self, client: TestClient) -> None:
        body = client.get("/shipping-methods").json()

        assert [m["id"] for m in body] == ["standard", "express", "overnight"]
        assert body[0]["label"] == "Standard Shipping ($9.99, 5-7 business days)"

    def test_missing_address_fields(self, client: TestClient) -> None:
        client.post("/checkout")
        client.put("/checkout/shipping-address", json={**ADDRESS, "city": ""})

        response = client.post("/checkout/advance")

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "missing shipping city"
        assert response.json()["detail"]["fields"] == ["city"]

    def test_full_flow(self, client: TestClient, gateway: ScriptedGateway) -> None:
        fill_cart(client)
        client.post("/checkout")
        client.put("/checkout/shipping-address", json=ADDRESS)
        client.put("/checkout/shipping-method", json={"method_id": "express"})
        client.post("/checkout/advance")
        client.put("/checkout/payment-method", json={"id": "pm_card_visa", "label": "Visa"})
        review = client.post("/checkout/advance").json()

        assert review["step"] == "review"
        assert review["review"]["total"] == 25000 + 2000 + 1999

        done = client.post("/checkout/submit").json()

        assert done["step"] == "done"
        assert done["awaiting_clear"] is False
        assert done["order"]["order_number"].startswith("ORD-")
        assert done["order"]["charged"]["total"] == 28999
        assert client.get("/cart").json()["items"] == []

        order = client.get(f"/orders/{done['order']['id']}").json()
        assert order["status"] == "confirmed"
        assert len(order["items"]) == 2
        assert gateway.charges[0].amount == 28999

    def test_declined(self, client: TestClient, gateway: ScriptedGateway) -> None:
        fill_cart(client)
        reach_review(client)
        gateway.outcome = "decline"

        response = client.post("/checkout/submit")

        assert response.status_code == 402
        assert response.json()["detail"]["message"] == "Your card was declined"
        assert client.get("/checkout").json()["step"] == "review"
        assert len(client.get("/cart").json()["items"]) == 2

    def test_empty_cart(self, client: TestClient) -> None:
        reach_review(client)

        response = client.post("/checkout/submit")

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "empty_cart"

    def test_back_and_cancel(self, client: TestClient) -> None:
        fill_cart(client)
        reach_review(client)

        assert client.post("/checkout/back").json()["step"] == "payment"
        assert client.post("/checkout/cancel").json()["step"] == "cancelled"
        assert client.post("/checkout/advance").status_code == 409
        assert len(client.get("/cart").json()["items"]) == 2

    def test_unknown_order(self, client: TestClient) -> None:
        assert client.get("/orders/order-missing").status_code == 404
