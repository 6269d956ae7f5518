"""HTTP tests: routers relay to services and map business errors to 4xx."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from marketplace.api.dependencies import get_lock_service, get_notification_service
from marketplace.data.database import get_db
from marketplace.main import app


@pytest.fixture
def client(session_factory, lock_service, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notification_service] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_user(client, username):
    resp = client.post("/users/", json={"username": username})
    assert resp.status_code == 200
    return resp.json()["id"]


def create_product(client, seller_id, **overrides):
    payload = {"seller_id": seller_id, "name": "Czajnik", "price": "50.00", "stock_quantity": 5}
    payload.update(overrides)
    resp = client.post("/products/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


@pytest.fixture
def people(client):
    return {
        "buyer": create_user(client, "api-buyer"),
        "seller": create_user(client, "api-seller"),
        "stranger": create_user(client, "api-stranger"),
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_users_are_idempotent_by_username(client):
    first = create_user(client, "same")
    assert create_user(client, "same") == first
    assert client.get(f"/users/{first}").json() == {"id": first, "username": "same"}
    assert client.get("/users/9999").status_code == 404


def test_cart_checkout_and_lifecycle(client, people, notifier):
    buyer, seller = people["buyer"], people["seller"]
    kettle = create_product(client, seller, discount="10")
    mug = create_product(client, seller, name="Kubek", price="8.00", stock_quantity=3)

    client.post(f"/carts/{buyer}/items", json={"product_id": kettle, "quantity": 2})
    resp = client.post(f"/carts/{buyer}/items", json={"product_id": mug, "quantity": 1})
    assert resp.json()["total_quantity"] == 3

    resp = client.post("/orders/checkout", json={"user_id": buyer})
    assert resp.status_code == 201
    orders = {o["product_id"]: o for o in resp.json()}
    assert Decimal(orders[kettle]["unit_price"]) == Decimal("45.00")
    assert Decimal(orders[kettle]["total_amount"]) == Decimal("90.00")
    assert client.get(f"/carts/{buyer}").json()["items"] == []
    assert client.get(f"/products/{kettle}").json()["stock_quantity"] == 3
    assert len(notifier.created) == 2

    order_id = orders[kettle]["id"]
    resp = client.patch(f"/orders/{order_id}/status", json={"status": "PAID", "actor_id": buyer})
    assert resp.json()["status"] == "PAID"
    resp = client.patch(f"/orders/{order_id}/status", json={"status": "SHIPPED", "actor_id": seller})
    assert resp.json()["status"] == "SHIPPED"

    # wyslanego nie mozna anulowac
    assert client.post(f"/orders/{order_id}/cancel", params={"user_id": buyer}).status_code == 400

    resp = client.patch(f"/orders/{order_id}/status", json={"status": "COMPLETED", "actor_id": buyer})
    assert resp.json()["status"] == "COMPLETED"
    assert resp.json()["status_description"] == "Zrealizowane"


def test_cancel_releases_stock(client, people):
    buyer, seller = people["buyer"], people["seller"]
    product = create_product(client, seller)
    order = client.post("/orders/", json={"user_id": buyer, "product_id": product, "quantity": 2}).json()

    resp = client.post(f"/orders/{order['id']}/cancel", params={"user_id": buyer})

    assert resp.status_code == 200
    assert resp.json()["status"] == "CANCELLED"
    body = client.get(f"/products/{product}").json()
    assert (body["stock_quantity"], body["sales_count"]) == (5, 2)


def test_error_mapping(client, people):
    buyer, seller, stranger = people["buyer"], people["seller"], people["stranger"]
    product = create_product(client, seller, stock_quantity=2)
    order = client.post("/orders/", json={"user_id": buyer, "product_id": product, "quantity": 1}).json()

    # brak stanu
    resp = client.post("/orders/", json={"user_id": buyer, "product_id": product, "quantity": 5})
    assert resp.status_code == 409
    # brak produktu
    assert client.post("/orders/", json={"user_id": buyer, "product_id": 999, "quantity": 1}).status_code == 404
    # sprzedawca nie anuluje zamowienia kupujacego
    assert client.post(f"/orders/{order['id']}/cancel", params={"user_id": seller}).status_code == 403
    # obcy nie widzi zamowienia
    assert client.get(f"/orders/{order['id']}", params={"user_id": stranger}).status_code == 403
    assert client.get(f"/orders/{order['id']}", params={"user_id": seller}).status_code == 200
    assert client.get("/orders/424242", params={"user_id": buyer}).status_code == 404
    # pusty koszyk
    assert client.post("/orders/checkout", json={"user_id": buyer}).status_code == 400
    # walidacja wejscia
    assert client.post("/orders/", json={"user_id": buyer, "product_id": product, "quantity": 0}).status_code == 422
    resp = client.patch(f"/orders/{order['id']}/status", json={"status": "LOST", "actor_id": buyer})
    assert resp.status_code == 422


def test_cart_rejections(client, people):
    buyer, seller = people["buyer"], people["seller"]
    product = create_product(client, seller)
    client.post(f"/carts/{buyer}/items", json={"product_id": product, "quantity": 1})

    assert client.post(f"/carts/{buyer}/items", json={"product_id": product, "quantity": -2}).status_code == 400
    assert client.post(f"/carts/{buyer}/items", json={"product_id": product, "quantity": 0}).status_code == 400
    assert client.put(f"/carts/{buyer}/items/{product}", json={"quantity": 1000}).status_code == 422

    resp = client.put(f"/carts/{buyer}/items/{product}", json={"quantity": 4})
    assert resp.json()["items"] == [{"product_id": product, "quantity": 4}]
    assert client.delete(f"/carts/{buyer}/items/{product}").json()["items"] == []
    assert client.delete(f"/carts/{buyer}").status_code == 200
    assert client.get("/carts/9999").status_code == 404


def test_restock_requires_owner(client, people):
    product = create_product(client, people["seller"], stock_quantity=1)

    resp = client.post(f"/products/{product}/restock", json={"seller_id": people["buyer"], "quantity": 5})
    assert resp.status_code == 403

    resp = client.post(f"/products/{product}/restock", json={"seller_id": people["seller"], "quantity": 5})
    assert resp.json()["stock_quantity"] == 6


def test_listing_statistics_and_purchase_check(client, people):
    buyer, seller = people["buyer"], people["seller"]
    product = create_product(client, seller, price="20.00", stock_quantity=10)
    for quantity in (1, 2, 3):
        client.post("/orders/", json={"user_id": buyer, "product_id": product, "quantity": quantity})

    page = client.get(f"/orders/buyer/{buyer}", params={"size": 2}).json()
    assert (page["total"], page["pages"], len(page["items"])) == (3, 2, 2)
    assert client.get(f"/orders/seller/{seller}", params={"status": "PENDING"}).json()["total"] == 3
    assert client.get(f"/orders/seller/{seller}", params={"status": "PAID"}).json()["total"] == 0

    stats = client.get(f"/orders/buyer/{buyer}/statistics").json()
    assert stats["total_orders"] == 3
    assert Decimal(stats["total_amount"]) == Decimal("120.00")
    assert client.get(f"/orders/seller/{seller}/statistics").json()["pending_orders"] == 3

    check = client.get("/orders/purchased", params={"user_id": buyer, "product_id": product}).json()
    assert check["purchased"] is True
