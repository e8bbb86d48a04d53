# tests/test_routes.py

import httpx
from fastapi.testclient import TestClient

from ordertrack.main import app
from ordertrack.services.airtable import AirtableClient
from ordertrack.services.store import OrderStore


# ────────────── /api/orders/{orderNumber} ──────────────

def test_get_order_by_number(client):
    response = client.get("/api/orders/SW-1001")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == 1
    assert body["orderNumber"] == "SW-1001"
    assert body["airtableId"] == "recSW1001"
    assert body["recipientName"] == "Somchai Jaidee"
    assert body["paymentStatus"] == "PAID"
    assert body["isPaid"] is True
    assert body["trackingUpdates"][0]["status"] == "Order Received"


def test_get_order_by_number_is_cached(client, source):
    first = client.get("/api/orders/SW-1001").json()
    second = client.get("/api/orders/SW-1001").json()

    assert first["id"] == second["id"]
    assert source.order_number_calls == 1


def test_get_order_by_number_records_recent_view(client):
    client.get("/api/orders/SW-1001")

    recent = client.get("/api/recent-orders").json()

    assert [r["orderNumber"] for r in recent] == ["SW-1001"]


def test_get_order_by_number_not_found(client):
    response = client.get("/api/orders/NOPE")

    assert response.status_code == 404
    assert response.json() == {"message": "Order not found"}
    assert client.get("/api/recent-orders").json() == []


def test_get_order_by_blank_number(client):
    response = client.get("/api/orders/%20")

    assert response.status_code == 400
    assert response.json()["message"] == "Order number is required"


def test_get_order_upstream_failure_is_generic(client):
    def handler(request):
        return httpx.Response(500, json={"error": {"type": "SERVER_ERROR", "message": "secret upstream detail"}})

    app.state.store = OrderStore(AirtableClient(transport=httpx.MockTransport(handler)))

    response = client.get("/api/orders/UNKNOWN")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch order information"}
    assert "secret" not in response.text


def test_get_order_upstream_empty_is_not_found(client):
    app.state.store = OrderStore(AirtableClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"records": []}))
    ))

    response = client.get("/api/orders/NOPE")

    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


def test_get_order_upstream_unreachable(client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    app.state.store = OrderStore(AirtableClient(transport=httpx.MockTransport(handler)))

    response = client.get("/api/orders/SW-1001")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch order information"}


def test_unexpected_error_is_internal(store, source):
    source.error = RuntimeError("cache exploded")

    with TestClient(app, raise_server_exceptions=False) as test_client:
        app.state.store = store
        response = test_client.get("/api/orders/SW-1001")

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}
    assert "exploded" not in response.text


# ────────────── /api/orders/phone/... ──────────────

def test_get_orders_by_phone(client):
    response = client.get("/api/orders/phone/0812345678")

    assert response.status_code == 200
    numbers = sorted(o["orderNumber"] for o in response.json())
    assert numbers == ["SW-1001", "SW-1002"]


def test_get_orders_by_phone_does_not_record_views(client):
    client.get("/api/orders/phone/0812345678")

    assert client.get("/api/recent-orders").json() == []


def test_get_orders_by_unknown_phone(client):
    response = client.get("/api/orders/phone/0000000000")

    assert response.status_code == 404
    assert response.json() == {"message": "No orders found for this phone number"}


def test_get_order_by_phone_and_number(client):
    response = client.get("/api/orders/phone/0812345678/SW-1002")

    assert response.status_code == 200
    body = response.json()
    assert body["orderNumber"] == "SW-1002"
    assert body["isPaid"] is False
    assert [r["orderNumber"] for r in client.get("/api/recent-orders").json()] == ["SW-1002"]


def test_get_order_by_phone_and_foreign_number(client):
    client.get("/api/orders/phone/0812345678")

    response = client.get("/api/orders/phone/0812345678/SW-2001")

    assert response.status_code == 404
    assert response.json()["message"] == "Order not found"


def test_get_order_by_unknown_phone_and_number(client):
    response = client.get("/api/orders/phone/0000000000/SW-1001")

    assert response.status_code == 404


# ────────────── /api/recent-orders ──────────────

def test_post_recent_order(client):
    response = client.post(
        "/api/recent-orders",
        json={"orderNumber": "SW-1001", "viewedAt": "2025-05-01T12:00:00Z"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["orderNumber"] == "SW-1001"
    assert body["viewedAt"].startswith("2025-05-01T12:00:00")
    assert isinstance(body["id"], int)


def test_post_recent_order_defaults_viewed_at(client):
    response = client.post("/api/recent-orders", json={"orderNumber": "SW-1001"})

    assert response.status_code == 201
    assert response.json()["viewedAt"]


def test_post_recent_order_missing_order_number(client):
    response = client.post("/api/recent-orders", json={"viewedAt": "2025-05-01T12:00:00Z"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    assert any("orderNumber" in detail["loc"] for detail in body["details"])


def test_get_recent_orders_limit(client):
    for i in range(7):
        client.post(
            "/api/recent-orders",
            json={"orderNumber": f"SW-{i}", "viewedAt": f"2025-05-01T12:0{i}:00Z"},
        )

    default = client.get("/api/recent-orders").json()
    limited = client.get("/api/recent-orders", params={"limit": 2}).json()

    assert len(default) == 5
    assert [r["orderNumber"] for r in limited] == ["SW-6", "SW-5"]


def test_get_recent_orders_invalid_limit(client):
    response = client.get("/api/recent-orders", params={"limit": 0})

    assert response.status_code == 400
    assert "details" in response.json()


def test_root(client):
    assert client.get("/").status_code == 200
