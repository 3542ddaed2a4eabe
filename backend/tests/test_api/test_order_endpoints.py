"""
API tests for orders, coupons and product stock endpoints

The database is replaced by the in-memory unit of work through
app.dependency_overrides; the rate limiter gets a fresh store per test.
"""
import time
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.api.dependencies import get_uow_factory
from app.core import auth, rate_limit
from app.core.rate_limit import InMemoryRateLimitStore, RateLimitEntry, RateLimiter, RateLimitStore
from app.main import app

SECRET = "api-test-secret"


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(rate_limit, "rate_limiter", RateLimiter(InMemoryRateLimitStore()))
    monkeypatch.setattr(auth.settings, "AUTH_SECRET", SECRET)
    app.dependency_overrides[get_uow_factory] = lambda: store.unit_of_work
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def buyer_id(store):
    return store.add_user("buyer@example.com")


def _auth_headers(email="buyer@example.com", user_id="1"):
    token = jwt.encode(
        {"sub": user_id, "email": email, "exp": int(time.time()) + 300},
        SECRET,
        algorithm=auth.JWT_ALGORITHM
    )
    return {"Authorization": f"Bearer {token}"}


def _order_body(items, coupon_code=None):
    return {
        "email": "buyer@example.com",
        "full_name": "Test Buyer",
        "phone_number": "+15551234567",
        "items": items,
        "address": {
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": "62701",
            "country": "US"
        },
        "coupon_code": coupon_code
    }


class TestPlaceOrderEndpoint:
    def test_created(self, client, store, buyer_id):
        product_id = store.add_product(name="Lamp", price="100.00", stock=3)

        response = client.post("/api/v1/orders", json=_order_body([
            {"product_id": product_id, "quantity": 2, "price": 0.01}
        ]))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["total"] == 200.0
        assert data["status"] == "PROCESSING"
        assert response.headers["X-RateLimit-Limit"] == "30"
        assert store.stock_of(product_id) == 1

    def test_insufficient_stock_conflict(self, client, store, buyer_id):
        product_id = store.add_product(name="Lamp", stock=1)

        response = client.post("/api/v1/orders", json=_order_body([
            {"product_id": product_id, "quantity": 5}
        ]))

        assert response.status_code == 409
        assert response.json() == {
            "detail": "Insufficient stock for product: Lamp",
            "error_type": "InsufficientStock"
        }

    def test_unknown_product(self, client, buyer_id):
        response = client.post("/api/v1/orders", json=_order_body([{"product_id": 404, "quantity": 1}]))

        assert response.status_code == 404
        assert response.json()["error_type"] == "ProductNotFound"

    def test_malformed_body_rejected(self, client):
        body = _order_body([])
        response = client.post("/api/v1/orders", json=body)

        assert response.status_code == 422

    def test_store_failure_is_sanitized(self, client, store, buyer_id):
        product_id = store.add_product(stock=3)
        store.fail_on = "add_item"

        response = client.post("/api/v1/orders", json=_order_body([{"product_id": product_id, "quantity": 1}]))

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to create order", "error_type": "InternalFailure"}

    def test_rate_limited(self, client, monkeypatch):
        class ExhaustedStore(RateLimitStore):
            def hit(self, key, window_seconds, now):
                return RateLimitEntry(count=31, reset_time=now + 20)

        monkeypatch.setattr(rate_limit, "rate_limiter", RateLimiter(ExhaustedStore(), clock=lambda: 1000.0))

        response = client.post("/api/v1/orders", json=_order_body([{"product_id": 1, "quantity": 1}]))

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "20"
        assert response.headers["X-RateLimit-Reset"] == "1020"
        assert response.json()["error_type"] == "RateLimitExceeded"


class TestUserOrdersEndpoint:
    def test_requires_auth(self, client):
        response = client.get("/api/v1/user/orders")

        assert response.status_code == 401
        assert response.json()["error_type"] == "Unauthorized"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_lists_own_orders(self, client, store, buyer_id):
        product_id = store.add_product(stock=5)
        store.add_order(buyer_id, [(product_id, 2, "10.00", None)])
        other = store.add_user("other@example.com")
        store.add_order(other, [(product_id, 1, "10.00", None)])

        response = client.get("/api/v1/user/orders", headers=_auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["total_quantity"] == 2

    def test_cancel(self, client, store, buyer_id):
        product_id = store.add_product(stock=0)
        order_id = store.add_order(buyer_id, [(product_id, 3, "10.00", None)])

        response = client.patch("/api/v1/user/orders", json={"order_id": order_id}, headers=_auth_headers())

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"
        assert store.stock_of(product_id) == 3

    def test_cancel_delivered_conflict(self, client, store, buyer_id):
        product_id = store.add_product(stock=0)
        order_id = store.add_order(buyer_id, [(product_id, 3, "10.00", None)], status="DELIVERED")

        response = client.patch("/api/v1/user/orders", json={"order_id": order_id}, headers=_auth_headers())

        assert response.status_code == 409
        assert response.json()["detail"] == (
            "Order cannot be cancelled. Only pending or processing orders can be cancelled."
        )
        assert store.stock_of(product_id) == 0

    def test_cancel_someone_elses_order(self, client, store, buyer_id):
        product_id = store.add_product(stock=0)
        other = store.add_user("other@example.com")
        order_id = store.add_order(other, [(product_id, 1, "10.00", None)])

        response = client.patch("/api/v1/user/orders", json={"order_id": order_id}, headers=_auth_headers())

        assert response.status_code == 403


class TestCouponEndpoint:
    def test_valid(self, client, store):
        store.add_coupon("HALF", discount_type="PERCENTAGE", discount_value="50", max_discount=30)

        response = client.post("/api/v1/coupons/validate", json={"code": "half", "cart_total": 100})

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "discount_amount": 30.0,
            "coupon": {"code": "HALF", "discount_type": "PERCENTAGE", "discount_value": 50.0}
        }

    def test_rejected_reason(self, client, store):
        store.add_coupon("OFF", is_active=False)

        response = client.post("/api/v1/coupons/validate", json={"code": "OFF", "cart_total": 10})

        assert response.status_code == 400
        assert response.json() == {"detail": "Coupon is not active", "error_type": "CouponRejected"}

    def test_not_found(self, client):
        response = client.post("/api/v1/coupons/validate", json={"code": "NOPE", "cart_total": 10})

        assert response.status_code == 404


class TestProductStockEndpoint:
    def test_variant_stock(self, client, store):
        product_id = store.add_product(
            name="Shirt", variants={"Size": ["S", "M"], "Color": ["Red"]},
            variant_stock={"Color:Red,Size:M": 3, "Color:Red,Size:S": 9},
        )

        response = client.get(f"/api/v1/products/{product_id}/stock", params={"variant": "Size:M,Color:Red"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["stock"] == 3
        assert data["status"] == "low_stock"
        assert data["total_stock"] == 12

    def test_malformed_variant_reports_zero(self, client, store):
        product_id = store.add_product(
            name="Shirt", variants={"Size": ["S", "M"]}, variant_stock={"Size:M": 3},
        )

        response = client.get(f"/api/v1/products/{product_id}/stock", params={"variant": "Size:M:L"})

        assert response.status_code == 200
        assert response.json()["data"]["stock"] == 0
        assert response.json()["data"]["status"] == "out_of_stock"

    def test_missing_product(self, client):
        assert client.get("/api/v1/products/999/stock").status_code == 404


class TestHealth:
    def test_healthy(self, client):
        with patch("app.main.get_db_connection_dict_with_retry", return_value=MagicMock()):
            body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"]["status"] == "connected"

    def test_degraded(self, client):
        with patch("app.main.get_db_connection_dict_with_retry", side_effect=RuntimeError("down")):
            body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"]["error"] == "RuntimeError"
