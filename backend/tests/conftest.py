"""
Pytest fixtures and configuration for Storefront Orders backend tests

Services are exercised against the in-memory unit of work in fakes.py;
repository tests mock the psycopg2 cursor directly.

Date: 2026-10-15
"""
from datetime import datetime, timezone

import pytest

from app.domain.order import OrderCreate
from app.services.coupon_service import CouponValidator
from app.services.order_cancellation_service import OrderCancellationService
from app.services.order_service import OrderService
from app.services.stock_ledger import StockLedger
from fakes import InMemoryStore


FROZEN_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    """Fresh in-memory database for each test"""
    return InMemoryStore()


@pytest.fixture
def ledger():
    return StockLedger(low_stock_threshold=5)


@pytest.fixture
def now():
    return FROZEN_NOW


@pytest.fixture
def order_service(store, ledger):
    return OrderService(uow_factory=store.unit_of_work, ledger=ledger, clock=lambda: FROZEN_NOW)


@pytest.fixture
def cancellation_service(store, ledger):
    return OrderCancellationService(uow_factory=store.unit_of_work, ledger=ledger)


@pytest.fixture
def coupon_validator(store):
    return CouponValidator(uow_factory=store.unit_of_work, clock=lambda: FROZEN_NOW)


@pytest.fixture
def make_order_request():
    """
    Build an OrderCreate. items is a list of dicts with product_id,
    quantity and optionally price / selected_variant.
    """
    def _make(items, email="buyer@example.com", coupon_code=None):
        return OrderCreate(
            email=email,
            full_name="Test Buyer",
            phone_number="+15551234567",
            items=items,
            address={
                "street": "1 Main St",
                "city": "Springfield",
                "state": "IL",
                "zip_code": "62701",
                "country": "US",
            },
            coupon_code=coupon_code,
        )

    return _make
