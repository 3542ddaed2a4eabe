"""
Unit tests for OrderRepository, CouponRepository and UserRepository
"""
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from app.domain.order import OrderStatus, CANCELLABLE_STATUSES
from app.repositories.coupon_repository import CouponRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.user_repository import UserRepository


ORDER_ROW = {
    'id': 10,
    'user_id': 1,
    'address_id': 4,
    'full_name': 'Ana Buyer',
    'phone_number': '5551234567',
    'status': 'PROCESSING',
    'subtotal': Decimal('40.00'),
    'discount_amount': Decimal('0.00'),
    'coupon_code': None,
    'total': Decimal('40.00'),
    'created_at': datetime(2026, 3, 1, tzinfo=timezone.utc),
    'updated_at': None,
    'street': '1 Main St',
    'city': 'Springfield',
    'state': 'IL',
    'zip_code': '62701',
    'country': 'US'
}

ITEM_ROW = {
    'id': 100,
    'order_id': 10,
    'product_id': 7,
    'product_name': 'Linen Shirt',
    'quantity': 2,
    'price': Decimal('20.00'),
    'selected_variant': 'Color:White,Size:M'
}


class TestOrderRepository:
    def test_find_by_id_maps_items_and_address(self):
        # Arrange
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = ORDER_ROW
        mock_cursor.fetchall.return_value = [ITEM_ROW]

        # Act
        order = OrderRepository(mock_cursor).find_by_id(10)

        # Assert
        assert order.id == 10
        assert order.status == OrderStatus.PROCESSING
        assert order.address.city == 'Springfield'
        assert order.items[0].selected_variant == 'Color:White,Size:M'
        assert order.total_quantity == 2

    def test_find_by_id_not_found(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = None

        assert OrderRepository(mock_cursor).find_by_id(10) is None
        mock_cursor.execute.assert_called_once()

    def test_transition_status_is_guarded(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = {'id': 10}

        moved = OrderRepository(mock_cursor).transition_status(
            10, OrderStatus.CANCELLED, CANCELLABLE_STATUSES
        )

        assert moved is True
        sql, params = mock_cursor.execute.call_args[0]
        assert "status = ANY(%s)" in sql
        assert params == ('CANCELLED', 10, ['PENDING', 'PROCESSING'])

    def test_transition_status_lost_race(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = None

        assert OrderRepository(mock_cursor).transition_status(
            10, OrderStatus.CANCELLED, CANCELLABLE_STATUSES
        ) is False

    def test_create_returns_id_and_timestamp(self):
        mock_cursor = MagicMock()
        created_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
        mock_cursor.fetchone.return_value = {'id': 11, 'created_at': created_at}

        header = OrderRepository(mock_cursor).create(
            user_id=1, address_id=4, status=OrderStatus.PROCESSING,
            subtotal=Decimal('40.00'), discount_amount=Decimal('0'), total=Decimal('40.00')
        )

        assert header == {'id': 11, 'created_at': created_at}
        _, params = mock_cursor.execute.call_args[0]
        assert 'PROCESSING' in params


class TestCouponRepository:
    def test_find_by_code_normalizes(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = None

        CouponRepository(mock_cursor).find_by_code("  save10 ")

        _, params = mock_cursor.execute.call_args[0]
        assert params == ("SAVE10",)

    def test_consume_is_guarded_on_limit(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = None

        assert CouponRepository(mock_cursor).consume(3) is False
        sql, _ = mock_cursor.execute.call_args[0]
        assert "usage_count < usage_limit" in sql


class TestUserRepository:
    def test_create_if_absent_existing_email(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchone.return_value = None

        assert UserRepository(mock_cursor).create_if_absent("a@example.com", "hash") is None
        sql, _ = mock_cursor.execute.call_args[0]
        assert "ON CONFLICT (email) DO NOTHING" in sql
