"""
Unit tests for ProductRepository

These tests validate repository logic without requiring a database connection.
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

from app.domain.product import Product
from app.repositories.product_repository import ProductRepository


def _product_row(**overrides):
    row = {
        'id': 1,
        'vendor_id': 3,
        'name': 'Linen Shirt',
        'price': Decimal('45.00'),
        'stock': 0,
        'variants': {'Size': ['S', 'M'], 'Color': ['White']},
        'is_active': True,
        'created_at': datetime.now(),
        'updated_at': None
    }
    row.update(overrides)
    return row


class TestProductRepository:
    """Test ProductRepository methods"""

    def test_find_by_id_returns_product_with_variant_stock(self):
        """Test find_by_id returns a Product domain model"""
        # Arrange: Mock cursor rows for both queries
        mock_cursor = MagicMock()
        mock_cursor.fetchall.side_effect = [
            [_product_row()],
            [
                {'product_id': 1, 'variant_key': 'Color:White,Size:S', 'stock': 2},
                {'product_id': 1, 'variant_key': 'Color:White,Size:M', 'stock': 5},
            ]
        ]

        # Act
        product = ProductRepository(mock_cursor).find_by_id(1)

        # Assert
        assert isinstance(product, Product)
        assert product.name == 'Linen Shirt'
        assert product.has_variants
        assert product.variant_stock == {'Color:White,Size:S': 2, 'Color:White,Size:M': 5}
        assert mock_cursor.execute.call_count == 2

    def test_find_by_id_returns_none_when_not_found(self):
        """Test find_by_id returns None when product doesn't exist"""
        mock_cursor = MagicMock()
        mock_cursor.fetchall.side_effect = [[], []]

        assert ProductRepository(mock_cursor).find_by_id(999) is None

    def test_find_by_ids_batches_and_dedupes(self):
        mock_cursor = MagicMock()
        mock_cursor.fetchall.side_effect = [
            [_product_row(id=1, variants=None), _product_row(id=2, variants=None, stock=4)],
            []
        ]

        products = ProductRepository(mock_cursor).find_by_ids([2, 1, 2])

        assert set(products) == {1, 2}
        assert products[2].stock == 4
        assert products[1].variants == {}
        _, params = mock_cursor.execute.call_args_list[0][0]
        assert params == ([1, 2],)

    def test_find_by_ids_empty(self):
        mock_cursor = MagicMock()

        assert ProductRepository(mock_cursor).find_by_ids([]) == {}
        mock_cursor.execute.assert_not_called()
