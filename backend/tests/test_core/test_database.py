"""
Unit tests for schema declaration and connection retry
"""
from unittest.mock import MagicMock, patch

import psycopg2
import pytest
from sqlalchemy import create_engine, inspect

from app.core.database import create_schema, get_db_connection_dict_with_retry


def test_create_schema_declares_every_table():
    engine = create_engine("sqlite://")

    create_schema(engine)

    tables = set(inspect(engine).get_table_names())
    assert tables == {
        "users", "addresses", "products", "product_variant_stock",
        "orders", "order_items", "coupons"
    }
    pk = inspect(engine).get_pk_constraint("product_variant_stock")["constrained_columns"]
    assert set(pk) == {"product_id", "variant_key"}


class TestConnectionRetry:
    @patch("app.core.database.time.sleep")
    @patch("app.core.database.psycopg2.connect")
    def test_retries_operational_errors(self, mock_connect, mock_sleep):
        conn = MagicMock()
        mock_connect.side_effect = [psycopg2.OperationalError("SSL connection has been closed unexpectedly"), conn]

        assert get_db_connection_dict_with_retry(max_retries=3, retry_delay=0.5) is conn
        mock_sleep.assert_called_once_with(0.5)

    @patch("app.core.database.time.sleep")
    @patch("app.core.database.psycopg2.connect")
    def test_gives_up_after_max_retries(self, mock_connect, mock_sleep):
        mock_connect.side_effect = psycopg2.OperationalError("down")

        with pytest.raises(psycopg2.OperationalError):
            get_db_connection_dict_with_retry(max_retries=3, retry_delay=1)

        assert mock_connect.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]
