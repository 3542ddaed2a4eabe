"""
Unit tests for UnitOfWork transaction handling
"""
from unittest.mock import MagicMock

import pytest

from app.core.unit_of_work import UnitOfWork
from app.repositories import StockRepository


@pytest.fixture
def connection():
    conn = MagicMock()
    conn.cursor.return_value = MagicMock()
    return conn


class TestUnitOfWork:
    def test_commits_on_clean_exit(self, connection):
        with UnitOfWork(connection_factory=lambda: connection) as uow:
            assert isinstance(uow.stock, StockRepository)
            assert uow.stock.cursor is uow.cursor

        connection.commit.assert_called_once()
        connection.rollback.assert_not_called()
        connection.close.assert_called_once()

    def test_rolls_back_and_propagates(self, connection):
        with pytest.raises(RuntimeError):
            with UnitOfWork(connection_factory=lambda: connection):
                raise RuntimeError("boom")

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()
        connection.cursor.return_value.close.assert_called_once()
        connection.close.assert_called_once()

    def test_repositories_share_one_cursor(self, connection):
        with UnitOfWork(connection_factory=lambda: connection) as uow:
            cursors = {id(repo.cursor) for repo in (
                uow.products, uow.stock, uow.orders, uow.users, uow.addresses, uow.coupons
            )}

        assert len(cursors) == 1
