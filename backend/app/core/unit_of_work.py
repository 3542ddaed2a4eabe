"""
Unit of Work

One database transaction shared by every repository call made through it.
Services open one per operation and pass it explicitly to collaborators
(e.g. StockLedger.adjust), so nothing depends on ambient transaction state.

    with UnitOfWork() as uow:
        product = uow.products.find_by_id(1)
        uow.stock.decrement_base(product.id, 2)
    # committed here; any exception inside the block rolls everything back

Isolation is Postgres' default READ COMMITTED. That is enough because every
stock and coupon mutation is a single guarded UPDATE: a writer blocked on a
row lock re-evaluates its WHERE guard against the newly committed row.
"""
import logging

from app.core.database import get_db_connection_dict_with_retry
from app.repositories import (
    AddressRepository,
    CouponRepository,
    OrderRepository,
    ProductRepository,
    StockRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Postgres transaction exposing the repositories bound to it"""

    def __init__(self, connection_factory=None):
        self._connection_factory = connection_factory or get_db_connection_dict_with_retry
        self.conn = None
        self.cursor = None

    def __enter__(self) -> "UnitOfWork":
        self.conn = self._connection_factory()
        self.cursor = self.conn.cursor()

        self.products = ProductRepository(self.cursor)
        self.stock = StockRepository(self.cursor)
        self.orders = OrderRepository(self.cursor)
        self.users = UserRepository(self.cursor)
        self.addresses = AddressRepository(self.cursor)
        self.coupons = CouponRepository(self.cursor)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        try:
            if exc_type is None:
                self.conn.commit()
            else:
                logger.debug(f"Rolling back unit of work: {exc_type.__name__}")
                self.conn.rollback()
        finally:
            self.cursor.close()
            self.conn.close()
        return False
