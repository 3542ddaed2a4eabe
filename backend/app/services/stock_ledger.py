"""
Stock Ledger
Resolves available stock and applies guarded adjustments

Products without variants keep a single base count (products.stock).
Products with a variant schema keep one count per canonical variant key;
their base count is not authoritative.

adjust() never opens its own transaction: it runs inside the caller's unit
of work, so a failed decrement aborts everything the caller did before it.
It is not idempotent either, and compensation must replay the exact
quantity that was originally applied.
"""
import logging
from enum import Enum
from typing import Optional

from app.core.config import settings
from app.core.exceptions import InsufficientStock, ProductNotFound, ValidationError
from app.domain.product import Product
from app.domain.variants import canonicalize_variant_key, generate_variant_key, parse_variant_key

logger = logging.getLogger(__name__)


class StockDirection(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class StockLedger:
    """Service for stock reads and atomic stock mutations"""

    def __init__(self, low_stock_threshold: Optional[int] = None):
        self.low_stock_threshold = (
            settings.LOW_STOCK_THRESHOLD if low_stock_threshold is None else low_stock_threshold
        )

    @staticmethod
    def uses_variant_stock(product: Product, variant_key: Optional[str]) -> bool:
        return bool(variant_key) and product.has_variants

    @staticmethod
    def resolve_stock(product: Product, variant_key: Optional[str] = None) -> int:
        """
        Current stock for a product, or for one of its variants.

        Without a key, or for a product without variants, this is the base
        stock. Otherwise it is the variant's count, 0 if it has none.
        """
        if not StockLedger.uses_variant_stock(product, variant_key):
            return product.stock

        key = generate_variant_key(parse_variant_key(variant_key))
        return product.variant_stock.get(key, 0)

    @staticmethod
    def total_variant_stock(product: Product) -> int:
        """Stock summed across all variants (base stock when there are none)"""
        if not product.has_variants:
            return product.stock
        return sum(product.variant_stock.values())

    def stock_status(self, product: Product, variant_key: Optional[str] = None) -> StockStatus:
        stock = self.resolve_stock(product, variant_key)
        if stock <= 0:
            return StockStatus.OUT_OF_STOCK
        if stock < self.low_stock_threshold:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    def adjust(
        self,
        uow,
        product: Product,
        quantity: int,
        direction: StockDirection,
        variant_key: Optional[str] = None
    ) -> int:
        """
        Apply a stock change inside the caller's unit of work.

        Args:
            uow: Open unit of work
            product: Product being adjusted (its schema validates variant_key)
            quantity: Units to add or remove, >= 1
            direction: StockDirection.INCREMENT or DECREMENT
            variant_key: Variant to adjust; ignored for products without variants

        Returns:
            Stock level after the change

        Raises:
            InsufficientStock: decrement would take stock below zero
            ValidationError: bad quantity or variant key not in the schema
            ProductNotFound: product row disappeared
        """
        if quantity < 1:
            raise ValidationError(f"Stock adjustment quantity must be positive, got {quantity}")

        direction = StockDirection(direction)

        if self.uses_variant_stock(product, variant_key):
            key = canonicalize_variant_key(variant_key, product.variants)
            if direction == StockDirection.DECREMENT:
                new_stock = uow.stock.decrement_variant(product.id, key, quantity)
            else:
                new_stock = uow.stock.increment_variant(product.id, key, quantity)
        else:
            key = None
            if direction == StockDirection.DECREMENT:
                new_stock = uow.stock.decrement_base(product.id, quantity)
            else:
                new_stock = uow.stock.increment_base(product.id, quantity)

        if new_stock is None:
            if direction == StockDirection.DECREMENT:
                logger.warning(
                    f"Insufficient stock: product={product.id} variant={key} requested={quantity}"
                )
                raise InsufficientStock(product.id, product.name, key)
            raise ProductNotFound(product.id)

        logger.debug(
            f"Stock {direction.value} product={product.id} variant={key} "
            f"quantity={quantity} now={new_stock}"
        )
        return new_stock
