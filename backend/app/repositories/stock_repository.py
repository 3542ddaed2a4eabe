"""
Stock Repository - guarded stock mutations

Every statement here is a single atomic UPDATE; none of them reads a value
into Python and writes it back. Decrements carry their own guard in the
WHERE clause, so under concurrent writers Postgres re-checks the guard
against the latest committed row before applying it, and the row lock is
held until the enclosing transaction ends.

A decrement that returns None means the guard failed (or the row does
not exist); nothing was changed.
"""
from typing import Optional


class StockRepository:
    """Atomic base-stock and variant-stock arithmetic"""

    def __init__(self, cursor):
        self.cursor = cursor

    def _returned_stock(self) -> Optional[int]:
        row = self.cursor.fetchone()
        return row['stock'] if row else None

    # ------------------------------------------------------------------
    # Base stock (products.stock)
    # ------------------------------------------------------------------

    def decrement_base(self, product_id: int, quantity: int) -> Optional[int]:
        self.cursor.execute("""
            UPDATE products
            SET stock = stock - %s, updated_at = NOW()
            WHERE id = %s AND stock >= %s
            RETURNING stock
        """, (quantity, product_id, quantity))
        return self._returned_stock()

    def increment_base(self, product_id: int, quantity: int) -> Optional[int]:
        self.cursor.execute("""
            UPDATE products
            SET stock = stock + %s, updated_at = NOW()
            WHERE id = %s
            RETURNING stock
        """, (quantity, product_id))
        return self._returned_stock()

    # ------------------------------------------------------------------
    # Variant stock (product_variant_stock, one row per variant key)
    # ------------------------------------------------------------------

    def decrement_variant(self, product_id: int, variant_key: str, quantity: int) -> Optional[int]:
        self.cursor.execute("""
            UPDATE product_variant_stock
            SET stock = stock - %s, updated_at = NOW()
            WHERE product_id = %s AND variant_key = %s AND stock >= %s
            RETURNING stock
        """, (quantity, product_id, variant_key, quantity))
        return self._returned_stock()

    def increment_variant(self, product_id: int, variant_key: str, quantity: int) -> Optional[int]:
        # A schema-valid key with no row yet starts from zero
        self.cursor.execute("""
            INSERT INTO product_variant_stock (product_id, variant_key, stock, updated_at)
            VALUES (%s, %s, %s, NOW())
            ON CONFLICT (product_id, variant_key)
            DO UPDATE SET
                stock = product_variant_stock.stock + EXCLUDED.stock,
                updated_at = NOW()
            RETURNING stock
        """, (product_id, variant_key, quantity))
        return self._returned_stock()
