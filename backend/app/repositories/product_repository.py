"""
Product Repository - Data Access Layer for Products

Handles product reads inside a unit of work and returns Product domain
models with their variant stock attached.
"""
from typing import Dict, Iterable, List, Optional
from app.domain.product import Product


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    def __init__(self, cursor):
        self.cursor = cursor

    @staticmethod
    def _map_row_to_product(row: dict, variant_rows: Iterable[dict] = ()) -> Product:
        """Map a products row plus its product_variant_stock rows to a Product"""
        return Product(
            id=row['id'],
            vendor_id=row.get('vendor_id'),
            name=row['name'],
            price=row['price'],
            stock=row['stock'],
            variants=row.get('variants') or {},
            variant_stock={vr['variant_key']: vr['stock'] for vr in variant_rows},
            is_active=row['is_active'],
            created_at=row.get('created_at'),
            updated_at=row.get('updated_at')
        )

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID

        Returns:
            Product or None if not found
        """
        return self.find_by_ids([product_id]).get(product_id)

    def find_by_ids(self, product_ids: List[int]) -> Dict[int, Product]:
        """
        Batch fetch products (avoids N+1 during checkout)

        Returns:
            Dict of product_id -> Product; missing IDs are simply absent
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        self.cursor.execute("""
            SELECT
                id, vendor_id, name, price, stock, variants,
                is_active, created_at, updated_at
            FROM products
            WHERE id = ANY(%s)
        """, (ids,))
        rows = self.cursor.fetchall()

        self.cursor.execute("""
            SELECT product_id, variant_key, stock
            FROM product_variant_stock
            WHERE product_id = ANY(%s)
        """, (ids,))
        variant_rows = self.cursor.fetchall()

        by_product: Dict[int, List[dict]] = {}
        for vr in variant_rows:
            by_product.setdefault(vr['product_id'], []).append(vr)

        return {
            row['id']: self._map_row_to_product(row, by_product.get(row['id'], []))
            for row in rows
        }
