"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and returns Order domain models.
"""
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from app.domain.order import Address, Order, OrderItem, OrderStatus


ORDER_COLUMNS = """
    o.id, o.user_id, o.address_id, o.full_name, o.phone_number,
    o.status, o.subtotal, o.discount_amount, o.coupon_code, o.total,
    o.created_at, o.updated_at,
    a.street, a.city, a.state, a.zip_code, a.country
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    Returns Order domain models with items and the address snapshot.
    """

    def __init__(self, cursor):
        self.cursor = cursor

    @staticmethod
    def _map_row_to_order(row: dict, items: List[dict]) -> Order:
        return Order(
            id=row['id'],
            user_id=row['user_id'],
            address_id=row['address_id'],
            full_name=row.get('full_name'),
            phone_number=row.get('phone_number'),
            status=row['status'],
            subtotal=row['subtotal'],
            discount_amount=row['discount_amount'],
            coupon_code=row.get('coupon_code'),
            total=row['total'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at'),
            items=[OrderItem(**item) for item in items],
            address=Address(
                id=row['address_id'],
                user_id=row['user_id'],
                street=row['street'],
                city=row['city'],
                state=row['state'],
                zip_code=row['zip_code'],
                country=row['country']
            ) if row.get('street') is not None else None
        )

    def _items_for(self, order_ids: Sequence[int]) -> Dict[int, List[dict]]:
        if not order_ids:
            return {}

        self.cursor.execute("""
            SELECT
                id, order_id, product_id, product_name,
                quantity, price, selected_variant
            FROM order_items
            WHERE order_id = ANY(%s)
            ORDER BY id
        """, (list(order_ids),))

        grouped: Dict[int, List[dict]] = {}
        for item in self.cursor.fetchall():
            grouped.setdefault(item['order_id'], []).append(dict(item))
        return grouped

    def create(
        self,
        user_id: int,
        address_id: int,
        status: OrderStatus,
        subtotal: Decimal,
        discount_amount: Decimal,
        total: Decimal,
        full_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        coupon_code: Optional[str] = None
    ) -> dict:
        """
        Insert the order header

        Returns:
            Dict with id and created_at of the new order
        """
        self.cursor.execute("""
            INSERT INTO orders (
                user_id, address_id, full_name, phone_number, status,
                subtotal, discount_amount, coupon_code, total
            ) VALUES (
                %s, %s, %s, %s, %s, %s, %s, %s, %s
            )
            RETURNING id, created_at
        """, (
            user_id,
            address_id,
            full_name,
            phone_number,
            status.value,
            subtotal,
            discount_amount,
            coupon_code,
            total
        ))
        return dict(self.cursor.fetchone())

    def add_item(self, order_id: int, item: OrderItem) -> OrderItem:
        self.cursor.execute("""
            INSERT INTO order_items (
                order_id, product_id, product_name, quantity, price, selected_variant
            ) VALUES (
                %s, %s, %s, %s, %s, %s
            )
            RETURNING id, order_id, product_id, product_name, quantity, price, selected_variant
        """, (
            order_id,
            item.product_id,
            item.product_name,
            item.quantity,
            item.price,
            item.selected_variant
        ))
        return OrderItem(**self.cursor.fetchone())

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID with items and address

        Args:
            order_id: Internal order ID

        Returns:
            Order with all related data or None if not found
        """
        self.cursor.execute(f"""
            SELECT {ORDER_COLUMNS}
            FROM orders o
            LEFT JOIN addresses a ON o.address_id = a.id
            WHERE o.id = %s
        """, (order_id,))

        row = self.cursor.fetchone()
        if not row:
            return None

        items = self._items_for([row['id']])
        return self._map_row_to_order(row, items.get(row['id'], []))

    def find_by_user(self, user_id: int, limit: int = 50, offset: int = 0) -> List[Order]:
        """Orders of one user, newest first"""
        self.cursor.execute(f"""
            SELECT {ORDER_COLUMNS}
            FROM orders o
            LEFT JOIN addresses a ON o.address_id = a.id
            WHERE o.user_id = %s
            ORDER BY o.created_at DESC, o.id DESC
            LIMIT %s OFFSET %s
        """, (user_id, limit, offset))

        rows = self.cursor.fetchall()
        items = self._items_for([row['id'] for row in rows])
        return [self._map_row_to_order(row, items.get(row['id'], [])) for row in rows]

    def transition_status(
        self,
        order_id: int,
        new_status: OrderStatus,
        from_statuses: Sequence[OrderStatus]
    ) -> bool:
        """
        Move an order to new_status only if it is currently in one of
        from_statuses. The check and the write are one statement, so two
        concurrent transitions cannot both succeed.

        Returns:
            True if the row was updated
        """
        self.cursor.execute("""
            UPDATE orders
            SET status = %s, updated_at = NOW()
            WHERE id = %s AND status = ANY(%s)
            RETURNING id
        """, (new_status.value, order_id, [s.value for s in from_statuses]))
        return self.cursor.fetchone() is not None
