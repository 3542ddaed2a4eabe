"""
Coupon Repository - Data Access Layer for Coupons
"""
from typing import Optional
from app.domain.coupon import Coupon


class CouponRepository:
    def __init__(self, cursor):
        self.cursor = cursor

    def find_by_code(self, code: str) -> Optional[Coupon]:
        """Codes are stored upper-case; lookup is case-insensitive"""
        self.cursor.execute("""
            SELECT
                id, code, vendor_id, discount_type, discount_value,
                min_purchase, max_discount, usage_limit, usage_count,
                valid_from, valid_until, is_active
            FROM coupons
            WHERE code = %s
        """, (code.strip().upper(),))
        row = self.cursor.fetchone()
        return Coupon(**row) if row else None

    def consume(self, coupon_id: int) -> bool:
        """
        Redeem one use. Guarded so usage_count never passes usage_limit,
        even with concurrent checkouts racing for the last use.

        Returns:
            True if a use was consumed
        """
        self.cursor.execute("""
            UPDATE coupons
            SET usage_count = usage_count + 1
            WHERE id = %s
              AND is_active
              AND (usage_limit IS NULL OR usage_count < usage_limit)
            RETURNING usage_count
        """, (coupon_id,))
        return self.cursor.fetchone() is not None
