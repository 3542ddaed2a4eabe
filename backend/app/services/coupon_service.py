"""
Coupon Validation Service
Quotes a coupon discount for a cart total without consuming the coupon

Usage is only consumed when an order commits (OrderService), so any
number of price checks leaves usage_count untouched.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional

from app.core.exceptions import CouponNotFound, CouponRejected, ValidationError
from app.core.unit_of_work import UnitOfWork
from app.domain.coupon import Coupon, CouponValidation, DiscountType

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CouponValidator:
    """Stateless coupon rule evaluation"""

    def __init__(self, uow_factory: Callable = UnitOfWork,
                 clock: Optional[Callable[[], datetime]] = None):
        self._uow_factory = uow_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @staticmethod
    def compute_discount(coupon: Coupon, cart_total: Decimal) -> Decimal:
        """
        PERCENTAGE: cart_total * value / 100. FIXED: value.
        Either is capped at max_discount (if set) and then at cart_total,
        and rounded to cents.
        """
        if coupon.discount_type == DiscountType.PERCENTAGE:
            discount = cart_total * coupon.discount_value / Decimal(100)
        else:
            discount = coupon.discount_value

        if coupon.max_discount is not None and discount > coupon.max_discount:
            discount = coupon.max_discount

        discount = min(discount, cart_total)
        return discount.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def evaluate(
        cls,
        coupon: Coupon,
        cart_total: Decimal,
        now: datetime,
        vendor_id: Optional[int] = None
    ) -> Decimal:
        """
        Apply every rule to an already-loaded coupon.

        Returns:
            Discount amount

        Raises:
            CouponRejected: with the reason shown to the buyer
        """
        if not coupon.is_active:
            raise CouponRejected("Coupon is not active", coupon.code)

        now = _as_utc(now)
        if coupon.valid_from is not None and now < _as_utc(coupon.valid_from):
            raise CouponRejected("Coupon is not yet valid", coupon.code)

        if coupon.valid_until is not None and now > _as_utc(coupon.valid_until):
            raise CouponRejected("Coupon has expired", coupon.code)

        if coupon.is_exhausted:
            raise CouponRejected("Coupon usage limit reached", coupon.code)

        if coupon.min_purchase is not None and cart_total < coupon.min_purchase:
            raise CouponRejected(
                f"Minimum purchase of {coupon.min_purchase} required", coupon.code
            )

        if vendor_id is not None and coupon.vendor_id is not None and coupon.vendor_id != vendor_id:
            raise CouponRejected("Coupon is not valid for this store", coupon.code)

        return cls.compute_discount(coupon, cart_total)

    def validate(self, code: str, cart_total, vendor_id: Optional[int] = None) -> CouponValidation:
        """
        Look up a coupon and quote its discount for cart_total

        Raises:
            ValidationError: missing code or non-positive cart total
            CouponNotFound: no coupon with that code
            CouponRejected: coupon exists but does not apply
        """
        if not code or not code.strip():
            raise ValidationError("Coupon code is required")

        cart_total = Decimal(str(cart_total))
        if cart_total <= 0:
            raise ValidationError("Valid cart total is required")

        with self._uow_factory() as uow:
            coupon = uow.coupons.find_by_code(code)

        if coupon is None:
            raise CouponNotFound(code)

        try:
            discount = self.evaluate(coupon, cart_total, self._clock(), vendor_id)
        except CouponRejected as e:
            logger.info(f"Coupon {coupon.code} rejected: {e.message}")
            raise

        return CouponValidation(valid=True, discount_amount=discount, coupon=coupon)
