"""
Order Service
Turns a submitted cart into a committed order

Everything in place_order runs in a single unit of work:
1. Find or create the buyer account (guest checkout)
2. Persist the shipping address
3. Re-price every line from the product's authoritative price
4. Check availability for the whole cart before touching stock
5. Decrement stock line by line through the StockLedger
6. Redeem the coupon, if one was submitted
7. Insert the order header and items

Any failure rolls back all of it. The client-submitted price is never
read: orders are always billed at the server price.

Date: 2026-10-14
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Tuple

from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import (
    CouponNotFound,
    CouponRejected,
    InsufficientStock,
    InternalFailure,
    ProductNotFound,
    StorefrontError,
    UserNotFound,
    ValidationError,
)
from app.core.unit_of_work import UnitOfWork
from app.domain.order import Order, OrderCreate, OrderItem, OrderStatus
from app.domain.product import Product
from app.domain.user import User
from app.domain.variants import canonicalize_variant_key
from app.services.coupon_service import CouponValidator
from app.services.stock_ledger import StockDirection, StockLedger

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

CENT = Decimal("0.01")


@dataclass
class PricedLine:
    """A cart line resolved against the catalog"""
    product: Product
    quantity: int
    variant_key: Optional[str]

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


class OrderService:
    """
    Order Transaction Coordinator

    Handles:
    - Guest account lookup-or-create
    - Authoritative re-pricing
    - All-or-nothing stock decrement across the cart
    - Coupon redemption at commit time
    - Order history reads
    """

    def __init__(
        self,
        uow_factory: Callable = UnitOfWork,
        ledger: Optional[StockLedger] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._uow_factory = uow_factory
        self.ledger = ledger or StockLedger()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def place_order(self, request: OrderCreate) -> Order:
        """
        Place an order atomically

        Returns:
            The committed Order with its items and address

        Raises:
            ProductNotFound: a line references a missing or inactive product
            InsufficientStock: any line exceeds what is available
            ValidationError / CouponRejected / CouponNotFound: bad input or coupon
            InternalFailure: unexpected store error (details are logged)
        """
        try:
            with self._uow_factory() as uow:
                user = self._resolve_user(uow, request.email)
                address = uow.addresses.create(user.id, request.address)

                products = uow.products.find_by_ids([item.product_id for item in request.items])
                lines = self._price_lines(request, products)
                self._check_availability(lines)

                for line in lines:
                    self.ledger.adjust(
                        uow, line.product, line.quantity, StockDirection.DECREMENT, line.variant_key
                    )

                subtotal = sum((line.line_total for line in lines), Decimal("0"))
                subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)

                discount = Decimal("0.00")
                coupon_code = None
                if request.coupon_code:
                    discount, coupon_code = self._redeem_coupon(uow, request.coupon_code, lines)

                header = uow.orders.create(
                    user_id=user.id,
                    address_id=address.id,
                    status=OrderStatus(settings.ORDER_INITIAL_STATUS),
                    subtotal=subtotal,
                    discount_amount=discount,
                    total=subtotal - discount,
                    full_name=request.full_name,
                    phone_number=request.phone_number,
                    coupon_code=coupon_code
                )

                items = [
                    uow.orders.add_item(header['id'], OrderItem(
                        product_id=line.product.id,
                        product_name=line.product.name,
                        quantity=line.quantity,
                        price=line.unit_price,
                        selected_variant=line.variant_key
                    ))
                    for line in lines
                ]

            order = Order(
                id=header['id'],
                user_id=user.id,
                address_id=address.id,
                full_name=request.full_name,
                phone_number=request.phone_number,
                status=OrderStatus(settings.ORDER_INITIAL_STATUS),
                subtotal=subtotal,
                discount_amount=discount,
                coupon_code=coupon_code,
                total=subtotal - discount,
                created_at=header['created_at'],
                items=items,
                address=address
            )

        except InsufficientStock as e:
            logger.warning(f"Order rejected for {request.email}: {e.message}")
            raise
        except StorefrontError as e:
            logger.info(f"Order rejected for {request.email}: {e.error_type}: {e.message}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error placing order for {request.email}")
            raise InternalFailure("Failed to create order") from e

        logger.info(
            f"Order {order.id} placed: user={user.id} items={order.item_count} "
            f"total={order.total}"
        )
        return order

    def _resolve_user(self, uow, email: str) -> User:
        """Idempotent lookup-or-create; guests get an unusable random password"""
        user = uow.users.find_by_email(email)
        if user:
            return user

        password_hash = pwd_context.hash(secrets.token_hex(32))
        user = uow.users.create_if_absent(email, password_hash)
        if user is None:
            # Created by a concurrent checkout between our read and insert
            user = uow.users.find_by_email(email)
        if user is None:
            raise InternalFailure("Could not resolve user account")

        logger.info(f"Created guest account {user.id}")
        return user

    @staticmethod
    def _price_lines(request: OrderCreate, products: Dict[int, Product]) -> List[PricedLine]:
        lines = []
        for item in request.items:
            product = products.get(item.product_id)
            if product is None or not product.is_active:
                raise ProductNotFound(item.product_id)

            variant_key = None
            if product.has_variants:
                if not item.selected_variant:
                    raise ValidationError(f"Select a variant for product: {product.name}")
                variant_key = canonicalize_variant_key(item.selected_variant, product.variants)

            lines.append(PricedLine(product=product, quantity=item.quantity, variant_key=variant_key))
        return lines

    def _check_availability(self, lines: List[PricedLine]) -> None:
        """
        Fail fast before any stock is touched. Lines for the same product
        and variant are summed. This check reads the snapshot loaded at the
        start of the transaction; the guarded decrement is what actually
        prevents overselling.
        """
        requested: Dict[Tuple[int, Optional[str]], int] = {}
        by_key: Dict[Tuple[int, Optional[str]], PricedLine] = {}
        for line in lines:
            key = (line.product.id, line.variant_key)
            requested[key] = requested.get(key, 0) + line.quantity
            by_key.setdefault(key, line)

        for key, quantity in requested.items():
            line = by_key[key]
            available = self.ledger.resolve_stock(line.product, line.variant_key)
            if quantity > available:
                raise InsufficientStock(line.product.id, line.product.name, line.variant_key)

    def _redeem_coupon(self, uow, code: str, lines: List[PricedLine]) -> Tuple[Decimal, str]:
        """
        Re-validate the coupon against server prices and consume one use.
        Vendor coupons only discount that vendor's lines.
        """
        coupon = uow.coupons.find_by_code(code)
        if coupon is None:
            raise CouponNotFound(code)

        eligible = sum(
            (line.line_total for line in lines
             if coupon.vendor_id is None or line.product.vendor_id == coupon.vendor_id),
            Decimal("0")
        )
        if eligible <= 0:
            raise CouponRejected("Coupon is not valid for this store", coupon.code)

        discount = CouponValidator.evaluate(coupon, eligible, self._clock())

        if not uow.coupons.consume(coupon.id):
            raise CouponRejected("Coupon usage limit reached", coupon.code)

        return discount, coupon.code

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_user(self, email: str) -> User:
        with self._uow_factory() as uow:
            user = uow.users.find_by_email(email)
        if user is None:
            raise UserNotFound(email)
        return user

    def list_orders(self, user_id: int, limit: int = 50, offset: int = 0) -> List[Order]:
        """A user's orders, newest first, with items and address"""
        with self._uow_factory() as uow:
            return uow.orders.find_by_user(user_id, limit=limit, offset=offset)
