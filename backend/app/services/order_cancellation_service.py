"""
Order Cancellation Service
Compensates a placed order: restores its stock and marks it CANCELLED

The status flip and every stock restoration commit in one unit of work,
so no reader sees restored stock on a still-active order or the reverse.
The status flip goes first and is guarded on the current status; a second
concurrent cancel of the same order fails there and restores nothing.
"""
import logging
from typing import Callable, Optional

from app.core.exceptions import (
    Forbidden,
    InternalFailure,
    InvalidStateTransition,
    OrderNotFound,
    ProductNotFound,
    StorefrontError,
)
from app.core.unit_of_work import UnitOfWork
from app.domain.order import CANCELLABLE_STATUSES, Order, OrderStatus
from app.services.stock_ledger import StockDirection, StockLedger

logger = logging.getLogger(__name__)

NOT_CANCELLABLE_MESSAGE = (
    "Order cannot be cancelled. Only pending or processing orders can be cancelled."
)


class OrderCancellationService:
    """Order Cancellation Compensator"""

    def __init__(self, uow_factory: Callable = UnitOfWork, ledger: Optional[StockLedger] = None):
        self._uow_factory = uow_factory
        self.ledger = ledger or StockLedger()

    def cancel_order(self, order_id: int, requester_id: int) -> Order:
        """
        Cancel an order owned by requester_id

        Each item's stock is restored by exactly the quantity stored on the
        item, to the variant recorded on it.

        Raises:
            OrderNotFound: no such order
            Forbidden: requester does not own the order
            InvalidStateTransition: order is not PENDING or PROCESSING
            InternalFailure: unexpected store error (details are logged)
        """
        try:
            with self._uow_factory() as uow:
                order = uow.orders.find_by_id(order_id)
                if order is None:
                    raise OrderNotFound(order_id)

                if order.user_id != requester_id:
                    raise Forbidden("You do not have permission to cancel this order")

                if order.status not in CANCELLABLE_STATUSES:
                    raise InvalidStateTransition(
                        order.status.value, OrderStatus.CANCELLED.value, NOT_CANCELLABLE_MESSAGE
                    )

                if not uow.orders.transition_status(
                    order_id, OrderStatus.CANCELLED, CANCELLABLE_STATUSES
                ):
                    # Status changed after we read it (e.g. a concurrent cancel)
                    raise InvalidStateTransition(
                        order.status.value, OrderStatus.CANCELLED.value, NOT_CANCELLABLE_MESSAGE
                    )

                products = uow.products.find_by_ids([item.product_id for item in order.items])
                for item in order.items:
                    product = products.get(item.product_id)
                    if product is None:
                        raise ProductNotFound(item.product_id)
                    self.ledger.adjust(
                        uow, product, item.quantity, StockDirection.INCREMENT, item.selected_variant
                    )

                cancelled = uow.orders.find_by_id(order_id)

        except StorefrontError as e:
            logger.info(f"Cancellation of order {order_id} rejected: {e.error_type}: {e.message}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error cancelling order {order_id}")
            raise InternalFailure("Failed to cancel order") from e

        logger.info(
            f"Order {order_id} cancelled by user {requester_id}; "
            f"restored {order.total_quantity} units across {order.item_count} items"
        )
        return cancelled
