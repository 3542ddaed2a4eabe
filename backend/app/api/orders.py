"""
Orders API Endpoints
Checkout, order history and buyer-initiated cancellation
"""
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from app.api.dependencies import get_cancellation_service, get_order_service
from app.core.auth import TokenUser, get_current_user
from app.core.rate_limit import rate_limit
from app.domain.order import OrderCreate
from app.services.order_cancellation_service import OrderCancellationService
from app.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


# Request models
class CancelOrderRequest(BaseModel):
    order_id: int


@router.post(
    "/orders",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("write"))]
)
def place_order(
    order: OrderCreate,
    service: OrderService = Depends(get_order_service)
):
    """
    Place an order from a cart

    Item prices sent by the client are ignored; every line is billed at
    the product's current price. Stock for the whole cart is reserved
    atomically or not at all.
    """
    created = service.place_order(order)
    return {
        "status": "success",
        "data": created.to_dict()
    }


@router.get("/user/orders", dependencies=[Depends(rate_limit("standard"))])
def get_user_orders(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: TokenUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """Orders of the authenticated user, newest first"""
    account = service.find_user(user.email)
    orders = service.list_orders(account.id, limit=limit, offset=offset)
    return {
        "status": "success",
        "count": len(orders),
        "limit": limit,
        "offset": offset,
        "data": [o.to_dict() for o in orders]
    }


@router.patch("/user/orders", dependencies=[Depends(rate_limit("write"))])
def cancel_user_order(
    request: CancelOrderRequest,
    user: TokenUser = Depends(get_current_user),
    order_service: OrderService = Depends(get_order_service),
    cancellation: OrderCancellationService = Depends(get_cancellation_service)
):
    """
    Cancel an order (only if PENDING or PROCESSING) and restore its stock
    """
    account = order_service.find_user(user.email)
    cancelled = cancellation.cancel_order(request.order_id, account.id)
    return {
        "status": "success",
        "data": cancelled.to_dict()
    }
