"""
Service providers for API routers

Routers get their services through these functions; every service is
built on get_uow_factory, so tests swap the database for all of them with
a single app.dependency_overrides entry.
"""
from fastapi import Depends

from app.core.unit_of_work import UnitOfWork
from app.services.coupon_service import CouponValidator
from app.services.order_cancellation_service import OrderCancellationService
from app.services.order_service import OrderService
from app.services.stock_ledger import StockLedger


def get_uow_factory():
    return UnitOfWork


def get_stock_ledger() -> StockLedger:
    return StockLedger()


def get_order_service(
    uow_factory=Depends(get_uow_factory),
    ledger: StockLedger = Depends(get_stock_ledger)
) -> OrderService:
    return OrderService(uow_factory=uow_factory, ledger=ledger)


def get_cancellation_service(
    uow_factory=Depends(get_uow_factory),
    ledger: StockLedger = Depends(get_stock_ledger)
) -> OrderCancellationService:
    return OrderCancellationService(uow_factory=uow_factory, ledger=ledger)


def get_coupon_validator(uow_factory=Depends(get_uow_factory)) -> CouponValidator:
    return CouponValidator(uow_factory=uow_factory)
