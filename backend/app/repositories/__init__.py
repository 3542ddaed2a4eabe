"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories abstract away SQL details from business logic. Each one is
bound to the cursor of a unit of work, so everything it does commits or
rolls back with that unit.
"""
from app.repositories.product_repository import ProductRepository
from app.repositories.stock_repository import StockRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.user_repository import UserRepository, AddressRepository
from app.repositories.coupon_repository import CouponRepository

__all__ = [
    'ProductRepository',
    'StockRepository',
    'OrderRepository',
    'UserRepository',
    'AddressRepository',
    'CouponRepository'
]
