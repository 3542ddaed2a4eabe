"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities and
the pure variant key codec.
"""
from app.domain.product import Product
from app.domain.order import Order, OrderItem, OrderStatus, Address, CartItem, OrderCreate
from app.domain.coupon import Coupon, CouponValidation, DiscountType
from app.domain.user import User

__all__ = [
    'Product',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Address',
    'CartItem',
    'OrderCreate',
    'Coupon',
    'CouponValidation',
    'DiscountType',
    'User',
]
