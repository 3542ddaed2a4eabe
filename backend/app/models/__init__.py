"""
Modelos de base de datos (declaración del esquema)
"""
from .user import User, Address
from .product import Product, ProductVariantStock
from .order import Order, OrderItem
from .coupon import Coupon

__all__ = [
    "User",
    "Address",
    "Product",
    "ProductVariantStock",
    "Order",
    "OrderItem",
    "Coupon",
]
