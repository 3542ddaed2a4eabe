"""
Productos y stock por variante
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, DECIMAL, JSON, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Product(Base):
    """
    Catálogo. `stock` es autoritativo solo si el producto no tiene variantes.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    vendor_id = Column(Integer, index=True)

    name = Column(String(255), nullable=False)
    price = Column(DECIMAL(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    # {"Size": ["S", "M"], "Color": [{"name": "Red", "color": "#FF0000"}]}
    variants = Column(JSON)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    variant_stock = relationship("ProductVariantStock", back_populates="product", cascade="all, delete-orphan")
    order_items = relationship("OrderItem", back_populates="product")


class ProductVariantStock(Base):
    """
    Stock por combinación de variantes, una fila por (producto, variant_key).
    Las claves se validan contra products.variants antes de cada escritura.
    """
    __tablename__ = "product_variant_stock"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_variant_stock_non_negative"),
    )

    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    variant_key = Column(String(255), primary_key=True)
    stock = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="variant_stock")
