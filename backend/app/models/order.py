"""
Modelos relacionados con órdenes/pedidos
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, DECIMAL, ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Order(Base):
    """
    Tabla principal de órdenes

    total = subtotal - discount_amount; subtotal se calcula en el servidor
    con el precio autoritativo de cada producto.
    """
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED')",
            name="ck_orders_status",
        ),
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Relaciones
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    address_id = Column(Integer, ForeignKey("addresses.id"), nullable=False)

    # Destinatario
    full_name = Column(String(255))
    phone_number = Column(String(20))

    # Estado
    status = Column(String(20), nullable=False, default="PROCESSING", index=True)

    # Montos
    subtotal = Column(DECIMAL(12, 2), nullable=False)
    discount_amount = Column(DECIMAL(12, 2), nullable=False, default=0)
    coupon_code = Column(String(50))
    total = Column(DECIMAL(12, 2), nullable=False)

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="orders")
    address = relationship("Address")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """
    Items de cada orden (inmutables una vez creados)
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)

    # Datos del producto al momento de venta
    product_name = Column(String(255))
    price = Column(DECIMAL(12, 2), nullable=False)
    selected_variant = Column(String(255))

    quantity = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")
