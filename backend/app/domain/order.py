"""
Order Domain Models

Orders, their line items and the shipping address snapshot, plus the
checkout input schema.

Date: 2026-10-12
"""
from enum import Enum
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.core.config import settings


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


# Only orders that have not left the warehouse can be cancelled
CANCELLABLE_STATUSES = (OrderStatus.PENDING, OrderStatus.PROCESSING)


class Address(BaseModel):
    """Shipping address, created fresh for every order"""

    id: Optional[int] = Field(None, description="Address ID")
    user_id: Optional[int] = Field(None, description="Owning user ID")
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)

    model_config = ConfigDict(from_attributes=True)


class OrderItem(BaseModel):
    """
    Order line. `price` is the product's authoritative unit price frozen at
    placement time; it never comes from the client.
    """

    id: Optional[int] = Field(None, description="Order item ID")
    order_id: Optional[int] = Field(None, description="Parent order ID")
    product_id: int = Field(..., description="Product ID")
    product_name: Optional[str] = Field(None, description="Product name at order time")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price: Decimal = Field(..., description="Unit price snapshot", ge=0)
    selected_variant: Optional[str] = Field(None, description="Canonical variant key")

    model_config = ConfigDict(from_attributes=True)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['price'] = float(self.price)
        data['line_total'] = float(self.line_total)
        return data


class Order(BaseModel):
    """
    Order domain model

    total == subtotal - discount_amount, where subtotal is the sum of
    item.price * item.quantity over the items.
    """

    id: int = Field(..., description="Internal order ID")
    user_id: int = Field(..., description="Owning user ID")
    address_id: int = Field(..., description="Shipping address ID")
    full_name: Optional[str] = Field(None, description="Recipient name")
    phone_number: Optional[str] = Field(None, description="Recipient phone")

    status: OrderStatus = Field(..., description="Order status")

    subtotal: Decimal = Field(..., description="Sum of line totals", ge=0)
    discount_amount: Decimal = Field(Decimal('0'), description="Coupon discount", ge=0)
    coupon_code: Optional[str] = Field(None, description="Redeemed coupon code")
    total: Decimal = Field(..., description="Amount billed", ge=0)

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    items: List[OrderItem] = Field(default_factory=list, description="Order items")
    address: Optional[Address] = Field(None, description="Shipping address snapshot")

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @property
    def item_count(self) -> int:
        """Total number of items in order"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def to_dict(self) -> dict:
        """Convert to dictionary with computed fields"""
        data = self.model_dump(mode="json")

        data['item_count'] = self.item_count
        data['total_quantity'] = self.total_quantity

        for field in ['subtotal', 'discount_amount', 'total']:
            data[field] = float(getattr(self, field))

        data['items'] = [item.to_dict() for item in self.items]
        return data


# ============================================================================
# Checkout input
# ============================================================================

class CartItem(BaseModel):
    """A cart line as submitted by the client. `price` is informational only."""

    product_id: int
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(Decimal('0'), ge=0, description="Client-side price, ignored for billing")
    selected_variant: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def _quantity_cap(cls, value: int) -> int:
        if value > settings.MAX_QUANTITY_PER_ITEM:
            raise ValueError(f"Maximum {settings.MAX_QUANTITY_PER_ITEM} items per product")
        return value


class AddressInput(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class OrderCreate(BaseModel):
    """Schema for placing a new order"""
    email: EmailStr
    full_name: str = Field(..., min_length=2)
    phone_number: str = Field(..., pattern=r"^\+?\d{7,15}$")
    items: List[CartItem] = Field(..., min_length=1)
    address: AddressInput
    coupon_code: Optional[str] = None
