"""
Coupon Domain Models

Date: 2026-10-12
"""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
from decimal import Decimal


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class Coupon(BaseModel):
    """
    Coupon domain model

    Fields:
        code: Unique code, stored upper-case
        vendor_id: Shop the coupon belongs to (None for platform-wide)
        discount_type: PERCENTAGE or FIXED
        discount_value: Percent (0-100) or fixed amount
        min_purchase: Cart total required to apply
        max_discount: Cap on the computed discount
        usage_limit: Maximum redemptions (None for unlimited)
        usage_count: Redemptions so far
        valid_from / valid_until: Validity window
    """

    id: int = Field(..., description="Coupon ID")
    code: str = Field(..., description="Coupon code")
    vendor_id: Optional[int] = Field(None, description="Vendor ID")
    discount_type: DiscountType = Field(..., description="Discount type")
    discount_value: Decimal = Field(..., description="Discount value", ge=0)
    min_purchase: Optional[Decimal] = Field(None, ge=0)
    max_discount: Optional[Decimal] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=0)
    usage_count: int = Field(0, ge=0)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit


class CouponSummary(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: float


class CouponValidation(BaseModel):
    """Result of a successful coupon check"""
    valid: bool = True
    discount_amount: Decimal
    coupon: Coupon

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "discount_amount": float(self.discount_amount),
            "coupon": CouponSummary(
                code=self.coupon.code,
                discount_type=self.coupon.discount_type,
                discount_value=float(self.coupon.discount_value),
            ).model_dump(mode="json"),
        }
