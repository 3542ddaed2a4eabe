"""
Coupons API Endpoints
Price-check a coupon before checkout (does not consume it)
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.dependencies import get_coupon_validator
from app.core.rate_limit import rate_limit
from app.services.coupon_service import CouponValidator

router = APIRouter()


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    cart_total: Decimal = Field(..., gt=0)
    vendor_id: Optional[int] = None


@router.post("/coupons/validate", dependencies=[Depends(rate_limit("public_read"))])
def validate_coupon(
    request: CouponValidateRequest,
    validator: CouponValidator = Depends(get_coupon_validator)
):
    """
    Validate a coupon code against a cart total

    Returns:
    - valid
    - discount_amount
    - coupon: code, discount_type, discount_value
    """
    result = validator.validate(request.code, request.cart_total, request.vendor_id)
    return result.to_dict()
