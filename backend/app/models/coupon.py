"""
Cupones de descuento
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, DECIMAL, CheckConstraint
)
from sqlalchemy.sql import func
from app.core.database import Base


class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint("usage_count >= 0", name="ck_coupons_usage_non_negative"),
        CheckConstraint(
            "usage_limit IS NULL OR usage_count <= usage_limit",
            name="ck_coupons_usage_within_limit",
        ),
        CheckConstraint(
            "discount_type IN ('PERCENTAGE', 'FIXED')",
            name="ck_coupons_discount_type",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True, index=True)  # upper-case
    vendor_id = Column(Integer, index=True)

    discount_type = Column(String(20), nullable=False)
    discount_value = Column(DECIMAL(12, 2), nullable=False)
    min_purchase = Column(DECIMAL(12, 2))
    max_discount = Column(DECIMAL(12, 2))

    usage_limit = Column(Integer)
    usage_count = Column(Integer, nullable=False, default=0)

    valid_from = Column(DateTime(timezone=True))
    valid_until = Column(DateTime(timezone=True))
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
