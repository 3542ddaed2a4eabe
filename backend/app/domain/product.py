"""
Product Domain Model

Represents a sellable product with its authoritative price and stock.
Products with a variant schema keep stock per variant key; base stock is
authoritative only for products without variants.

Date: 2026-10-12
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from app.domain.variants import is_canonical_variant_key


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID (primary key)
        vendor_id: Owning shop
        name: Product name
        price: Authoritative unit price (the only price ever billed)
        stock: Base stock count
        variants: Variant schema, option name -> allowed values
        variant_stock: Stock per canonical variant key
        is_active: Whether product is listed
    """

    id: int = Field(..., description="Internal product ID")
    vendor_id: Optional[int] = Field(None, description="Owning vendor ID")
    name: str = Field(..., description="Product name")
    price: Decimal = Field(..., description="Authoritative unit price", ge=0)
    stock: int = Field(0, description="Base stock count", ge=0)

    variants: Dict[str, List[Any]] = Field(default_factory=dict, description="Variant schema")
    variant_stock: Dict[str, int] = Field(default_factory=dict, description="Stock per variant key")

    is_active: bool = Field(True, description="Whether product is active")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat()
        }
    )

    @model_validator(mode="after")
    def _variant_stock_matches_schema(self) -> "Product":
        unknown = [
            key for key in self.variant_stock
            if not is_canonical_variant_key(key, self.variants)
        ]
        if unknown:
            raise ValueError(f"Variant stock keys not in schema: {', '.join(sorted(unknown))}")
        negative = [key for key, count in self.variant_stock.items() if count < 0]
        if negative:
            raise ValueError(f"Negative variant stock for: {', '.join(sorted(negative))}")
        return self

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)
