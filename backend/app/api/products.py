"""
Products API Endpoints
Stock availability for product pages
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_stock_ledger, get_uow_factory
from app.core.exceptions import ProductNotFound
from app.core.rate_limit import rate_limit
from app.services.stock_ledger import StockLedger

router = APIRouter()


@router.get("/products/{product_id}/stock", dependencies=[Depends(rate_limit("public_read"))])
def get_product_stock(
    product_id: int,
    variant: Optional[str] = Query(None, description="Variant key, e.g. Color:Red,Size:M"),
    uow_factory=Depends(get_uow_factory),
    ledger: StockLedger = Depends(get_stock_ledger)
):
    """
    Get current stock for a product or one of its variants

    Returns:
    - stock: units available for the requested variant (or base stock)
    - status: in_stock, low_stock or out_of_stock
    - total_stock: sum across all variants
    """
    with uow_factory() as uow:
        product = uow.products.find_by_id(product_id)

    if product is None or not product.is_active:
        raise ProductNotFound(product_id)

    return {
        "status": "success",
        "data": {
            "product_id": product.id,
            "variant": variant,
            "stock": ledger.resolve_stock(product, variant),
            "status": ledger.stock_status(product, variant).value,
            "total_stock": ledger.total_variant_stock(product),
            "has_variants": product.has_variants
        }
    }
