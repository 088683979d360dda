"""
Product catalog endpoints.

Listing supports ``?category=`` (exact) and ``?search=`` (title
substring, case-insensitive).  Writes return the store's
acknowledgment rather than the document.  Malformed ids are rejected
with 400 on every route that takes one.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...schemas.product import DeleteAck, InsertAck, UpdateAck
from ...services import ProductService
from ..deps import get_product_service

router = APIRouter()


@router.get("/products", response_model=List[Dict[str, Any]])
async def list_products(
    category: Optional[str] = Query(None, examples=["Laptop"]),
    search: Optional[str] = Query(None, examples=["mouse"]),
    service: ProductService = Depends(get_product_service),
) -> List[Dict[str, Any]]:
    return await service.list_products(category=category, search=search)


@router.get("/product/{product_id}", response_model=Dict[str, Any])
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> Dict[str, Any]:
    """Fetch one product; 404 if it does not exist."""
    return await service.get_product(product_id)


@router.post("/product", response_model=InsertAck)
async def create_product(
    body: Dict[str, Any] = Body(...),
    service: ProductService = Depends(get_product_service),
) -> InsertAck:
    # The body must not carry an _id; the store generates it.
    return await service.create_product(body)


@router.patch("/product/{product_id}", response_model=UpdateAck)
async def update_product(
    product_id: str,
    body: Dict[str, Any] = Body(...),
    service: ProductService = Depends(get_product_service),
) -> UpdateAck:
    """Merge the given fields into a product.

    ``released_date`` is stored as a date.  An unknown id answers 200
    with ``matchedCount: 0``.
    """
    return await service.update_product(product_id, body)


@router.delete("/product/{product_id}", response_model=DeleteAck)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> DeleteAck:
    return await service.delete_product(product_id)
