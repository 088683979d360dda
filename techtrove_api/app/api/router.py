"""
Top-level router.

The web client calls the routes at the root of the server (``/login``,
``/product/{id}``), so no prefix is applied.
"""

from fastapi import APIRouter

from .endpoints import auth, health, products

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(auth.router, tags=["auth"])
router.include_router(products.router, tags=["products"])
