"""
Dependency wiring for the endpoints.

The document store is created by ``create_app`` and stored on
``app.state``; these helpers fetch it from the current request and
build the service each endpoint needs.
"""

from fastapi import Depends, Request

from ..core.db import DocumentStore
from ..services import ProductService, UserService


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store.users)


def get_product_service(store: DocumentStore = Depends(get_store)) -> ProductService:
    return ProductService(store.products)
