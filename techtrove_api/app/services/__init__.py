"""
Service layer.

Each service wraps one collection and holds the logic for its domain.
Services are constructed per request from the store attached to the
application (see ``api.deps``); they keep no state of their own.
"""

from .product_service import ProductService  # noqa: F401
from .user_service import UserService  # noqa: F401
