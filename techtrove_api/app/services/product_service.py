"""
Service layer for the product catalog.

Products are schemaless documents.  The only field the service
interprets is ``released_date``, which clients send as an ISO-8601
string and which is stored as a real date so the store can sort and
range-query on it.  Every method performs a single store operation.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.db import parse_object_id, serialize_document, store_errors
from ..core.errors import NotFoundError, ValidationError
from ..schemas.product import DeleteAck, InsertAck, UpdateAck

logger = logging.getLogger(__name__)

PRODUCT_ID_LABEL = "product ID"


def coerce_released_date(value: Any) -> datetime:
    """Turn the external form of ``released_date`` into a ``datetime``.

    Accepts ISO-8601 strings (``2024-03-01``, ``2024-03-01T10:00:00Z``),
    epoch milliseconds as sent by browsers, or a ``datetime``.  Naive
    values are taken to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError(f"Invalid released_date: {value!r}") from exc
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    else:
        raise ValidationError(f"Invalid released_date: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ProductService:
    """CRUD operations over the products collection."""

    def __init__(self, collection: Any) -> None:
        self.collection = collection

    async def list_products(
        self, category: Optional[str] = None, search: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Return products filtered by exact category and/or title text.

        ``search`` is matched as a literal, case-insensitive substring of
        ``title``.  With no filters the whole collection is returned, in
        whatever order the store yields it.
        """
        query: Dict[str, Any] = {}
        if category:
            query["category"] = category
        if search:
            query["title"] = {"$regex": re.escape(search), "$options": "i"}

        with store_errors("list_products"):
            products = await self.collection.find(query).to_list(None)
        return [serialize_document(product) for product in products]

    async def get_product(self, product_id: str) -> Dict[str, Any]:
        oid = parse_object_id(product_id, PRODUCT_ID_LABEL)
        with store_errors("get_product"):
            product = await self.collection.find_one({"_id": oid})
        if product is None:
            raise NotFoundError("Product not found")
        return serialize_document(product)

    async def create_product(self, body: Dict[str, Any]) -> InsertAck:
        """Insert ``body`` verbatim.  The store assigns the id."""
        if not isinstance(body, dict):
            raise ValidationError("Product must be a JSON object")
        if "_id" in body:
            raise ValidationError("Product must not include an _id")

        document = dict(body)
        with store_errors("create_product"):
            result = await self.collection.insert_one(document)
        logger.info("Created product %s", result.inserted_id)
        return InsertAck.from_result(result)

    async def update_product(self, product_id: str, patch: Dict[str, Any]) -> UpdateAck:
        """Merge the fields in ``patch`` into a product.

        Only the given keys change.  An id that is well formed but
        unknown is not an error: the acknowledgment reports
        ``matchedCount == 0``.
        """
        oid = parse_object_id(product_id, PRODUCT_ID_LABEL)
        if not isinstance(patch, dict) or not patch:
            raise ValidationError("No fields to update")
        if "_id" in patch:
            raise ValidationError("Field _id cannot be updated")

        changes = dict(patch)
        if changes.get("released_date"):
            changes["released_date"] = coerce_released_date(changes["released_date"])

        logger.debug("Updating product %s with %s", oid, changes)
        with store_errors("update_product"):
            result = await self.collection.update_one({"_id": oid}, {"$set": changes})
        return UpdateAck.from_result(result)

    async def delete_product(self, product_id: str) -> DeleteAck:
        """Remove a product.  Unknown ids yield ``deletedCount == 0``."""
        oid = parse_object_id(product_id, PRODUCT_ID_LABEL)
        with store_errors("delete_product"):
            result = await self.collection.delete_one({"_id": oid})
        if result.deleted_count:
            logger.info("Deleted product %s", oid)
        return DeleteAck.from_result(result)
