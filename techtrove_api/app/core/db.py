"""
Document store access.

The application talks to MongoDB through one ``AsyncMongoClient``
opened at startup and closed at shutdown.  ``MongoDocumentStore`` owns
that client and hands out the two collections the services need;
services receive their collection explicitly instead of importing a
module-level connection.

``InMemoryDocumentStore`` implements the small subset of the
collection API the services use (``find``, ``find_one``,
``insert_one``, ``update_one``, ``delete_one``, ``create_index``) on
top of plain dictionaries.  It returns the same pymongo result types
and raises the same ``DuplicateKeyError`` so services cannot tell the
two apart.  It backs local development and the test suite.
"""

from __future__ import annotations

import copy
import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Tuple, Union

import bson
from bson import ObjectId
from bson.codec_options import CodecOptions
from fastapi.encoders import jsonable_encoder
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError, WriteError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult
from pymongo.server_api import ServerApi

from .config import Settings
from .errors import StoreError, ValidationError

logger = logging.getLogger(__name__)

IndexKeys = Union[str, List[Tuple[str, int]]]

# Dates are read back as aware UTC values on both backends.
CODEC_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current UTC time at the millisecond precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_datetime(value: datetime) -> str:
    """ISO-8601 in UTC with milliseconds and a ``Z`` suffix.

    Naive values are taken to be UTC, which is what the store holds.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_object_id(value: str, label: str = "ID") -> ObjectId:
    """Convert a 24-character hex string into an ``ObjectId``.

    Raises ``ValidationError`` for anything else so malformed ids are
    reported as a client error before reaching the store.
    """
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label}")
    return ObjectId(value)


class DocumentStore(Protocol):
    """What the application needs from a store backend."""

    @property
    def users(self) -> Any:
        ...

    @property
    def products(self) -> Any:
        ...

    async def connect(self) -> None:
        ...

    async def close(self) -> None:
        ...


async def ensure_indexes(store: DocumentStore) -> None:
    """Create the indexes the services rely on.

    The unique index on ``users.email`` is what actually guarantees
    one account per email; the lookup done by signup only produces the
    friendlier error in the common case.  If existing data already
    holds duplicates the index cannot be built; that is logged and the
    application keeps running without the guarantee.
    """
    try:
        await store.users.create_index([("email", ASCENDING)], unique=True, name="email_unique")
    except OperationFailure as exc:
        logger.error("Could not create unique index on users.email: %s", exc)


class MongoDocumentStore:
    """MongoDB-backed store using pymongo's asyncio client."""

    def __init__(
        self,
        uri: str,
        db_name: str,
        users_collection: str,
        products_collection: str,
        **client_options: Any,
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._users_name = users_collection
        self._products_name = products_collection
        self._client_options = client_options
        self._client: Optional[AsyncMongoClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoDocumentStore":
        return cls(
            settings.mongodb_uri,
            settings.db_name,
            settings.users_collection,
            settings.products_collection,
        )

    def _database(self):
        if self._client is None:
            raise RuntimeError("Document store is not connected")
        return self._client[self._db_name]

    @property
    def users(self):
        return self._database()[self._users_name]

    @property
    def products(self):
        return self._database()[self._products_name]

    async def connect(self) -> None:
        """Open the client and make sure the server answers."""
        self._client = AsyncMongoClient(
            self._uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            tz_aware=CODEC_OPTIONS.tz_aware,
            tzinfo=CODEC_OPTIONS.tzinfo,
            **self._client_options,
        )
        try:
            await self._client.admin.command("ping")
        except PyMongoError:
            logger.exception("MongoDB connection failed")
            await self.close()
            raise
        logger.info("Connected to MongoDB database %s", self._db_name)
        await ensure_indexes(self)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB connection closed")


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


def _as_stored(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Round-trip ``document`` through BSON the way the server stores it.

    Dates lose sub-millisecond precision and come back as UTC.
    """
    return bson.decode(bson.encode(document), codec_options=CODEC_OPTIONS)


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Evaluate the filter subset used by the services.

    Supported: top-level equality and ``{"$regex": ..., "$options": ...}``.
    """
    for key, condition in query.items():
        value = document.get(key)
        if isinstance(condition, Mapping) and "$regex" in condition:
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                return False
        elif value != condition:
            return False
    return True


class InMemoryCursor:
    """Result of ``InMemoryCollection.find``."""

    def __init__(self, documents: List[Dict[str, Any]]) -> None:
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return self._documents[:length]

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for document in self._documents:
            yield document


class InMemoryCollection:
    """Dictionary-backed stand-in for an ``AsyncCollection``."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}
        self.unique_fields: set[str] = set()

    def _select(self, query: Optional[Mapping[str, Any]]) -> Iterable[Dict[str, Any]]:
        query = query or {}
        return (doc for doc in self.documents.values() if _matches(doc, query))

    async def create_index(self, keys: IndexKeys, unique: bool = False, **kwargs: Any) -> str:
        fields = [keys] if isinstance(keys, str) else [field for field, _ in keys]
        if unique:
            if len(fields) != 1:
                raise OperationFailure("compound unique indexes are not supported in memory")
            self.unique_fields.add(fields[0])
        return kwargs.get("name") or "_".join(f"{field}_1" for field in fields)

    def find(self, query: Optional[Mapping[str, Any]] = None) -> InMemoryCursor:
        return InMemoryCursor([copy.deepcopy(doc) for doc in self._select(query)])

    async def find_one(self, query: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        for doc in self._select(query):
            return copy.deepcopy(doc)
        return None

    async def insert_one(self, document: Dict[str, Any]) -> InsertOneResult:
        # pymongo assigns the generated id onto the caller's dict as well.
        document.setdefault("_id", ObjectId())
        doc_id = document["_id"]
        if doc_id in self.documents:
            raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: _id_", 11000)
        stored = _as_stored(document)
        for field in self.unique_fields:
            value = stored.get(field)
            if any(existing.get(field) == value for existing in self.documents.values()):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.name} dup key: {{ {field}: {value!r} }}",
                    11000,
                )
        self.documents[doc_id] = stored
        return InsertOneResult(doc_id, True)

    async def update_one(self, query: Mapping[str, Any], update: Mapping[str, Any]) -> UpdateResult:
        unsupported = set(update) - {"$set"}
        if unsupported:
            raise WriteError(f"Unsupported update operators: {sorted(unsupported)}", 9)
        changes = update.get("$set") or {}
        if not changes:
            raise WriteError("'$set' is empty", 9)
        if "_id" in changes:
            raise WriteError("Performing an update on the path '_id' would modify the immutable field '_id'", 66)
        changes = _as_stored(changes)
        for doc in self._select(query):
            modified = any(doc.get(key, object()) != value for key, value in changes.items())
            doc.update(changes)
            raw = {"n": 1, "nModified": int(modified), "updatedExisting": True, "ok": 1.0}
            return UpdateResult(raw, True)
        return UpdateResult({"n": 0, "nModified": 0, "updatedExisting": False, "ok": 1.0}, True)

    async def delete_one(self, query: Mapping[str, Any]) -> DeleteResult:
        for doc in self._select(query):
            del self.documents[doc["_id"]]
            return DeleteResult({"n": 1, "ok": 1.0}, True)
        return DeleteResult({"n": 0, "ok": 1.0}, True)

    def clear(self) -> None:
        self.documents.clear()


class InMemoryDocumentStore:
    """Process-local store with the same surface as ``MongoDocumentStore``."""

    def __init__(self, users_collection: str = "users", products_collection: str = "products") -> None:
        self.users = InMemoryCollection(users_collection)
        self.products = InMemoryCollection(products_collection)

    async def connect(self) -> None:
        logger.info("Using in-memory document store")
        await ensure_indexes(self)

    async def close(self) -> None:
        return None

    def reset(self) -> None:
        """Drop all stored documents (useful in tests)."""
        self.users.clear()
        self.products.clear()


def build_store(settings: Settings) -> DocumentStore:
    """Pick the store backend configured in ``settings``."""
    if settings.use_in_memory_store:
        return InMemoryDocumentStore(settings.users_collection, settings.products_collection)
    return MongoDocumentStore.from_settings(settings)


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Re-raise driver failures inside the block as ``StoreError``.

    ``DuplicateKeyError`` is left alone so callers that care about
    unique indexes can catch it first.
    """
    try:
        yield
    except DuplicateKeyError:
        raise
    except PyMongoError as exc:
        logger.error("Store operation %s failed: %s", operation, exc)
        raise StoreError(str(exc)) from exc


def serialize_document(document: Mapping[str, Any]) -> Dict[str, Any]:
    """Make a stored document JSON friendly.

    ``ObjectId`` becomes its hex string and dates become UTC ISO-8601
    strings ending in ``Z``.
    """
    return jsonable_encoder(document, custom_encoder={ObjectId: str, datetime: format_datetime})
