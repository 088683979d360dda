"""
Acknowledgments returned by product writes.

The shapes mirror what MongoDB drivers report for single-document
writes, with camelCase keys as the web client expects.  Products
themselves are schemaless and travel as plain dictionaries.
"""

from typing import Optional

from pydantic import BaseModel
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult


class InsertAck(BaseModel):
    acknowledged: bool
    insertedId: str

    @classmethod
    def from_result(cls, result: InsertOneResult) -> "InsertAck":
        return cls(acknowledged=result.acknowledged, insertedId=str(result.inserted_id))


class UpdateAck(BaseModel):
    """Result of a partial update.  ``matchedCount`` is 0 for unknown ids."""

    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedCount: int = 0
    upsertedId: Optional[str] = None

    @classmethod
    def from_result(cls, result: UpdateResult) -> "UpdateAck":
        upserted_id = result.upserted_id
        return cls(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count or 0,
            upsertedCount=0 if upserted_id is None else 1,
            upsertedId=None if upserted_id is None else str(upserted_id),
        )


class DeleteAck(BaseModel):
    acknowledged: bool
    deletedCount: int

    @classmethod
    def from_result(cls, result: DeleteResult) -> "DeleteAck":
        return cls(acknowledged=result.acknowledged, deletedCount=result.deleted_count)
