"""
MongoDB Document Store
Motor-backed implementation of the DocumentStore contract
"""
import logging
from contextlib import contextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from app.db.store import (
    DocumentStore,
    Filter,
    OrderBy,
    Record,
    WriteKind,
    WriteOp,
    validate_filters,
)
from app.exceptions import BackendError, NotFound

logger = logging.getLogger(__name__)

MONGO_OPERATORS = {
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
    "in": "$in",
    "not-in": "$nin",
}


@contextmanager
def backend_errors(action: str):
    """Log driver failures and surface them as a generic BackendError"""
    try:
        yield
    except PyMongoError as exc:
        logger.exception("MongoDB %s failed", action)
        raise BackendError() from exc


def _field(name: str) -> str:
    return "_id" if name == "id" else name


def build_query(filters: Sequence[Filter]) -> Dict[str, Any]:
    """Translate (field, op, value) filters into a MongoDB query document"""
    validate_filters(filters)
    query: Dict[str, Any] = {}
    for field, op, value in filters:
        if op in ("in", "not-in"):
            value = list(value)
        # $eq against an array field matches any member, which covers array-contains
        query.setdefault(_field(field), {})[MONGO_OPERATORS.get(op, "$eq")] = value
    return query


def _to_record(document: Optional[Dict[str, Any]]) -> Optional[Record]:
    if document is None:
        return None
    record = dict(document)
    record["id"] = str(record.pop("_id"))
    return record


def _to_document(id: str, record: Record) -> Dict[str, Any]:
    document = {k: v for k, v in record.items() if k != "id"}
    document["_id"] = id
    return document


class MongoDocumentStore(DocumentStore):
    """Stores records with string ``_id`` values in the configured database"""

    def __init__(self, client: AsyncIOMotorClient, db_name: str):
        self.client = client
        self.db = client[db_name]

    @classmethod
    def from_url(cls, url: str, db_name: str) -> "MongoDocumentStore":
        return cls(AsyncIOMotorClient(url), db_name)

    def new_id(self) -> str:
        return str(ObjectId())

    async def get(self, collection: str, id: str) -> Optional[Record]:
        with backend_errors(f"get {collection}/{id}"):
            return _to_record(await self.db[collection].find_one({"_id": id}))

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Record]:
        cursor = self.db[collection].find(build_query(filters))
        if order_by:
            field, direction = order_by
            cursor = cursor.sort(_field(field), DESCENDING if direction == "desc" else ASCENDING)
        with backend_errors(f"query {collection}"):
            return [_to_record(doc) async for doc in cursor]

    async def add(self, collection: str, record: Record) -> str:
        new_id = record.get("id") or self.new_id()
        with backend_errors(f"insert into {collection}"):
            await self.db[collection].insert_one(_to_document(new_id, record))
        return new_id

    async def update(self, collection: str, id: str, partial: Record) -> None:
        changes = {k: v for k, v in partial.items() if k != "id"}
        with backend_errors(f"update {collection}/{id}"):
            result = await self.db[collection].update_one({"_id": id}, {"$set": changes})
        if result.matched_count == 0:
            raise NotFound(f"{collection}/{id} not found")

    async def delete(self, collection: str, id: str) -> None:
        with backend_errors(f"delete {collection}/{id}"):
            await self.db[collection].delete_one({"_id": id})

    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        """Apply all writes inside one multi-document transaction (needs a replica set)"""
        with backend_errors(f"batch write of {len(ops)} ops"):
            async with await self.client.start_session() as session:
                async with session.start_transaction():
                    for op in ops:
                        coll = self.db[op.collection]
                        if op.kind == WriteKind.SET:
                            await coll.replace_one(
                                {"_id": op.id},
                                _to_document(op.id, op.record or {}),
                                upsert=True,
                                session=session,
                            )
                        elif op.kind == WriteKind.UPDATE:
                            result = await coll.update_one(
                                {"_id": op.id},
                                {"$set": {k: v for k, v in (op.record or {}).items() if k != "id"}},
                                session=session,
                            )
                            if result.matched_count == 0:
                                # Raising inside the block aborts the transaction
                                raise NotFound(f"{op.collection}/{op.id} not found")
                        elif op.kind == WriteKind.DELETE:
                            await coll.delete_one({"_id": op.id}, session=session)

    async def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> AsyncIterator[List[Record]]:
        """Change-stream driven snapshots; re-queries the collection after each change"""
        yield await self.query(collection, filters, order_by)
        with backend_errors(f"watch {collection}"):
            async with self.db[collection].watch(full_document="updateLookup") as stream:
                async for _change in stream:
                    yield await self.query(collection, filters, order_by)

    async def close(self) -> None:
        self.client.close()
