"""
In-Memory Document Store
Process-local store used by the test-suite and the "memory" backend for local demos
"""
import asyncio
import copy
import logging
import uuid
from typing import AsyncIterator, Dict, List, Optional, Sequence, Set

from app.db.store import (
    DocumentStore,
    Filter,
    OrderBy,
    Record,
    WriteKind,
    WriteOp,
    matches,
    resolve_path,
    validate_filters,
)
from app.exceptions import NotFound

logger = logging.getLogger(__name__)


def _sort_key(field: str):
    def key(record: Record):
        value = resolve_path(record, field)
        # None sorts first in ascending order
        return (value is not None, value)
    return key


class InMemoryDocumentStore(DocumentStore):
    """Dict-of-dicts store; every read returns deep copies"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Record]] = {}
        self._listeners: Dict[str, Set[asyncio.Queue]] = {}

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _collection(self, name: str) -> Dict[str, Record]:
        return self._data.setdefault(name, {})

    def _notify(self, *collections: str) -> None:
        for name in set(collections):
            for queue in self._listeners.get(name, ()):
                queue.put_nowait(name)

    async def get(self, collection: str, id: str) -> Optional[Record]:
        record = self._collection(collection).get(id)
        return copy.deepcopy(record) if record is not None else None

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Record]:
        validate_filters(filters)
        results = [
            copy.deepcopy(record)
            for record in self._collection(collection).values()
            if matches(record, filters)
        ]
        if order_by:
            field, direction = order_by
            results.sort(key=_sort_key(field), reverse=direction == "desc")
        return results

    async def add(self, collection: str, record: Record) -> str:
        new_id = record.get("id") or self.new_id()
        stored = copy.deepcopy(record)
        stored["id"] = new_id
        self._collection(collection)[new_id] = stored
        self._notify(collection)
        return new_id

    async def update(self, collection: str, id: str, partial: Record) -> None:
        records = self._collection(collection)
        if id not in records:
            raise NotFound(f"{collection}/{id} not found")
        records[id].update(copy.deepcopy({k: v for k, v in partial.items() if k != "id"}))
        self._notify(collection)

    async def delete(self, collection: str, id: str) -> None:
        if self._collection(collection).pop(id, None) is not None:
            self._notify(collection)

    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        staged = copy.deepcopy(self._data)
        for op in ops:
            records = staged.setdefault(op.collection, {})
            if op.kind == WriteKind.SET:
                record = copy.deepcopy(op.record or {})
                record["id"] = op.id
                records[op.id] = record
            elif op.kind == WriteKind.UPDATE:
                if op.id not in records:
                    raise NotFound(f"{op.collection}/{op.id} not found")
                records[op.id].update(copy.deepcopy(op.record or {}))
            elif op.kind == WriteKind.DELETE:
                records.pop(op.id, None)
        self._data = staged
        logger.debug("Committed batch of %d writes", len(ops))
        self._notify(*(op.collection for op in ops))

    async def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> AsyncIterator[List[Record]]:
        queue: asyncio.Queue = asyncio.Queue()
        self._listeners.setdefault(collection, set()).add(queue)
        try:
            yield await self.query(collection, filters, order_by)
            while True:
                await queue.get()
                yield await self.query(collection, filters, order_by)
        finally:
            self._listeners[collection].discard(queue)
