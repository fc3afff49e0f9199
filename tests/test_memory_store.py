"""Tests for the document store contract (app/db/memory.py, app/db/mongo.py query building)."""

import pytest

from app.db.memory import InMemoryDocumentStore
from app.db.mongo import build_query
from app.db.store import WriteKind, WriteOp
from app.exceptions import NotFound


@pytest.fixture
async def filled():
    store = InMemoryDocumentStore()
    await store.add("items", {"id": "a", "name": "Relay", "qty": 5, "tags": ["spare"], "meta": {"no": "INV-1"}})
    await store.add("items", {"id": "b", "name": "Motor", "qty": 0, "tags": [], "meta": {"no": "INV-2"}})
    await store.add("items", {"id": "c", "name": "Cable", "qty": None, "tags": ["spare", "bulk"]})
    return store


class TestReads:
    async def test_get_returns_copies(self, filled):
        record = await filled.get("items", "a")
        record["qty"] = 999
        assert (await filled.get("items", "a"))["qty"] == 5

    async def test_get_missing(self, filled):
        assert await filled.get("items", "zzz") is None

    async def test_filters(self, filled):
        assert [r["id"] for r in await filled.query("items", [("qty", ">=", 1)])] == ["a"]
        assert [r["id"] for r in await filled.query("items", [("name", "in", ["Motor", "Cable"])], ("id", "asc"))] == ["b", "c"]
        assert [r["id"] for r in await filled.query("items", [("tags", "array-contains", "bulk")])] == ["c"]
        assert [r["id"] for r in await filled.query("items", [("meta.no", "==", "INV-2")])] == ["b"]

    async def test_order_by_puts_missing_first(self, filled):
        records = await filled.query("items", order_by=("qty", "asc"))
        assert [r["id"] for r in records] == ["c", "b", "a"]
        records = await filled.query("items", order_by=("qty", "desc"))
        assert [r["id"] for r in records] == ["a", "b", "c"]

    async def test_unknown_operator(self, filled):
        with pytest.raises(ValueError):
            await filled.query("items", [("qty", "~=", 1)])


class TestWrites:
    async def test_add_generates_id(self):
        store = InMemoryDocumentStore()
        new_id = await store.add("items", {"name": "Relay"})
        assert (await store.get("items", new_id))["name"] == "Relay"

    async def test_update_merges(self, filled):
        await filled.update("items", "a", {"qty": 3})
        assert await filled.get("items", "a") == {
            "id": "a", "name": "Relay", "qty": 3, "tags": ["spare"], "meta": {"no": "INV-1"},
        }

    async def test_update_missing(self, filled):
        with pytest.raises(NotFound):
            await filled.update("items", "zzz", {"qty": 3})

    async def test_delete(self, filled):
        await filled.delete("items", "a")
        assert await filled.get("items", "a") is None


class TestBatchWrite:
    async def test_all_ops_applied(self, filled):
        await filled.batch_write([
            WriteOp(collection="invoices", id="i1", kind=WriteKind.SET, record={"total": 100}),
            WriteOp(collection="items", id="a", kind=WriteKind.UPDATE, record={"qty": 4}),
            WriteOp(collection="items", id="b", kind=WriteKind.DELETE),
        ])
        assert await filled.get("invoices", "i1") == {"id": "i1", "total": 100}
        assert (await filled.get("items", "a"))["qty"] == 4
        assert await filled.get("items", "b") is None

    async def test_failed_batch_leaves_store_unchanged(self, filled):
        with pytest.raises(NotFound):
            await filled.batch_write([
                WriteOp(collection="invoices", id="i1", kind=WriteKind.SET, record={"total": 100}),
                WriteOp(collection="items", id="a", kind=WriteKind.UPDATE, record={"qty": 4}),
                WriteOp(collection="items", id="missing", kind=WriteKind.UPDATE, record={"qty": 1}),
            ])
        assert await filled.get("invoices", "i1") is None
        assert (await filled.get("items", "a"))["qty"] == 5


class TestSubscribe:
    async def test_snapshot_then_changes(self, filled):
        snapshots = filled.subscribe("items", [("tags", "array-contains", "spare")], ("id", "asc"))
        first = await snapshots.__anext__()
        assert [r["id"] for r in first] == ["a", "c"]

        await filled.add("items", {"id": "d", "name": "Fuse", "qty": 10, "tags": ["spare"]})
        second = await snapshots.__anext__()
        assert [r["id"] for r in second] == ["a", "c", "d"]
        await snapshots.aclose()


class TestMongoQuery:
    def test_build_query(self):
        query = build_query([
            ("id", "==", "x1"),
            ("month", ">=", "2024-01"),
            ("month", "<=", "2024-12"),
            ("role", "in", ("hr", "employee")),
            ("tags", "array-contains", "spare"),
        ])
        assert query == {
            "_id": {"$eq": "x1"},
            "month": {"$gte": "2024-01", "$lte": "2024-12"},
            "role": {"$in": ["hr", "employee"]},
            "tags": {"$eq": "spare"},
        }
