import asyncio

import pytest

from library_api.app.core.db import DocumentStore, init_db
from library_api.app.core.errors import NotFoundError


def test_add_and_get_round_trip(store):
    doc_id = asyncio.run(store.add("libros", {"title": "Rayuela", "available": True}))

    assert isinstance(doc_id, str) and doc_id
    doc = asyncio.run(store.get("libros", doc_id))
    assert doc == {"id": doc_id, "title": "Rayuela", "available": True}


def test_get_missing_returns_none(store):
    assert asyncio.run(store.get("libros", "nope")) is None


def test_collections_are_isolated(store):
    asyncio.run(store.add("libros", {"title": "A"}))
    assert asyncio.run(store.get_all("usuarios")) == []
    assert len(asyncio.run(store.get_all("libros"))) == 1


def test_equality_and_null_filters(store):
    async def scenario():
        await store.add("prestamos", {"book_id": "b1", "returned_at": None})
        await store.add("prestamos", {"book_id": "b1", "returned_at": "2024-01-01T00:00:00+00:00"})
        await store.add("prestamos", {"book_id": "b2", "returned_at": None})
        active_b1 = await store.find("prestamos", [("book_id", "==", "b1"), ("returned_at", "==", None)])
        returned = await store.find("prestamos", [("returned_at", "!=", None)])
        return active_b1, returned

    active_b1, returned = asyncio.run(scenario())
    assert len(active_b1) == 1
    assert active_b1[0]["returned_at"] is None
    assert [d["returned_at"] for d in returned] == ["2024-01-01T00:00:00+00:00"]


def test_boolean_filter(store):
    async def scenario():
        await store.add("libros", {"title": "A", "available": True})
        await store.add("libros", {"title": "B", "available": False})
        return await store.find("libros", [("available", "==", True)])

    assert [d["title"] for d in asyncio.run(scenario())] == ["A"]


def test_update_merges_fields(store):
    async def scenario():
        doc_id = await store.add("libros", {"title": "A", "author": "X"})
        updated = await store.update("libros", doc_id, {"author": "Y"})
        return updated, await store.get("libros", doc_id)

    updated, doc = asyncio.run(scenario())
    assert doc["title"] == "A"
    assert doc["author"] == "Y"
    assert updated == doc


def test_update_missing_document_raises(store):
    with pytest.raises(NotFoundError):
        asyncio.run(store.update("libros", "missing", {"title": "x"}))


def test_delete(store):
    async def scenario():
        doc_id = await store.add("libros", {"title": "A"})
        await store.delete("libros", doc_id)
        return await store.get("libros", doc_id)

    assert asyncio.run(scenario()) is None


def test_transaction_rolls_back_on_error(store):
    def failing(session):
        session.add("libros", {"title": "ghost"})
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        asyncio.run(store.transaction(failing))
    assert asyncio.run(store.get_all("libros")) == []


def test_transaction_commits(store):
    def write(session):
        doc_id = session.add("libros", {"title": "A", "available": True})
        session.update("libros", doc_id, {"available": False})
        return doc_id

    doc_id = asyncio.run(store.transaction(write))
    assert asyncio.run(store.get("libros", doc_id))["available"] is False


def test_rejects_unsafe_field_names(store):
    with pytest.raises(ValueError):
        asyncio.run(store.find("libros", [("title') OR 1=1 --", "==", "x")]))


def test_init_db_is_idempotent(settings):
    init_db(settings.database_url)
    init_db(settings.database_url)
    store = DocumentStore(settings.database_url)
    assert asyncio.run(store.get_all("libros")) == []
