"""Tests for the JSON-backed garment store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from chicpick.storage import (
    FileDocumentBackend,
    GarmentRecord,
    GarmentStore,
    MemoryDocumentBackend,
)


def _record(garment_id: str, *, last_worn: datetime | None = None) -> GarmentRecord:
    return GarmentRecord(
        id=garment_id,
        image="data:image/jpeg;base64,AAAA",
        category="Dress",
        color="Red",
        occasion="Party",
        created_at=datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
        last_worn=last_worn,
    )


class FailingBackend(MemoryDocumentBackend):
    async def write(self, key: str, body: str) -> None:
        raise OSError("quota exceeded")


@pytest.mark.asyncio
async def test_load_missing_document_is_empty() -> None:
    store = GarmentStore(MemoryDocumentBackend())

    assert await store.load() == []
    assert len(store) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        "{not json",
        json.dumps({"id": "1"}),
        json.dumps([{"id": "1", "category": "Dress"}]),
        json.dumps([{"id": "1", "imageData": "x", "category": "Dress", "color": "Red",
                     "occasion": "Casual", "lastWorn": None, "createdAt": "yesterday"}]),
    ],
)
async def test_load_malformed_document_is_empty(body: str) -> None:
    store = GarmentStore(MemoryDocumentBackend({"chicpick_dresses": body}))

    assert await store.load() == []


@pytest.mark.asyncio
async def test_load_rejects_duplicate_ids() -> None:
    body = json.dumps([_record("same").to_document(), _record("same").to_document()])
    store = GarmentStore(MemoryDocumentBackend({"chicpick_dresses": body}))

    assert await store.load() == []


@pytest.mark.asyncio
async def test_save_then_load_round_trip(tmp_path: Path) -> None:
    records = [
        _record("b", last_worn=datetime(2024, 5, 3, 22, 15, tzinfo=timezone.utc)),
        _record("a"),
    ]
    store = GarmentStore(FileDocumentBackend(tmp_path))
    assert await store.save(records)

    reloaded = await GarmentStore(FileDocumentBackend(tmp_path)).load()

    assert reloaded == records
    assert (tmp_path / "chicpick_dresses.json").exists()


@pytest.mark.asyncio
async def test_document_uses_camel_case_keys() -> None:
    backend = MemoryDocumentBackend()
    store = GarmentStore(backend)
    await store.add(_record("a"))

    stored = json.loads(backend.documents["chicpick_dresses"])

    assert stored[0]["imageData"] == "data:image/jpeg;base64,AAAA"
    assert stored[0]["lastWorn"] is None
    assert stored[0]["createdAt"] == "2024-05-01T09:30:00+00:00"


@pytest.mark.asyncio
async def test_add_prepends_and_persists() -> None:
    backend = MemoryDocumentBackend()
    store = GarmentStore(backend)

    await store.add(_record("first"))
    await store.add(_record("second"))

    assert [record.id for record in store.list_records()] == ["second", "first"]
    reloaded = await GarmentStore(backend).load()
    assert [record.id for record in reloaded] == ["second", "first"]


@pytest.mark.asyncio
async def test_add_rejects_duplicate_id() -> None:
    store = GarmentStore(MemoryDocumentBackend())
    await store.add(_record("a"))

    with pytest.raises(ValueError):
        await store.add(_record("a"))


@pytest.mark.asyncio
async def test_set_last_worn_updates_and_persists() -> None:
    backend = MemoryDocumentBackend()
    store = GarmentStore(backend)
    await store.add(_record("a"))
    worn_at = datetime(2024, 5, 4, 8, 0, tzinfo=timezone.utc)

    assert await store.set_last_worn("a", worn_at) is True

    reloaded = await GarmentStore(backend).load()
    assert reloaded[0].last_worn == worn_at


@pytest.mark.asyncio
async def test_unknown_ids_are_ignored() -> None:
    backend = MemoryDocumentBackend()
    store = GarmentStore(backend)
    await store.add(_record("a"))

    assert await store.remove("missing") is None
    assert await store.set_last_worn("missing", datetime.now()) is None
    assert [record.id for record in store.list_records()] == ["a"]


@pytest.mark.asyncio
async def test_remove_deletes_record() -> None:
    backend = MemoryDocumentBackend()
    store = GarmentStore(backend)
    await store.add(_record("a"))
    await store.add(_record("b"))

    assert await store.remove("a") is True

    assert "a" not in store
    reloaded = await GarmentStore(backend).load()
    assert [record.id for record in reloaded] == ["b"]


@pytest.mark.asyncio
async def test_write_failure_keeps_memory_state() -> None:
    store = GarmentStore(FailingBackend())

    assert await store.add(_record("a")) is False

    assert store.last_error == "quota exceeded"
    assert [record.id for record in store.list_records()] == ["a"]


@pytest.mark.asyncio
async def test_load_undecodable_document_is_empty(tmp_path: Path) -> None:
    (tmp_path / "chicpick_dresses.json").write_bytes(b"\xff\xfe[{\"id\": \x80}]")

    store = GarmentStore(FileDocumentBackend(tmp_path))

    assert await store.load() == []
    assert await store.add(_record("fresh"))
    assert [record.id for record in await GarmentStore(FileDocumentBackend(tmp_path)).load()] == ["fresh"]
