import asyncio
import json

import pytest

from schemas.qr_code import QRCodeHistory
from utils.kv_store import MemoryKeyValueStore
from utils.qr_factory import create_email_qr, create_link_qr, create_text_qr
from utils.qr_storage import STORAGE_KEY, HistoryStore, QRCodeNotFoundError, slot_attr


@pytest.mark.asyncio
async def test_empty_store_returns_empty_history(store):
    history = await store.get_history()
    assert history.codes == []
    assert history.primary_slot is None
    assert history.secondary_slot is None


@pytest.mark.asyncio
async def test_upsert_then_get_by_id(store):
    qr = create_link_qr(url="example.com")
    history = await store.upsert_code(qr)

    assert [c.id for c in history.codes] == [qr.id]
    found = await store.get_by_id(qr.id)
    assert found is not None
    assert found.url == "https://example.com"
    assert await store.get_by_id("missing") is None
    assert await store.get_by_id(None) is None


@pytest.mark.asyncio
async def test_new_records_are_prepended(store):
    first = create_text_qr(content="one")
    second = create_text_qr(content="two")
    await store.upsert_code(first)
    history = await store.upsert_code(second)
    assert [c.id for c in history.codes] == [second.id, first.id]


@pytest.mark.asyncio
async def test_reupsert_keeps_created_at(store):
    qr = create_email_qr(email="a@b.com")
    await store.upsert_code(qr)

    edited = qr.model_copy(update={"subject": "Hi", "created_at": 1, "updated_at": 1})
    history = await store.upsert_code(edited)

    assert len(history.codes) == 1
    stored = history.codes[0]
    assert stored.subject == "Hi"
    assert stored.created_at == qr.created_at
    assert stored.updated_at >= qr.created_at

    found = await store.get_by_id(qr.id)
    assert found.subject == "Hi"


@pytest.mark.asyncio
async def test_delete_clears_slots(store):
    a = create_text_qr(content="a")
    b = create_text_qr(content="b")
    await store.upsert_code(a)
    await store.upsert_code(b)
    await store.assign_slot("primarySlot", a.id)
    await store.assign_slot("secondarySlot", a.id)

    history = await store.delete_code(a.id)

    assert [c.id for c in history.codes] == [b.id]
    assert history.primary_slot is None
    assert history.secondary_slot is None
    assert await store.get_by_id(a.id) is None


@pytest.mark.asyncio
async def test_delete_first_of_two(store):
    """Zwei Datensätze speichern, den ersten löschen → nur der zweite bleibt."""
    first = create_link_qr(url="one.com")
    second = create_link_qr(url="two.com")
    await store.upsert_code(first)
    await store.upsert_code(second)
    await store.assign_slot("primarySlot", first.id)

    await store.delete_code(first.id)

    history = await store.get_history()
    assert [c.id for c in history.codes] == [second.id]
    assert history.primary_slot is None


@pytest.mark.asyncio
async def test_assign_unknown_id_does_not_write(kv):
    store = HistoryStore(kv)
    qr = create_text_qr(content="x")
    await store.upsert_code(qr)
    before = await kv.get(STORAGE_KEY)

    with pytest.raises(QRCodeNotFoundError) as exc:
        await store.assign_slot("primarySlot", "does-not-exist")

    assert exc.value.qr_id == "does-not-exist"
    assert await kv.get(STORAGE_KEY) == before


@pytest.mark.asyncio
async def test_assign_and_clear_slot(store):
    qr = create_text_qr(content="x")
    await store.upsert_code(qr)

    history = await store.assign_slot("primary_slot", qr.id)
    assert history.primary_slot == qr.id
    assert (await store.get_slot_code("primarySlot")).id == qr.id

    history = await store.assign_slot("primarySlot", None)
    assert history.primary_slot is None
    assert await store.get_slot_code("primarySlot") is None


def test_invalid_slot_name():
    with pytest.raises(ValueError):
        slot_attr("tertiarySlot")


@pytest.mark.asyncio
async def test_persisted_json_is_camel_case(kv, store):
    qr = create_email_qr(email="a@b.com")
    await store.upsert_code(qr)
    await store.assign_slot("primarySlot", qr.id)

    data = json.loads(await kv.get(STORAGE_KEY))
    assert set(data) == {"codes", "primarySlot", "secondarySlot"}
    assert data["primarySlot"] == qr.id
    record = data["codes"][0]
    assert record["type"] == "email"
    assert "createdAt" in record and "updatedAt" in record
    assert "backgroundColor" in record["design"]


@pytest.mark.asyncio
async def test_corrupt_blob_reads_as_empty():
    kv = MemoryKeyValueStore({STORAGE_KEY: "{not json"})
    store = HistoryStore(kv)
    history = await store.get_history()
    assert history.codes == []
    assert await store.get_by_id("anything") is None


@pytest.mark.asyncio
async def test_failing_read_gives_empty_history(failing_kv):
    store = HistoryStore(failing_kv(fail_get=True, fail_set=False), auto_migrate=False)
    history = await store.get_history()
    assert history == QRCodeHistory()


@pytest.mark.asyncio
async def test_failing_read_blocks_writes(failing_kv):
    kv = failing_kv(fail_get=True, fail_set=False)
    store = HistoryStore(kv, auto_migrate=False)
    with pytest.raises(OSError):
        await store.upsert_code(create_text_qr(content="x"))
    assert kv.set_calls == 0


@pytest.mark.asyncio
async def test_failing_write_propagates(failing_kv):
    kv = failing_kv(fail_get=False, fail_set=True)
    store = HistoryStore(kv)
    with pytest.raises(OSError):
        await store.upsert_code(create_text_qr(content="x"))
    assert kv.set_calls == 1


@pytest.mark.asyncio
async def test_index_follows_external_change(kv):
    store = HistoryStore(kv)
    other = HistoryStore(kv)

    qr = create_text_qr(content="before")
    await store.upsert_code(qr)
    assert (await store.get_by_id(qr.id)).content == "before"

    # Schreiben über eine zweite Instanz
    await other.upsert_code(qr.model_copy(update={"content": "after"}))

    # Jeder Lesevorgang erkennt den geänderten Blob und verwirft den Index
    await store.get_history()
    assert (await store.get_by_id(qr.id)).content == "after"


@pytest.mark.asyncio
async def test_save_history_replaces_everything(store):
    await store.upsert_code(create_text_qr(content="old"))
    new = create_text_qr(content="new")

    await store.save_history(QRCodeHistory(codes=[new], primary_slot=new.id))

    history = await store.get_history()
    assert [c.id for c in history.codes] == [new.id]
    assert (await store.get_slot_code("primarySlot")).content == "new"


@pytest.mark.asyncio
async def test_get_by_id_returns_copy(store):
    qr = create_text_qr(content="x")
    await store.upsert_code(qr)
    found = await store.get_by_id(qr.id)
    found.content = "mutated"
    assert (await store.get_by_id(qr.id)).content == "x"


@pytest.mark.asyncio
async def test_concurrent_upserts_lose_nothing(store):
    codes = [create_text_qr(content=f"n{i}") for i in range(20)]
    await asyncio.gather(*(store.upsert_code(c) for c in codes))

    history = await store.get_history()
    assert {c.id for c in history.codes} == {c.id for c in codes}


@pytest.mark.asyncio
async def test_index_unaffected_by_caller_mutation(kv, store):
    await store.get_by_id("warm-up")  # Index aufbauen

    qr = create_text_qr(content="original", label="original")
    history = await store.upsert_code(qr)

    qr.content = "changed-after-save"
    history.codes[0].label = "changed"
    qr.design.color = "#123456"

    found = await store.get_by_id(qr.id)
    assert found.content == "original"
    assert found.label == "original"
    assert found.design.color == "#000000"
    assert json.loads(await kv.get(STORAGE_KEY))["codes"][0]["label"] == "original"


@pytest.mark.asyncio
async def test_reupsert_does_not_share_design(store):
    qr = create_text_qr(content="x")
    await store.upsert_code(qr)
    await store.get_by_id(qr.id)

    edited = qr.model_copy(update={"content": "y"})
    await store.upsert_code(edited)
    edited.design.color = "#ABCDEF"

    assert (await store.get_by_id(qr.id)).design.color == "#000000"


@pytest.mark.asyncio
async def test_save_history_rejects_duplicate_ids(kv, store):
    qr = create_text_qr(content="x")
    with pytest.raises(ValueError):
        await store.save_history(QRCodeHistory(codes=[qr, qr.model_copy()]))
    assert await kv.get(STORAGE_KEY) is None


@pytest.mark.asyncio
async def test_save_history_rejects_dangling_slot(kv, store):
    qr = create_text_qr(content="x")
    with pytest.raises(ValueError):
        await store.save_history(QRCodeHistory(codes=[qr], secondary_slot="ghost"))
    assert await kv.get(STORAGE_KEY) is None
