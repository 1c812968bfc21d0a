import json

import pytest

from utils.kv_store import MemoryKeyValueStore
from utils.qr_factory import create_text_qr
from utils.qr_storage import (
    LEGACY_INDEX_KEY,
    LEGACY_LIST_KEY,
    STORAGE_KEY,
    HistoryStore,
    convert_legacy_record,
)

LEGACY_ITEMS = [
    {
        "id": "l1",
        "type": "link",
        "label": "My Site",
        "content": "https://example.com",
        "data": {"url": "https://example.com"},
        "createdAt": "2024-01-02T03:04:05.000Z",
    },
    {
        "id": "l2",
        "type": "email",
        "content": "mailto:a@b.com",
        "data": {"email": "a@b.com", "subject": "Hi", "message": "Body"},
        "createdAt": 1700000000000,
    },
    {
        "id": "l3",
        "type": "whatsapp",
        "content": "https://wa.me/491511234",
        "data": {"phone": "+49 151 1234", "message": "Hey"},
    },
    {
        "id": "l4",
        "type": "contact",
        "content": "BEGIN:VCARD...",
        "data": {"firstName": "John", "lastName": "Doe", "phone": "+1555"},
    },
]


def _legacy_kv(items):
    return MemoryKeyValueStore({
        LEGACY_LIST_KEY: json.dumps(items),
        LEGACY_INDEX_KEY: json.dumps({item.get("id"): i for i, item in enumerate(items)}),
    })


def test_convert_link_keeps_label_and_timestamp():
    record = convert_legacy_record(LEGACY_ITEMS[0])
    assert record.type == "link"
    assert record.url == "https://example.com"
    assert record.label == "My Site"
    assert record.created_at == 1704164645000
    assert record.updated_at == record.created_at
    assert record.design.error_correction_level == "M"


def test_convert_email_maps_message_to_body():
    record = convert_legacy_record(LEGACY_ITEMS[1])
    assert record.type == "email"
    assert record.subject == "Hi"
    assert record.body == "Body"
    assert record.created_at == 1700000000000
    assert record.label == "a@b.com"


def test_convert_whatsapp_and_contact():
    wa = convert_legacy_record(LEGACY_ITEMS[2])
    assert wa.type == "whatsapp"
    assert wa.country_code == ""
    assert wa.phone_number == "491511234"
    assert wa.message == "Hey"

    card = convert_legacy_record(LEGACY_ITEMS[3])
    assert card.type == "vcard"
    assert card.first_name == "John"
    assert card.phone_number == "+1555"
    assert card.label == "John Doe"


def test_convert_unknown_type_becomes_text():
    record = convert_legacy_record({"id": "x", "type": "wifi", "content": "WIFI:S:net;;"})
    assert record.type == "text"
    assert record.content == "WIFI:S:net;;"


def test_convert_rejects_records_without_id():
    assert convert_legacy_record({"type": "text", "content": "x"}) is None
    assert convert_legacy_record("garbage") is None


@pytest.mark.asyncio
async def test_migration_moves_records_and_deletes_legacy_keys():
    kv = _legacy_kv(LEGACY_ITEMS)
    store = HistoryStore(kv)

    history = await store.get_history()

    assert [c.id for c in history.codes] == ["l1", "l2", "l3", "l4"]
    assert LEGACY_LIST_KEY not in kv.data
    assert LEGACY_INDEX_KEY not in kv.data
    assert (await store.get_by_id("l2")).body == "Body"


@pytest.mark.asyncio
async def test_migration_keeps_existing_records():
    existing = create_text_qr(content="current").model_copy(update={"id": "l1"})
    kv = _legacy_kv(LEGACY_ITEMS)
    seeded = HistoryStore(kv, auto_migrate=False)
    await seeded.upsert_code(existing)

    store = HistoryStore(kv, auto_migrate=False)
    added = await store.migrate_legacy()

    assert added == 3
    history = await store.get_history()
    l1 = next(c for c in history.codes if c.id == "l1")
    assert l1.type == "text"
    assert l1.content == "current"
    assert len(history.codes) == 4


@pytest.mark.asyncio
async def test_migration_runs_once():
    kv = _legacy_kv(LEGACY_ITEMS)
    store = HistoryStore(kv, auto_migrate=False)
    assert await store.migrate_legacy() == 4
    assert await store.migrate_legacy() == 0


@pytest.mark.asyncio
async def test_corrupt_legacy_list_is_left_alone():
    kv = MemoryKeyValueStore({LEGACY_LIST_KEY: "[broken", LEGACY_INDEX_KEY: "{}"})
    store = HistoryStore(kv)

    history = await store.get_history()

    assert history.codes == []
    assert kv.data[LEGACY_LIST_KEY] == "[broken"
    assert STORAGE_KEY not in kv.data


@pytest.mark.asyncio
async def test_unconvertible_record_keeps_legacy_keys():
    items = [*LEGACY_ITEMS[:2], {"type": "text", "content": "no id"}]
    kv = _legacy_kv(items)
    store = HistoryStore(kv, auto_migrate=False)

    added = await store.migrate_legacy()

    assert added == 2
    assert LEGACY_LIST_KEY in kv.data
    assert LEGACY_INDEX_KEY in kv.data
