from __future__ import annotations

from typing import Any, Dict

from pydantic.alias_generators import to_snake

from database import SessionLocal
from utils.kv_store import KeyValueStore, SQLKeyValueStore
from utils.qr_storage import HistoryStore

# --------------------------------------------------------------------------- #
# 🗝️ Speicher-Dependencies (eine Instanz pro Prozess)
# --------------------------------------------------------------------------- #

_kv_store: SQLKeyValueStore | None = None
_history_store: HistoryStore | None = None


def get_kv_store() -> KeyValueStore:
    global _kv_store
    if _kv_store is None:
        _kv_store = SQLKeyValueStore(SessionLocal)
    return _kv_store


def get_history_store() -> HistoryStore:
    """Gemeinsamer HistoryStore, damit das asyncio.Lock alle Anfragen serialisiert."""
    global _history_store
    if _history_store is None:
        _history_store = HistoryStore(get_kv_store())
    return _history_store


# --------------------------------------------------------------------------- #
# 🔤 Eingabe-Hilfen
# --------------------------------------------------------------------------- #

def snake_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Erlaubt camelCase (countryCode) und snake_case (country_code) im Body."""
    return {to_snake(key): value for key, value in data.items()}
