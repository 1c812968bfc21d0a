# =============================================================================
# 🗝️ utils/kv_store.py
# -----------------------------------------------------------------------------
# Asynchroner Key-Value-Speicher (JSON-Text pro Schlüssel).
# - SQLKeyValueStore: Tabelle "kv_store" über SQLAlchemy
# - MemoryKeyValueStore: im Prozess (Werkzeuge / Tests)
# Ein fehlender Schlüssel ist kein Fehler, sondern liefert None.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy.orm import Session

from models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class SQLKeyValueStore:
    """
    Key-Value-Speicher auf Basis der Tabelle "kv_store".
    Die synchrone Session läuft in einem Worker-Thread (asyncio.to_thread),
    damit der Event-Loop nicht blockiert.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    # -- synchron -------------------------------------------------------------
    def _get_sync(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            entry = db.get(KVEntry, key)
            return entry.value if entry else None

    def _set_sync(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            entry = db.get(KVEntry, key)
            if entry is None:
                db.add(KVEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()

    def _delete_sync(self, key: str) -> None:
        with self._session_factory() as db:
            entry = db.get(KVEntry, key)
            if entry is not None:
                db.delete(entry)
                db.commit()

    # -- asynchron ------------------------------------------------------------
    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set_sync, key, value)
        logger.debug(f"💾 kv_store[{key}] geschrieben ({len(value)} Zeichen)")

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)


class MemoryKeyValueStore:
    """Flüchtiger Speicher im Prozess (gleiches Protokoll wie SQLKeyValueStore)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)
