# utils/qr_storage.py
# =============================================================================
# ✅ Einheitliche Speicherlogik für den QR-Verlauf
# - ein JSON-Blob {codes, primarySlot, secondarySlot} unter "qure_qr_codes"
# - Upsert / Löschen / Slot-Zuweisung
# - ID-Index für get_by_id (wird bei Bedarf aus "codes" neu aufgebaut)
# - einmalige Migration des alten Layouts (Liste + Index)
# =============================================================================

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from schemas.qr_code import (
    QR_MODELS,
    QRCode,
    QRCodeHistory,
    QRCodeType,
)
from utils.formatters import derive_default_label
from utils.kv_store import KeyValueStore
from utils.qr_config import create_default_design_options
from utils.qr_factory import now_ms

logger = logging.getLogger("qr_storage")

STORAGE_KEY = "qure_qr_codes"

# Altes Layout: Liste der Datensätze + separater Index
LEGACY_LIST_KEY = "@qure_qr_codes"
LEGACY_INDEX_KEY = "@qure_qr_codes_index"

_SLOT_ATTRS = {
    "primarySlot": "primary_slot",
    "secondarySlot": "secondary_slot",
    "primary_slot": "primary_slot",
    "secondary_slot": "secondary_slot",
}


class QRCodeNotFoundError(LookupError):
    """Die angegebene QR-ID existiert nicht im Verlauf."""

    def __init__(self, qr_id: str):
        super().__init__(f"QR code not found: {qr_id}")
        self.qr_id = qr_id


def empty_history() -> QRCodeHistory:
    return QRCodeHistory(codes=[], primary_slot=None, secondary_slot=None)


def slot_attr(slot_name: str) -> str:
    """Übersetzt "primarySlot"/"secondarySlot" in das Modellattribut."""
    try:
        return _SLOT_ATTRS[slot_name]
    except KeyError:
        raise ValueError(f"Unbekannter Slot: {slot_name!r}") from None


def check_history(history: QRCodeHistory) -> None:
    """IDs eindeutig, Slots leer oder auf einen vorhandenen Datensatz zeigend."""
    ids = [code.id for code in history.codes]
    duplicates = sorted({qr_id for qr_id in ids if ids.count(qr_id) > 1})
    if duplicates:
        raise ValueError(f"Doppelte QR-IDs im Verlauf: {duplicates}")
    for attr in ("primary_slot", "secondary_slot"):
        slot_id = getattr(history, attr)
        if slot_id is not None and slot_id not in ids:
            raise ValueError(f"{attr} zeigt auf unbekannte ID: {slot_id!r}")


# =============================================================================
# 🔁 Konvertierung alter Datensätze
# =============================================================================

def _legacy_timestamp(value: Any) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str) and value:
        try:
            return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp() * 1000)
        except ValueError:
            pass
    return now_ms()


def convert_legacy_record(item: Any) -> Optional[QRCode]:
    """
    Wandelt einen Datensatz des alten Layouts
    ({id, type, label, data, content, createdAt}) in das neue Modell um.
    Nicht unterstützte Typen werden zu Text-QR-Codes mit dem alten Inhalt.
    """
    if not isinstance(item, dict) or not item.get("id"):
        return None

    data = item.get("data") if isinstance(item.get("data"), dict) else {}
    content = str(item.get("content") or "")
    legacy_type = str(item.get("type") or "")

    def get(name: str) -> str:
        return str(data.get(name) or "")

    def opt(name: str) -> Optional[str]:
        return get(name) or None

    match legacy_type:
        case "link":
            qr_type = QRCodeType.LINK
            fields: Dict[str, Any] = {"url": content or get("url")}
        case "email":
            qr_type = QRCodeType.EMAIL
            fields = {"email": get("email"), "subject": opt("subject"), "body": opt("message")}
        case "phone":
            qr_type = QRCodeType.PHONE
            fields = {"country_code": "", "phone_number": get("phone")}
        case "sms":
            qr_type = QRCodeType.SMS
            fields = {"country_code": "", "phone_number": get("phone"), "message": opt("message")}
        case "whatsapp":
            qr_type = QRCodeType.WHATSAPP
            digits = "".join(ch for ch in get("phone") if ch.isdigit())
            fields = {"country_code": "", "phone_number": digits, "message": opt("message")}
        case "contact" | "vcard":
            qr_type = QRCodeType.VCARD
            fields = {
                "first_name": get("firstName"),
                "last_name": get("lastName"),
                "phone_number": opt("phone"),
                "email": opt("email"),
            }
        case "text":
            qr_type = QRCodeType.TEXT
            fields = {"content": get("text") or content}
        case _:
            qr_type = QRCodeType.TEXT
            fields = {"content": content}

    created_at = _legacy_timestamp(item.get("createdAt"))
    label = str(item.get("label") or "") or derive_default_label(qr_type, fields)
    try:
        return QR_MODELS[qr_type](
            id=str(item["id"]),
            label=label,
            created_at=created_at,
            updated_at=created_at,
            design=create_default_design_options(),
            **fields,
        )
    except ValidationError as e:
        logger.warning(f"⚠️ Alter Datensatz {item.get('id')} nicht konvertierbar: {e}")
        return None


# =============================================================================
# 🗂️ HistoryStore
# =============================================================================

class HistoryStore:
    """
    Verlauf aller QR-Codes in einem Key-Value-Speicher.

    Lesen schlägt "offen" fehl (leerer Verlauf), Schreiben "geschlossen"
    (Fehler gehen an den Aufrufer). Jeder Read-Modify-Write-Zyklus dieser
    Instanz läuft unter einem asyncio.Lock; mehrere Instanzen/Prozesse auf
    demselben Speicher bleiben "last write wins".
    """

    def __init__(self, kv: KeyValueStore, auto_migrate: bool = True):
        self._kv = kv
        self._lock = asyncio.Lock()
        self._migrated = not auto_migrate

        # ID-Index (abgeleitet, nie maßgeblich)
        self._index: Dict[str, QRCode] = {}
        self._index_ready = False
        self._indexed_raw: Optional[str] = None
        self._last_raw: Optional[str] = None
        self._last_read_ok = False

    # -------------------------------------------------------------------------
    # 📥 Lesen
    # -------------------------------------------------------------------------
    async def _load(self, strict: bool = False) -> QRCodeHistory:
        """
        strict=True: Speicherfehler werden weitergereicht (Schreibpfad),
        damit ein Lesefehler nicht zum Überschreiben mit leerem Verlauf führt.
        """
        self._last_read_ok = False
        try:
            raw = await self._kv.get(STORAGE_KEY)
        except Exception as e:
            if strict:
                logger.error(f"❌ Verlauf konnte nicht gelesen werden: {e}")
                raise
            logger.warning(f"⚠️ Verlauf nicht lesbar – leerer Verlauf: {e}")
            return empty_history()

        self._last_raw = raw
        if raw != self._indexed_raw:
            self._index_ready = False

        if raw is None:
            self._last_read_ok = True
            return empty_history()

        try:
            history = QRCodeHistory.model_validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning(f"⚠️ Verlauf beschädigt – leerer Verlauf: {e}")
            return empty_history()

        self._last_read_ok = True
        return history

    async def get_history(self) -> QRCodeHistory:
        """Aktueller Verlauf; bei fehlendem oder defektem Blob ein leerer Verlauf."""
        try:
            await self._ensure_migrated()
        except Exception as e:
            logger.warning(f"⚠️ Migration des alten Layouts fehlgeschlagen: {e}")
        return await self._load()

    async def get_by_id(self, qr_id: Optional[str]) -> Optional[QRCode]:
        if not qr_id:
            return None
        if not self._index_ready:
            history = await self.get_history()
            if self._last_read_ok:
                self._rebuild_index(history)
            else:
                return next((c.model_copy(deep=True) for c in history.codes if c.id == qr_id), None)
        record = self._index.get(qr_id)
        return record.model_copy(deep=True) if record is not None else None

    async def get_slot_code(self, slot_name: str) -> Optional[QRCode]:
        """QR-Code im angegebenen Slot (oder None)."""
        attr = slot_attr(slot_name)
        history = await self.get_history()
        return await self.get_by_id(getattr(history, attr))

    # -------------------------------------------------------------------------
    # 🧭 ID-Index
    # -------------------------------------------------------------------------
    def _rebuild_index(self, history: QRCodeHistory) -> None:
        self._index = {code.id: code for code in history.codes}
        self._indexed_raw = self._last_raw
        self._index_ready = True
        logger.debug(f"🧭 ID-Index neu aufgebaut ({len(self._index)} Einträge)")

    def invalidate_index(self) -> None:
        self._index_ready = False
        self._index = {}

    # -------------------------------------------------------------------------
    # 💾 Schreiben
    # -------------------------------------------------------------------------
    async def _write(
        self,
        history: QRCodeHistory,
        changed: Optional[QRCode] = None,
        removed: Optional[str] = None,
        reindex: bool = False,
    ) -> None:
        raw = history.to_json()
        try:
            await self._kv.set(STORAGE_KEY, raw)
        except Exception as e:
            logger.error(f"❌ Verlauf konnte nicht gespeichert werden: {e}")
            raise

        if reindex or not self._index_ready:
            self.invalidate_index()
        else:
            if changed is not None:
                # eigene Kopie: Aufrufer halten Referenzen auf `history`
                self._index[changed.id] = changed.model_copy(deep=True)
            if removed is not None:
                self._index.pop(removed, None)
            self._indexed_raw = raw
        self._last_raw = raw

    async def save_history(self, history: QRCodeHistory) -> None:
        """
        Schreibt den kompletten Verlauf (ein einziger set-Aufruf).
        Doppelte IDs oder Slots ohne passenden Datensatz → ValueError, nichts wird geschrieben.
        """
        check_history(history)
        async with self._lock:
            await self._write(history, reindex=True)

    async def upsert_code(self, qr: QRCode) -> QRCodeHistory:
        """
        Ersetzt den Datensatz mit gleicher ID (createdAt bleibt, updatedAt wird
        erneuert) oder fügt ihn vorne ein.
        """
        await self._ensure_migrated()
        async with self._lock:
            history = await self._load(strict=True)

            for i, existing in enumerate(history.codes):
                if existing.id == qr.id:
                    stored = qr.model_copy(
                        deep=True,
                        update={
                            "created_at": existing.created_at,
                            "updated_at": max(now_ms(), existing.created_at),
                        }
                    )
                    history.codes[i] = stored
                    action = "update"
                    break
            else:
                stored = qr.model_copy(deep=True)
                if stored.updated_at < stored.created_at:
                    stored.updated_at = stored.created_at
                history.codes.insert(0, stored)
                action = "create"

            await self._write(history, changed=stored)

        logger.info(f"✅ QR-Code gespeichert ({action}, id={qr.id}, type={qr.type})")
        return history

    async def delete_code(self, qr_id: str) -> QRCodeHistory:
        """Entfernt den Datensatz und leert Slots, die auf ihn zeigen."""
        await self._ensure_migrated()
        async with self._lock:
            history = await self._load(strict=True)

            history.codes = [code for code in history.codes if code.id != qr_id]
            if history.primary_slot == qr_id:
                history.primary_slot = None
            if history.secondary_slot == qr_id:
                history.secondary_slot = None

            await self._write(history, removed=qr_id)

        logger.info(f"🗑️ QR-Code gelöscht (id={qr_id})")
        return history

    async def assign_slot(self, slot_name: str, qr_id: Optional[str]) -> QRCodeHistory:
        """
        Setzt primarySlot/secondarySlot. Eine unbekannte ID wird mit
        QRCodeNotFoundError abgelehnt, ohne zu schreiben.
        """
        attr = slot_attr(slot_name)
        qr_id = qr_id or None

        await self._ensure_migrated()
        async with self._lock:
            history = await self._load(strict=True)

            if qr_id is not None and not any(code.id == qr_id for code in history.codes):
                logger.warning(f"⚠️ Slot {slot_name}: QR-Code {qr_id} nicht gefunden")
                raise QRCodeNotFoundError(qr_id)

            setattr(history, attr, qr_id)
            await self._write(history)

        logger.info(f"📌 {slot_name} → {qr_id}")
        return history

    # -------------------------------------------------------------------------
    # 🔁 Migration altes Layout
    # -------------------------------------------------------------------------
    async def _ensure_migrated(self) -> None:
        if not self._migrated:
            await self.migrate_legacy()

    async def migrate_legacy(self) -> int:
        """
        Übernimmt Datensätze aus dem alten Layout (Liste + Index) in den
        Verlauf. Bereits vorhandene IDs werden nicht überschrieben. Die alten
        Schlüssel werden nur gelöscht, wenn alle Datensätze übernommen wurden.
        Gibt die Anzahl neu übernommener Datensätze zurück.
        """
        async with self._lock:
            legacy_raw = await self._kv.get(LEGACY_LIST_KEY)
            index_raw = await self._kv.get(LEGACY_INDEX_KEY)

            if legacy_raw is None and index_raw is None:
                self._migrated = True
                return 0

            items: List[Any] = []
            if legacy_raw is not None:
                try:
                    items = json.loads(legacy_raw)
                    if not isinstance(items, list):
                        raise ValueError("legacy list is not a JSON array")
                except ValueError as e:
                    logger.error(f"❌ Altes Layout beschädigt – bleibt unverändert: {e}")
                    self._migrated = True
                    return 0

            history = await self._load(strict=True)
            known = {code.id for code in history.codes}
            added = 0
            failed = 0
            for item in items:
                record = convert_legacy_record(item)
                if record is None:
                    failed += 1
                    continue
                if record.id in known:
                    continue
                history.codes.append(record)
                known.add(record.id)
                added += 1

            if added:
                await self._write(history, reindex=True)

            if failed:
                logger.warning(
                    f"⚠️ {failed} alte Datensätze nicht übernommen – alte Schlüssel bleiben erhalten"
                )
            else:
                await self._kv.delete(LEGACY_LIST_KEY)
                await self._kv.delete(LEGACY_INDEX_KEY)

            self._migrated = True

        logger.info(f"🔁 Migration altes Layout: {added} Datensätze übernommen")
        return added
