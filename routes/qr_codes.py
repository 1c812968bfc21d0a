# =============================================================================
# 🚀 QR-Code Routes (Qure QR)
# -----------------------------------------------------------------------------
# Verlauf, Erstellen/Bearbeiten/Löschen, Payload & PNG, Slots
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError

from routes.utils import get_history_store, get_kv_store, snake_keys
from schemas.qr_code import QRCodeType, QRDesignOptions, qr_code_adapter
from utils.formatters import derive_default_label
from utils.kv_store import KeyValueStore
from utils.premium import check_feature_access
from utils.qr_factory import create_qr
from utils.qr_generator import render_qr_png
from utils.qr_payload import generate_payload
from utils.qr_storage import HistoryStore, QRCodeNotFoundError, slot_attr
from utils.validators import ensure_https

router = APIRouter(prefix="/api/qr", tags=["QR Codes"])

# Felder, die über PUT nicht geändert werden dürfen
_READ_ONLY_FIELDS = {"id", "type", "created_at", "updated_at"}

# Kantenlänge des PNG in Pixeln
MIN_IMAGE_SIZE = 32
MAX_IMAGE_SIZE = 4096


class SlotIn(BaseModel):
    id: Optional[str] = None


def _serialize(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


async def _get_or_404(store: HistoryStore, qr_id: str):
    qr = await store.get_by_id(qr_id)
    if qr is None:
        raise HTTPException(status_code=404, detail="QR not found")
    return qr


# -------------------------------------------------------------------------
# 📜 Verlauf
# -------------------------------------------------------------------------
@router.get("/history")
async def get_history(store: HistoryStore = Depends(get_history_store)):
    history = await store.get_history()
    return _serialize(history)


# -------------------------------------------------------------------------
# 📌 Slots
# -------------------------------------------------------------------------
@router.get("/slots/{slot_name}")
async def get_slot(slot_name: str, store: HistoryStore = Depends(get_history_store)):
    try:
        qr = await store.get_slot_code(slot_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _serialize(qr) if qr is not None else None


@router.put("/slots/{slot_name}")
async def assign_slot(
    slot_name: str,
    payload: SlotIn,
    store: HistoryStore = Depends(get_history_store),
    kv: KeyValueStore = Depends(get_kv_store),
):
    try:
        attr = slot_attr(slot_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if attr == "secondary_slot" and payload.id and not await check_feature_access(kv, "secondarySlot"):
        raise HTTPException(status_code=403, detail="Secondary slot requires premium")

    try:
        history = await store.assign_slot(slot_name, payload.id)
    except QRCodeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _serialize(history)


# -------------------------------------------------------------------------
# ✅ Erstellen
# -------------------------------------------------------------------------
@router.post("/{qr_type}", status_code=201)
async def create_qr_code(
    qr_type: str,
    payload: Dict[str, Any] = Body(...),
    store: HistoryStore = Depends(get_history_store),
):
    try:
        kind = QRCodeType(qr_type.lower().strip())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported qr type: {qr_type}")

    fields = snake_keys(payload)
    try:
        if fields.get("design") is not None:
            fields["design"] = QRDesignOptions.model_validate(fields["design"])
        qr = create_qr(kind, **fields)
    except (TypeError, ValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    await store.upsert_code(qr)
    return _serialize(qr)


# -------------------------------------------------------------------------
# 🔎 Lesen / Payload / Bild
# -------------------------------------------------------------------------
@router.get("/{qr_id}")
async def get_qr(qr_id: str, store: HistoryStore = Depends(get_history_store)):
    return _serialize(await _get_or_404(store, qr_id))


@router.get("/{qr_id}/payload")
async def get_payload(qr_id: str, store: HistoryStore = Depends(get_history_store)):
    qr = await _get_or_404(store, qr_id)
    return {"id": qr.id, "type": qr.type, "payload": generate_payload(qr)}


@router.get("/{qr_id}/image.png")
async def get_image(
    qr_id: str,
    size: Optional[int] = Query(None, ge=MIN_IMAGE_SIZE, le=MAX_IMAGE_SIZE),
    store: HistoryStore = Depends(get_history_store),
):
    qr = await _get_or_404(store, qr_id)
    png = render_qr_png(generate_payload(qr), qr.design, size=size)
    return Response(content=png, media_type="image/png")


# -------------------------------------------------------------------------
# ✏️ Bearbeiten
# -------------------------------------------------------------------------
@router.put("/{qr_id}")
async def update_qr_code(
    qr_id: str,
    payload: Dict[str, Any] = Body(...),
    store: HistoryStore = Depends(get_history_store),
):
    """
    Übernimmt geänderte Felder in den bestehenden Datensatz (gleiche ID).
    createdAt bleibt erhalten, updatedAt wird beim Speichern erneuert.
    """
    current = await _get_or_404(store, qr_id)
    changes = {k: v for k, v in snake_keys(payload).items() if k not in _READ_ONLY_FIELDS}

    data = current.model_dump()
    data.update(changes)
    if current.type == QRCodeType.LINK and "url" in changes:
        data["url"] = ensure_https(str(changes["url"] or ""))
    if not str(data.get("label") or "").strip():
        data["label"] = derive_default_label(current.type, data)

    try:
        updated = qr_code_adapter.validate_python(data)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    await store.upsert_code(updated)
    return _serialize(await _get_or_404(store, qr_id))


# -------------------------------------------------------------------------
# 🗑️ Löschen
# -------------------------------------------------------------------------
@router.delete("/{qr_id}")
async def delete_qr_code(qr_id: str, store: HistoryStore = Depends(get_history_store)):
    await _get_or_404(store, qr_id)
    history = await store.delete_code(qr_id)
    return _serialize(history)
