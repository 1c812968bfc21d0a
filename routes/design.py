# =============================================================================
# 🎨 Design Routes (Qure QR)
# -----------------------------------------------------------------------------
# Standarddesign, Presets, eigene Farben/Verläufe und Premium-Status
# =============================================================================

from __future__ import annotations

from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from routes.utils import get_kv_store
from utils.custom_design import CustomDesignStorage
from utils.kv_store import KeyValueStore
from utils.premium import PremiumStatus, get_premium_status, set_premium_status
from utils.qr_config import (
    ERROR_CORRECTION_LEVELS,
    GRADIENT_PRESETS,
    create_default_design_options,
)

router = APIRouter(prefix="/api/design", tags=["Design"])


class ColorIn(BaseModel):
    color: str


class GradientIn(BaseModel):
    colors: Tuple[str, str]
    name: Optional[str] = None


def get_custom_design(kv: KeyValueStore = Depends(get_kv_store)) -> CustomDesignStorage:
    return CustomDesignStorage(kv)


@router.get("/defaults")
def design_defaults():
    return {
        "design": create_default_design_options().model_dump(by_alias=True),
        "gradient_presets": GRADIENT_PRESETS,
        "error_correction_levels": ERROR_CORRECTION_LEVELS,
    }


# -------------------------------------------------------------------------
# 🎨 Eigene Farben
# -------------------------------------------------------------------------
@router.get("/colors")
async def list_colors(storage: CustomDesignStorage = Depends(get_custom_design)):
    return {"items": await storage.get_custom_colors()}


@router.post("/colors", status_code=201)
async def add_color(payload: ColorIn, storage: CustomDesignStorage = Depends(get_custom_design)):
    if not await storage.save_custom_color(payload.color):
        raise HTTPException(status_code=500, detail="Color could not be saved")
    return {"items": await storage.get_custom_colors()}


@router.delete("/colors/{color}")
async def delete_color(color: str, storage: CustomDesignStorage = Depends(get_custom_design)):
    if not await storage.remove_custom_color(color):
        raise HTTPException(status_code=500, detail="Color could not be removed")
    return {"items": await storage.get_custom_colors()}


# -------------------------------------------------------------------------
# 🌈 Eigene Verläufe
# -------------------------------------------------------------------------
@router.get("/gradients")
async def list_gradients(storage: CustomDesignStorage = Depends(get_custom_design)):
    return {"items": [g.model_dump() for g in await storage.get_custom_gradients()]}


@router.post("/gradients", status_code=201)
async def add_gradient(payload: GradientIn, storage: CustomDesignStorage = Depends(get_custom_design)):
    if not await storage.save_custom_gradient(payload.colors, payload.name):
        raise HTTPException(status_code=500, detail="Gradient could not be saved")
    return {"items": [g.model_dump() for g in await storage.get_custom_gradients()]}


@router.delete("/gradients/{gradient_id}")
async def delete_gradient(gradient_id: str, storage: CustomDesignStorage = Depends(get_custom_design)):
    if not await storage.remove_custom_gradient(gradient_id):
        raise HTTPException(status_code=500, detail="Gradient could not be removed")
    return {"items": [g.model_dump() for g in await storage.get_custom_gradients()]}


# -------------------------------------------------------------------------
# 💎 Premium
# -------------------------------------------------------------------------
@router.get("/premium")
async def premium_status(kv: KeyValueStore = Depends(get_kv_store)):
    status = await get_premium_status(kv)
    return status.model_dump(by_alias=True)


@router.put("/premium")
async def update_premium_status(payload: PremiumStatus, kv: KeyValueStore = Depends(get_kv_store)):
    await set_premium_status(kv, payload)
    return (await get_premium_status(kv)).model_dump(by_alias=True)
