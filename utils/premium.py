# =============================================================================
# 💎 utils/premium.py
# -----------------------------------------------------------------------------
# Premium-Status im Key-Value-Speicher + einfache Feature-Freigabe.
# Abgelaufener Status zählt als "nicht Premium".
# =============================================================================

from __future__ import annotations

import logging
from typing import Literal, Optional

from pydantic import ValidationError

from schemas.qr_code import CamelModel
from utils.kv_store import KeyValueStore
from utils.qr_factory import now_ms

logger = logging.getLogger(__name__)

PREMIUM_STATUS_KEY = "qure_premium_status"

PremiumFeature = Literal["secondarySlot", "advancedStyles", "allGradients"]
PREMIUM_FEATURES = {"secondarySlot", "advancedStyles", "allGradients"}


class PremiumStatus(CamelModel):
    is_premium: bool = False
    expiry_date: Optional[int] = None


async def get_premium_status(kv: KeyValueStore) -> PremiumStatus:
    try:
        raw = await kv.get(PREMIUM_STATUS_KEY)
        if raw is None:
            return PremiumStatus()
        status = PremiumStatus.model_validate_json(raw)
    except (ValidationError, ValueError) as e:
        logger.warning(f"⚠️ Premium-Status beschädigt: {e}")
        return PremiumStatus()
    except Exception as e:
        logger.warning(f"⚠️ Premium-Status nicht lesbar: {e}")
        return PremiumStatus()

    if status.expiry_date and status.expiry_date < now_ms():
        return PremiumStatus()
    return status


async def set_premium_status(kv: KeyValueStore, status: PremiumStatus) -> None:
    try:
        await kv.set(PREMIUM_STATUS_KEY, status.model_dump_json(by_alias=True))
    except Exception as e:
        logger.error(f"❌ Premium-Status konnte nicht gespeichert werden: {e}")
        raise


async def check_feature_access(kv: KeyValueStore, feature: PremiumFeature) -> bool:
    """Alle Premium-Features hängen derzeit nur am Premium-Status."""
    if feature not in PREMIUM_FEATURES:
        raise ValueError(f"Unbekanntes Feature: {feature!r}")
    status = await get_premium_status(kv)
    return status.is_premium
