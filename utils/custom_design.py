# utils/custom_design.py
"""
Vom Benutzer gespeicherte Farben und Verläufe (jeweils max. 5, neueste zuerst).
Schreibfehler werden protokolliert und als False gemeldet.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from utils.kv_store import KeyValueStore
from utils.qr_factory import generate_unique_id

logger = logging.getLogger(__name__)

CUSTOM_COLORS_KEY = "customColors"
CUSTOM_GRADIENTS_KEY = "customGradients"
MAX_CUSTOM_COLORS = 5
MAX_CUSTOM_GRADIENTS = 5


class CustomGradient(BaseModel):
    id: str
    colors: Tuple[str, str]
    name: Optional[str] = None


class CustomDesignStorage:
    def __init__(self, kv: KeyValueStore):
        self._kv = kv

    # ---------------------------------------------------------------------
    # 🎨 Farben
    # ---------------------------------------------------------------------
    async def get_custom_colors(self) -> List[str]:
        try:
            raw = await self._kv.get(CUSTOM_COLORS_KEY)
            colors = json.loads(raw) if raw else []
            return [str(c) for c in colors] if isinstance(colors, list) else []
        except Exception as e:
            logger.warning(f"⚠️ Eigene Farben nicht lesbar: {e}")
            return []

    async def save_custom_color(self, color: str) -> bool:
        existing = await self.get_custom_colors()
        if color in existing:
            return True
        updated = [color, *existing][:MAX_CUSTOM_COLORS]
        return await self._put(CUSTOM_COLORS_KEY, json.dumps(updated))

    async def remove_custom_color(self, color: str) -> bool:
        existing = await self.get_custom_colors()
        updated = [c for c in existing if c != color]
        return await self._put(CUSTOM_COLORS_KEY, json.dumps(updated))

    # ---------------------------------------------------------------------
    # 🌈 Verläufe
    # ---------------------------------------------------------------------
    async def get_custom_gradients(self) -> List[CustomGradient]:
        try:
            raw = await self._kv.get(CUSTOM_GRADIENTS_KEY)
            items = json.loads(raw) if raw else []
            return [CustomGradient.model_validate(item) for item in items]
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(f"⚠️ Eigene Verläufe beschädigt: {e}")
            return []
        except Exception as e:
            logger.warning(f"⚠️ Eigene Verläufe nicht lesbar: {e}")
            return []

    async def save_custom_gradient(self, colors: Tuple[str, str], name: Optional[str] = None) -> bool:
        existing = await self.get_custom_gradients()
        start, end = colors
        if any(g.colors[0] == start and g.colors[1] == end for g in existing):
            return True
        gradient = CustomGradient(id=generate_unique_id(), colors=(start, end), name=name)
        updated = [gradient, *existing][:MAX_CUSTOM_GRADIENTS]
        return await self._put(
            CUSTOM_GRADIENTS_KEY, json.dumps([g.model_dump() for g in updated])
        )

    async def remove_custom_gradient(self, gradient_id: str) -> bool:
        existing = await self.get_custom_gradients()
        updated = [g for g in existing if g.id != gradient_id]
        return await self._put(
            CUSTOM_GRADIENTS_KEY, json.dumps([g.model_dump() for g in updated])
        )

    # ---------------------------------------------------------------------
    async def _put(self, key: str, value: str) -> bool:
        try:
            await self._kv.set(key, value)
            return True
        except Exception as e:
            logger.error(f"❌ {key} konnte nicht gespeichert werden: {e}")
            return False
