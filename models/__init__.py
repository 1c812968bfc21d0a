# =============================================================================
# 📦 models/__init__.py
# -----------------------------------------------------------------------------
# SQLAlchemy-Modelle (Tabellen werden in main.py angelegt)
# =============================================================================

from .kv_entry import KVEntry

__all__ = [
    "KVEntry",
]
