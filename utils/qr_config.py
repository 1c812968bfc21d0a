"""
utils/qr_config.py
────────────────────────────────────────────
Globale QR-Code-Designkonfiguration für Qure QR.

Definiert das Standarddesign neuer QR-Codes, die
Verlaufs-Presets und die Fehlerkorrektur-Stufen.
────────────────────────────────────────────
"""

from typing import Dict, List, Optional

from schemas.qr_code import QRDesignOptions

# ─────────────────────────────────────────────
# 🌈 VERLAUFS-PRESETS
# ─────────────────────────────────────────────
GRADIENT_PRESETS: List[Dict[str, str]] = [
    {"name": "purple", "start": "#6A5AE0", "end": "#9747FF"},
    {"name": "orange", "start": "#FF9900", "end": "#FF5C00"},
    {"name": "blue", "start": "#007AFF", "end": "#00C2FF"},
    {"name": "green", "start": "#34C759", "end": "#00FF91"},
    {"name": "red", "start": "#FF3B30", "end": "#FF6B5C"},
]

# ─────────────────────────────────────────────
# 🛡️ FEHLERKORREKTUR
# ─────────────────────────────────────────────
ERROR_CORRECTION_LEVELS: List[Dict[str, str]] = [
    {
        "level": "L",
        "label": "Low",
        "description": "Low error correction",
        "recovery_capability": "Can recover up to 7% of data",
    },
    {
        "level": "M",
        "label": "Medium",
        "description": "Medium error correction",
        "recovery_capability": "Can recover up to 15% of data",
    },
    {
        "level": "Q",
        "label": "Quality",
        "description": "High error correction",
        "recovery_capability": "Can recover up to 25% of data",
    },
    {
        "level": "H",
        "label": "High",
        "description": "Very high error correction",
        "recovery_capability": "Can recover up to 30% of data",
    },
]

DEFAULT_ERROR_CORRECTION = "M"
DEFAULT_QUIET_ZONE = 4

# ─────────────────────────────────────────────
# 🎨 STANDARDDESIGN (Basis)
# ─────────────────────────────────────────────
QR_DEFAULT_DESIGN: Dict[str, object] = {
    "color": "#000000",
    "background_color": "#FFFFFF",
    "gradient": False,
    "gradient_start_color": GRADIENT_PRESETS[0]["start"],
    "gradient_end_color": GRADIENT_PRESETS[0]["end"],
    "error_correction_level": DEFAULT_ERROR_CORRECTION,
    "quiet_zone": DEFAULT_QUIET_ZONE,
}


# ─────────────────────────────────────────────
# 🧠 FUNKTION: Standarddesign erzeugen
# ─────────────────────────────────────────────
def create_default_design_options() -> QRDesignOptions:
    """
    Liefert bei jedem Aufruf eine neue Instanz des Standarddesigns
    (schwarz auf weiß, kein Verlauf, Fehlerkorrektur M, Rand 4).
    """
    return QRDesignOptions(**QR_DEFAULT_DESIGN)


def get_error_correction_info(level: str) -> Optional[Dict[str, str]]:
    """Beschreibung einer Fehlerkorrektur-Stufe oder None bei unbekannter Stufe."""
    for info in ERROR_CORRECTION_LEVELS:
        if info["level"] == level:
            return dict(info)
    return None
