# =============================================================================
# 🧠 QR-Code Renderer – Qure QR
# -----------------------------------------------------------------------------
# Rendert einen fertigen Payload-String als PNG (qrcode + Pillow) mit den
# Designoptionen eines Datensatzes: Farben, Verlauf, Fehlerkorrektur, Rand.
# Die eigentliche QR-Kodierung übernimmt vollständig die qrcode-Bibliothek.
# =============================================================================

from __future__ import annotations

import logging
import os
from io import BytesIO
from typing import Optional

import qrcode
import qrcode.image.styledpil
import qrcode.image.styles.colormasks as mask
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.image.styles.moduledrawers import SquareModuleDrawer
from PIL import Image, ImageColor

from schemas.qr_code import QRDesignOptions
from utils.qr_config import create_default_design_options

# ---------------------------------------------------------------------------
# ⚙️ Logging konfigurieren
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)

DEFAULT_RENDER_SIZE = int(os.getenv("QR_RENDER_SIZE", "600"))

_ERROR_CORRECTION = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


def _rgb(value: str, fallback: str) -> tuple:
    """Hex-Farbe → RGB; ungültige Werte fallen auf `fallback` zurück."""
    try:
        return ImageColor.getrgb(value)[:3]
    except ValueError:
        logger.warning(f"⚠️ Ungültige Farbe '{value}' – verwende {fallback}")
        return ImageColor.getrgb(fallback)[:3]


# ---------------------------------------------------------------------------
# 🧩 Hauptfunktion: render_qr_png
# ---------------------------------------------------------------------------

def render_qr_png(
    payload: str,
    design: Optional[QRDesignOptions] = None,
    size: Optional[int] = None,
) -> bytes:
    """
    Erzeugt das QR-Bild als PNG-Bytes (size × size Pixel).
    Der Rand (quiet zone) ist ein Pixelrand in Hintergrundfarbe, höchstens
    ein Viertel der Kantenlänge; qrcode selbst rendert ohne Rand.
    """
    design = design or create_default_design_options()
    size = size or DEFAULT_RENDER_SIZE
    if size < 1:
        raise ValueError(f"Ungültige Bildgröße: {size}")

    # === 1️⃣ QR-Code Basis ===
    qr = qrcode.QRCode(
        version=None,
        error_correction=_ERROR_CORRECTION.get(design.error_correction_level, ERROR_CORRECT_M),
        box_size=10,
        border=0,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    # === 2️⃣ Farbmaske (Verlauf oder statisch) ===
    back = _rgb(design.background_color, "#FFFFFF")
    if design.gradient:
        color_mask = mask.VerticalGradiantColorMask(
            back_color=back,
            top_color=_rgb(design.gradient_start_color, "#000000"),
            bottom_color=_rgb(design.gradient_end_color, "#000000"),
        )
    else:
        color_mask = mask.SolidFillColorMask(
            back_color=back,
            front_color=_rgb(design.color, "#000000"),
        )

    # === 3️⃣ Bild erzeugen ===
    img = qr.make_image(
        image_factory=qrcode.image.styledpil.StyledPilImage,
        module_drawer=SquareModuleDrawer(),
        color_mask=color_mask,
    ).convert("RGB")

    # === 4️⃣ Skalierung + Rand in Pixeln ===
    margin = min(design.quiet_zone, size // 4)
    inner = size - 2 * margin
    canvas = Image.new("RGB", (size, size), back)
    canvas.paste(img.resize((inner, inner), Image.Resampling.NEAREST), (margin, margin))
    img = canvas

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    data = buffer.getvalue()

    logger.info(f"✅ QR-Bild gerendert ({len(payload)} Zeichen, {size}px, EC={design.error_correction_level})")
    return data
