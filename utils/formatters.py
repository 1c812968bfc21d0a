# =============================================================================
# 🧾 utils/formatters.py
# -----------------------------------------------------------------------------
# Anzeige-Formatierung: Telefonnummern, Datum/Zeit, Standard-Labels
# =============================================================================

from __future__ import annotations

import re
import time
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from schemas.qr_code import QRCodeType
from utils.validators import extract_domain_from_url

_NON_DIGIT_RE = re.compile(r"\D")

TEXT_LABEL_LENGTH = 20
DEFAULT_LABEL = "QR Code"


def format_phone(country_code: str, phone_number: str) -> str:
    """"+" + Ländervorwahl + alle Ziffern der Nummer (Trennzeichen entfernt)."""
    cleaned = _NON_DIGIT_RE.sub("", phone_number or "")
    return f"+{country_code or ''}{cleaned}"


# ---------------------------------------------------------------------------
# 🕒 Datum & Zeit
# ---------------------------------------------------------------------------

def _to_datetime(timestamp: Union[int, float]) -> datetime:
    return datetime.fromtimestamp(timestamp / 1000)


def format_date(timestamp: Union[int, float]) -> str:
    return _to_datetime(timestamp).strftime("%b %d, %Y")


def format_time(timestamp: Union[int, float]) -> str:
    return _to_datetime(timestamp).strftime("%H:%M")


def format_date_time(timestamp: Union[int, float]) -> str:
    """z. B. "Oct 19, 2026, 14:05" (enthält immer die vierstellige Jahreszahl)."""
    return _to_datetime(timestamp).strftime("%b %d, %Y, %H:%M")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(timestamp: Union[int, float], now: Optional[int] = None) -> str:
    now = int(time.time() * 1000) if now is None else now
    seconds = int((now - timestamp) // 1000)

    if seconds < 60:
        return "Just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 7:
        return _plural(days, "day")
    return format_date(timestamp)


# ---------------------------------------------------------------------------
# 🏷️ Standard-Labels
# ---------------------------------------------------------------------------

def derive_default_label(qr_type: Union[QRCodeType, str], fields: Mapping[str, Any]) -> str:
    """
    Leitet ein Label aus den Nutzdaten ab, wenn der Benutzer keins angibt.
    `fields` nutzt die Python-Feldnamen (url, email, country_code, first_name, ...).
    """

    def get(name: str) -> str:
        return str(fields.get(name) or "")

    match qr_type:
        case QRCodeType.LINK:
            label = extract_domain_from_url(get("url"))
        case QRCodeType.EMAIL:
            label = get("email")
        case QRCodeType.PHONE | QRCodeType.SMS | QRCodeType.WHATSAPP:
            label = format_phone(get("country_code"), get("phone_number"))
        case QRCodeType.VCARD:
            label = f"{get('first_name')} {get('last_name')}"
        case QRCodeType.TEXT:
            content = get("content")
            if len(content) > TEXT_LABEL_LENGTH:
                content = f"{content[:TEXT_LABEL_LENGTH]}..."
            label = content
        case _:
            label = ""

    # leere Eingaben ergeben nie ein leeres Label
    return label if label.strip() else DEFAULT_LABEL


def generate_qr_code_label(qr: Any) -> str:
    """Label eines gespeicherten Datensatzes, sonst das abgeleitete Standard-Label."""
    if getattr(qr, "label", None):
        return qr.label
    fields = qr.model_dump() if hasattr(qr, "model_dump") else dict(vars(qr))
    return derive_default_label(getattr(qr, "type", None), fields)
