# =============================================================================
# 🏭 utils/qr_factory.py
# -----------------------------------------------------------------------------
# Baut vollständige QR-Datensätze aus minimalen Benutzereingaben:
# neue ID, Zeitstempel, Standarddesign, Normalisierung und Standard-Label.
# Pflichtfeld-Prüfung ist Sache der Formulare, nicht dieser Funktionen.
# =============================================================================

from __future__ import annotations

import string
import time
import uuid
from typing import Any, Dict, Optional

from schemas.qr_code import (
    QR_MODELS,
    EmailQRCode,
    LinkQRCode,
    PhoneQRCode,
    QRCodeType,
    QRDesignOptions,
    SMSQRCode,
    TextQRCode,
    VCardQRCode,
    WhatsAppQRCode,
)
from utils.formatters import derive_default_label
from utils.qr_config import create_default_design_options
from utils.validators import ensure_https

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_unique_id() -> str:
    """Zeitbasierter Präfix (Millisekunden, Basis 36) + zufälliger Suffix."""
    return _to_base36(now_ms()) + uuid.uuid4().hex[:10]


def _optional(value: Optional[str]) -> Optional[str]:
    # Leere optionale Felder werden nicht gespeichert
    if value is None:
        return None
    value = str(value)
    return value if value.strip() else None


def _build(
    qr_type: QRCodeType,
    fields: Dict[str, Any],
    label: Optional[str],
    design: Optional[QRDesignOptions],
):
    timestamp = now_ms()
    model = QR_MODELS[qr_type]
    return model(
        id=generate_unique_id(),
        label=label if label and label.strip() else derive_default_label(qr_type, fields),
        created_at=timestamp,
        updated_at=timestamp,
        design=design.model_copy() if design else create_default_design_options(),
        **fields,
    )


# =============================================================================
# ✅ Factories je Typ
# =============================================================================

def create_link_qr(
    url: str,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> LinkQRCode:
    return _build(QRCodeType.LINK, {"url": ensure_https(url or "")}, label, design)


def create_email_qr(
    email: str,
    subject: Optional[str] = None,
    body: Optional[str] = None,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> EmailQRCode:
    fields = {
        "email": email or "",
        "subject": _optional(subject),
        "body": _optional(body),
    }
    return _build(QRCodeType.EMAIL, fields, label, design)


def create_phone_qr(
    country_code: str,
    phone_number: str,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> PhoneQRCode:
    # Rohwerte speichern – formatiert wird erst bei Anzeige / Kodierung
    fields = {"country_code": country_code or "", "phone_number": phone_number or ""}
    return _build(QRCodeType.PHONE, fields, label, design)


def create_sms_qr(
    country_code: str,
    phone_number: str,
    message: Optional[str] = None,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> SMSQRCode:
    fields = {
        "country_code": country_code or "",
        "phone_number": phone_number or "",
        "message": _optional(message),
    }
    return _build(QRCodeType.SMS, fields, label, design)


def create_whatsapp_qr(
    country_code: str,
    phone_number: str,
    message: Optional[str] = None,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> WhatsAppQRCode:
    fields = {
        "country_code": country_code or "",
        "phone_number": phone_number or "",
        "message": _optional(message),
    }
    return _build(QRCodeType.WHATSAPP, fields, label, design)


def create_vcard_qr(
    first_name: str,
    last_name: str,
    phone_number: Optional[str] = None,
    mobile_number: Optional[str] = None,
    email: Optional[str] = None,
    website: Optional[str] = None,
    company: Optional[str] = None,
    job_title: Optional[str] = None,
    fax: Optional[str] = None,
    address: Optional[str] = None,
    city: Optional[str] = None,
    post_code: Optional[str] = None,
    country: Optional[str] = None,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> VCardQRCode:
    fields = {
        "first_name": first_name or "",
        "last_name": last_name or "",
        "phone_number": _optional(phone_number),
        "mobile_number": _optional(mobile_number),
        "email": _optional(email),
        "website": _optional(website),
        "company": _optional(company),
        "job_title": _optional(job_title),
        "fax": _optional(fax),
        "address": _optional(address),
        "city": _optional(city),
        "post_code": _optional(post_code),
        "country": _optional(country),
    }
    return _build(QRCodeType.VCARD, fields, label, design)


def create_text_qr(
    content: str,
    label: Optional[str] = None,
    design: Optional[QRDesignOptions] = None,
) -> TextQRCode:
    return _build(QRCodeType.TEXT, {"content": content or ""}, label, design)


# Einstieg für Formulare / API: Typ + Felder (Python-Namen)
FACTORIES = {
    QRCodeType.LINK: create_link_qr,
    QRCodeType.EMAIL: create_email_qr,
    QRCodeType.PHONE: create_phone_qr,
    QRCodeType.SMS: create_sms_qr,
    QRCodeType.VCARD: create_vcard_qr,
    QRCodeType.WHATSAPP: create_whatsapp_qr,
    QRCodeType.TEXT: create_text_qr,
}


def create_qr(qr_type: QRCodeType | str, **fields: Any):
    """Erstellt einen Datensatz des angegebenen Typs; unbekannter Typ → ValueError."""
    return FACTORIES[QRCodeType(qr_type)](**fields)
