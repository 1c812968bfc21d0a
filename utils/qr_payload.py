"""
utils/qr_payload.py
────────────────────────────────────────────
Erzeugt den exakten Text, der im QR-Bild kodiert wird.
- Unterstützt: Link, E-Mail, Telefon, SMS, WhatsApp, Text, vCard
- Das Format muss exakt stimmen, sonst erkennen Scanner-Apps den
  Inhalt nicht (mailto:, tel:, sms:, wa.me, vCard 3.0)
────────────────────────────────────────────
"""

from __future__ import annotations

import logging
from typing import Any, List
from urllib.parse import quote

from schemas.qr_code import QRCodeType

logger = logging.getLogger(__name__)

# Zeichen, die encodeURIComponent unverändert lässt (zusätzlich zu A-Z a-z 0-9 _ . - ~)
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """Prozent-Kodierung wie encodeURIComponent (Leerzeichen → %20, nicht "+")."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


# ---------------------------------------------------------------------------
# 🧩 Einzelne Formate
# ---------------------------------------------------------------------------

def build_mailto(email: str, subject: str | None = None, body: str | None = None) -> str:
    mailto = f"mailto:{email}"
    if subject:
        mailto += f"?subject={encode_uri_component(subject)}"
    if body:
        mailto += f"{'&' if subject else '?'}body={encode_uri_component(body)}"
    return mailto


def build_sms(country_code: str, phone_number: str, message: str | None = None) -> str:
    sms = f"sms:{country_code}{phone_number}"
    if message:
        sms += f"?body={encode_uri_component(message)}"
    return sms


def build_whatsapp(country_code: str, phone_number: str, message: str | None = None) -> str:
    url = f"https://wa.me/{country_code}{phone_number}"
    if message:
        url += f"?text={encode_uri_component(message)}"
    return url


def build_vcard_text(qr: Any) -> str:
    """
    vCard 3.0, Zeilen mit "\\n" getrennt, ohne abschließenden Zeilenumbruch.
    Leere optionale Felder erzeugen keine Zeile.
    """
    lines: List[str] = [
        "BEGIN:VCARD",
        "VERSION:3.0",
        f"N:{qr.last_name};{qr.first_name};;;",
        f"FN:{qr.first_name} {qr.last_name}",
    ]
    if qr.phone_number:
        lines.append(f"TEL;TYPE=WORK,VOICE:{qr.phone_number}")
    if qr.mobile_number:
        lines.append(f"TEL;TYPE=CELL,VOICE:{qr.mobile_number}")
    if qr.email:
        lines.append(f"EMAIL;TYPE=INTERNET:{qr.email}")
    if qr.website:
        lines.append(f"URL:{qr.website}")
    if qr.company:
        lines.append(f"ORG:{qr.company}")
    if qr.job_title:
        lines.append(f"TITLE:{qr.job_title}")
    if qr.fax:
        lines.append(f"TEL;TYPE=FAX:{qr.fax}")

    # Adresse: ADR;TYPE=WORK:<PO>;<ext>;<street>;<city>;<region>;<zip>;<country>
    if qr.address or qr.city or qr.post_code or qr.country:
        lines.append(
            f"ADR;TYPE=WORK:;;{qr.address or ''};{qr.city or ''};;"
            f"{qr.post_code or ''};{qr.country or ''}"
        )

    lines.append("END:VCARD")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# 🧠 Hauptfunktion: generate_payload
# ---------------------------------------------------------------------------

def generate_payload(qr: Any) -> str:
    """
    Liefert den QR-Inhalt für einen gespeicherten Datensatz.
    Unbekannte Typen ergeben einen leeren String (kein Fehler).
    """
    qr_type = getattr(qr, "type", None)
    try:
        match qr_type:
            case QRCodeType.LINK:
                return qr.url
            case QRCodeType.EMAIL:
                return build_mailto(qr.email, qr.subject, qr.body)
            case QRCodeType.PHONE:
                return f"tel:{qr.country_code}{qr.phone_number}"
            case QRCodeType.SMS:
                return build_sms(qr.country_code, qr.phone_number, qr.message)
            case QRCodeType.WHATSAPP:
                return build_whatsapp(qr.country_code, qr.phone_number, qr.message)
            case QRCodeType.TEXT:
                return qr.content
            case QRCodeType.VCARD:
                return build_vcard_text(qr)
            case _:
                logger.warning(f"⚠️ Unbekannter QR-Typ: {qr_type}")
                return ""
    except AttributeError as e:
        # Datensatz passt nicht zum Typ (fehlende Felder)
        logger.warning(f"⚠️ Unvollständiger QR-Datensatz ({qr_type}): {e}")
        return ""
