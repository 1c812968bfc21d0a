# utils/validators.py
"""
Prüfungen und Normalisierung für Benutzereingaben (URL, E-Mail, Telefon).
Alle Funktionen sind total: sie werfen nie, sondern liefern bool/str.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[0-9]{6,15}$")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*$")
_HOST_RE = re.compile(r"^[^\s/?#@:\\]+$")
_WWW_RE = re.compile(r"^www\.")


def is_valid_url(url: str) -> bool:
    """True, wenn `url` eine absolute URL mit Schema ist (example.com allein reicht nicht)."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if parts.scheme.lower() in {"http", "https", "ftp", "ws", "wss"}:
        return bool(parts.hostname)
    return bool(parts.netloc or parts.path)


def ensure_https(url: str) -> str:
    """Sorgt dafür, dass eine URL mit http:// oder https:// beginnt."""
    if not url.startswith("http://") and not url.startswith("https://"):
        return f"https://{url}"
    return url


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.fullmatch(email or ""))


def is_valid_phone(phone: str) -> bool:
    return bool(_PHONE_RE.fullmatch(phone or ""))


def extract_domain_from_url(url: str) -> str:
    """
    Liefert den Hostnamen ohne führendes "www.".
    Ist die Eingabe keine parsebare URL, wird sie unverändert zurückgegeben.
    """
    try:
        host = urlsplit(ensure_https(url)).hostname
    except (ValueError, TypeError, AttributeError):
        return url
    if not host or not _HOST_RE.match(host):
        return url
    return _WWW_RE.sub("", host)
