import pytest

from utils.validators import (
    ensure_https,
    extract_domain_from_url,
    is_valid_email,
    is_valid_phone,
    is_valid_url,
)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com", True),
        ("http://example.com/path?x=1", True),
        ("mailto:a@b.com", True),
        ("example.com", False),
        ("www.example.com", False),
        ("", False),
        ("http://", False),
        ("not a url", False),
    ],
)
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


def test_ensure_https_prefixes_bare_domain():
    assert ensure_https("example.com") == "https://example.com"
    assert ensure_https("http://example.com") == "http://example.com"
    assert ensure_https("https://example.com") == "https://example.com"


@pytest.mark.parametrize("value", ["", "example.com", "http://x.y", "https://a", "ftp://host"])
def test_ensure_https_is_idempotent(value):
    once = ensure_https(value)
    assert ensure_https(once) == once


@pytest.mark.parametrize(
    "email, expected",
    [
        ("a@b.com", True),
        ("first.last@sub.domain.org", True),
        ("a@b", False),
        ("a b@c.com", False),
        ("@b.com", False),
        ("", False),
    ],
)
def test_is_valid_email(email, expected):
    assert is_valid_email(email) is expected


@pytest.mark.parametrize(
    "phone, expected",
    [
        ("+4915123456789", True),
        ("123456", True),
        ("12345", False),
        ("+1234567890123456", False),
        ("+49 151 234", False),
        ("555-1234", False),
        ("", False),
    ],
)
def test_is_valid_phone(phone, expected):
    assert is_valid_phone(phone) is expected


def test_extract_domain_strips_www():
    assert extract_domain_from_url("https://www.example.com/path") == "example.com"
    assert extract_domain_from_url("example.com") == "example.com"
    assert extract_domain_from_url("http://Sub.Example.com:8080/x") == "sub.example.com"


@pytest.mark.parametrize("garbage", ["", "   ", "not a url", "http://[broken", "::::", "https://"])
def test_extract_domain_never_raises(garbage):
    """Ungültige Eingaben kommen unverändert zurück."""
    assert extract_domain_from_url(garbage) == garbage
