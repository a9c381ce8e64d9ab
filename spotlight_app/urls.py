"""
================================================================================
Spotlight v1.0 - URL Identity Helpers
================================================================================
Canonicalization and classification of URLs and raw keystroke text.

normalize_url() produces the deduplication key used everywhere a result,
a collection bookmark or a cache entry is matched by destination:

    "HTTPS://WWW.Example.com/#top"  ->  "example.com"
    "https://example.com?a=1"       ->  "example.com?a=1"   (query kept)
================================================================================
"""

import re
from typing import Optional
from urllib.parse import urlsplit


SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')
DOMAIN_RE = re.compile(r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,63}$')
IPV4_RE = re.compile(r'^(\d{1,3}\.){3}\d{1,3}(:\d+)?$')
COMMON_TLD_RE = re.compile(
    r'^[a-zA-Z0-9-]+\.(com|org|net|edu|gov|mil|int|co|io|ly|me|tv|app|dev|ai)([/?#].*)?$'
)

_TRAILING_SLASHES = re.compile(r'/+$')
_PROTOCOL = re.compile(r'^https?://')
_WWW = re.compile(r'^www\.')


def normalize_url(url: Optional[str]) -> str:
    """
    Canonicalize a URL into a deduplication key.

    Steps, in order: lower-case, drop the fragment, drop trailing slashes,
    drop a leading http(s)://, drop a leading www. Query strings are kept.

    Args:
        url: Any string (or None)

    Returns:
        Normalized key, "" for empty input. Never raises.
    """
    if not url:
        return ""

    normalized = str(url).lower()

    fragment_index = normalized.find('#')
    if fragment_index != -1:
        normalized = normalized[:fragment_index]

    normalized = _TRAILING_SLASHES.sub('', normalized)

    # Repeat so stacked prefixes ("https://www.http://") collapse in one pass
    while True:
        stripped = _WWW.sub('', _PROTOCOL.sub('', normalized))
        if stripped == normalized:
            return normalized
        normalized = stripped


def has_scheme(text: str) -> bool:
    return bool(SCHEME_RE.match(text or ""))


def normalize_input_url(text: str) -> str:
    """Return text unchanged if it carries a scheme, else prefix https://."""
    if has_scheme(text):
        return text
    return f"https://{text}"


def extract_domain(url: Optional[str]) -> str:
    """
    Hostname of a URL ("" when empty or unparsable).

    URLs without a scheme are treated as https.
    """
    if not url:
        return ""
    try:
        hostname = urlsplit(normalize_input_url(url.strip())).hostname
    except ValueError:
        return ""
    return hostname or ""


def is_url(text: Optional[str]) -> bool:
    """
    Decide whether raw input should be treated as a navigation target.

    Accepts: full URLs with a scheme, bare domains (example.com),
    localhost[:port], IPv4 addresses with valid octets, and
    label.tld/path for common TLDs. Anything containing whitespace is text.
    """
    if not text:
        return False
    text = text.strip()
    if not text or re.search(r'\s', text):
        return False

    if has_scheme(text):
        remainder = SCHEME_RE.sub('', text, count=1)
        if remainder:
            return True

    if DOMAIN_RE.match(text):
        return True

    if text == 'localhost' or text.startswith('localhost:'):
        return True

    if IPV4_RE.match(text):
        octets = text.split(':')[0].split('.')
        return all(0 <= int(part) <= 255 for part in octets)

    if COMMON_TLD_RE.match(text):
        return True

    return False
