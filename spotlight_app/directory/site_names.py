"""
Website name extraction for instant URL suggestions.

Two tiers: the curated directory first, then hostname parsing
("docs.example.io" -> "Example").
"""

import re
import logging
from typing import Optional
from urllib.parse import urlsplit

from ..urls import normalize_input_url
from .popular_sites import lookup

logger = logging.getLogger(__name__)

_COMMON_SUBDOMAINS = re.compile(r'^(www|m|mobile|app|api|cdn|static)\.')
_COMMON_TLDS = re.compile(r'\.(com|org|net|edu|gov|mil|int|co|io|ly|me|tv|app|dev|ai)$')
_HOST_LIKE = re.compile(r'(?:https?://)?(?:www\.)?([^/?#]+)')


class WebsiteNameExtractor:
    """Resolve a short display name for any URL."""

    def extract_website_name(self, url: str) -> str:
        hostname = self.normalize_hostname(url)
        if not hostname:
            return url

        curated = lookup(hostname)
        if curated:
            return curated

        return self.parse_hostname_to_name(hostname) or url

    def normalize_hostname(self, url: str) -> str:
        """Lower-cased hostname without a leading www."""
        try:
            hostname = (urlsplit(normalize_input_url(url)).hostname or "").lower()
        except ValueError as e:
            logger.debug(f"Hostname parse failed for {url!r}: {e}")
            match = _HOST_LIKE.match(url)
            return match.group(1).lower() if match else url

        if hostname.startswith('www.'):
            hostname = hostname[4:]
        return hostname

    def parse_hostname_to_name(self, hostname: str) -> Optional[str]:
        if not hostname:
            return None

        name = _COMMON_SUBDOMAINS.sub('', hostname)
        name = _COMMON_TLDS.sub('', name)
        if '.' in name:
            name = name.split('.')[-1]

        return name[:1].upper() + name[1:]


website_name_extractor = WebsiteNameExtractor()
