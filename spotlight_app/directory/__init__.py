"""Curated site directory and website-name helpers."""

from .popular_sites import (
    POPULAR_SITES,
    DomainMatch,
    lookup,
    get_all_domains,
    fuzzy_domain_match,
)
from .site_names import WebsiteNameExtractor, website_name_extractor

__all__ = [
    'POPULAR_SITES',
    'DomainMatch',
    'lookup',
    'get_all_domains',
    'fuzzy_domain_match',
    'WebsiteNameExtractor',
    'website_name_extractor',
]
