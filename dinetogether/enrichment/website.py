from __future__ import annotations

import logging
import threading
from typing import Callable
from urllib.parse import quote_plus

from ..places import gateway
from .cache import BoundedTTLCache

logger = logging.getLogger(__name__)

# Listing, review and delivery sites are never a restaurant's own website.
SKIP_DOMAINS = (
    "yelp",
    "google",
    "facebook",
    "instagram",
    "twitter",
    "foursquare",
    "tripadvisor",
    "opentable",
    "grubhub",
    "doordash",
    "ubereats",
    "seamless",
    "menuism",
    "zomato",
    "yellowpages",
)

SEARCH_URL = "https://www.google.com/search?q="

WebsiteLookup = Callable[[str, str | None], str | None]


def _default_lookup(name: str, address: str | None) -> str | None:
    return gateway.find_website(name, address)


def cache_key(name: str, address: str | None = None) -> str:
    return f"{name}-{address or ''}".lower()


def search_url(name: str, address: str | None = None) -> str:
    terms = " ".join(part for part in (name, address, "restaurant official website") if part)
    return SEARCH_URL + quote_plus(terms)


def is_direct_website(url: str | None) -> bool:
    if not url:
        return False
    lower = url.lower()
    return not any(domain in lower for domain in SKIP_DOMAINS)


class WebsiteResolver:
    """Resolves a restaurant name (and address) to a URL, caching every answer."""

    def __init__(
        self,
        lookup: WebsiteLookup = _default_lookup,
        cache: BoundedTTLCache | None = None,
    ) -> None:
        self.lookup = lookup
        self.cache = cache if cache is not None else BoundedTTLCache()

    def resolve(self, name: str, address: str | None = None) -> str:
        key = cache_key(name, address)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            found = self.lookup(name, address)
        except Exception:
            logger.warning("Website lookup failed for %r", name, exc_info=True)
            found = None

        if is_direct_website(found):
            url = found
        else:
            if found:
                logger.info("Discarding directory listing %s for %r", found, name)
            url = search_url(name, address)

        self.cache.set(key, url)
        return url


_resolver: WebsiteResolver | None = None
_resolver_lock = threading.Lock()


def get_website_resolver() -> WebsiteResolver:
    """Process-wide resolver, built on first use."""
    global _resolver
    with _resolver_lock:
        if _resolver is None:
            _resolver = WebsiteResolver()
        return _resolver


def clear_website_cache() -> None:
    get_website_resolver().cache.clear()


def get_restaurant_website_url(
    name: str,
    address: str | None = None,
    resolver: WebsiteResolver | None = None,
) -> str:
    return (resolver or get_website_resolver()).resolve(name, address)
