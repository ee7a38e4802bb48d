from dataclasses import dataclass
from typing import Optional
import logging

from urlshortener.core.exceptions import CacheUnavailableError
from urlshortener.db.repository import MappingRepository
from urlshortener.services.cache import URLCache, cache_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpandResult:
    original_url: str


class ExpandService:

    def __init__(self, store: MappingRepository, cache: URLCache):
        self.store = store
        self.cache = cache

    def expand(self, short_code: str) -> Optional[ExpandResult]:
        """Return the original URL for short_code, or None when no mapping exists."""
        try:
            cached_url = self.cache.get(short_code)
        except CacheUnavailableError as e:
            logger.warning(f"Cache lookup failed for {short_code}, falling back to store: {e}")
            cached_url = None

        if cached_url:
            logger.info(f"Expand cache HIT for {short_code} -> {cached_url[:50]}")
            return ExpandResult(original_url=cached_url)

        mapping = self.store.find_by_short_code(short_code)
        if mapping is None:
            logger.info(f"Short code not found: {short_code}")
            return None

        logger.info(f"Expand cache MISS/DB HIT for {short_code} -> {mapping.original_url[:50]}")
        cache_mapping(self.cache, mapping.short_code, mapping.original_url)
        return ExpandResult(original_url=mapping.original_url)
