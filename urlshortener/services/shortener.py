from dataclasses import dataclass
from typing import Optional
import logging

from urlshortener.core.exceptions import CacheUnavailableError, GenerationExhaustedError, StoreConflictError
from urlshortener.db.models import UrlMapping, utcnow
from urlshortener.db.repository import MappingRepository
from urlshortener.services.cache import URLCache, cache_mapping, url_key
from urlshortener.services.generator import ShortCodeGenerator

logger = logging.getLogger(__name__)

DEFAULT_MAX_INSERT_ATTEMPTS = 3


@dataclass(frozen=True)
class ShortenResult:
    short_code: str
    original_url: str


class ShortenService:
    """Resolve a normalized URL to its short code, creating the mapping on first sight.

    Order of resolution: cache, store, then generate-and-insert. The URL is
    trusted to be absolute and syntactically valid.
    """

    def __init__(
        self,
        store: MappingRepository,
        cache: URLCache,
        generator: Optional[ShortCodeGenerator] = None,
        max_insert_attempts: int = DEFAULT_MAX_INSERT_ATTEMPTS,
    ):
        self.store = store
        self.cache = cache
        self.generator = generator or ShortCodeGenerator(store)
        self.max_insert_attempts = max_insert_attempts

    def shorten(self, original_url: str) -> ShortenResult:
        cached_code = self._check_cache(original_url)
        if cached_code:
            logger.info(f"Shorten cache HIT for {original_url[:50]} -> {cached_code}")
            return ShortenResult(short_code=cached_code, original_url=original_url)

        existing = self.store.find_by_original_url(original_url)
        if existing:
            logger.info(f"Shorten cache MISS/DB HIT for {original_url[:50]} -> {existing.short_code}")
            cache_mapping(self.cache, existing.short_code, existing.original_url)
            return ShortenResult(short_code=existing.short_code, original_url=existing.original_url)

        mapping = self._create(original_url)
        cache_mapping(self.cache, mapping.short_code, mapping.original_url)
        return ShortenResult(short_code=mapping.short_code, original_url=mapping.original_url)

    def _check_cache(self, original_url: str) -> Optional[str]:
        try:
            return self.cache.get(url_key(original_url))
        except CacheUnavailableError as e:
            logger.warning(f"Cache lookup failed for {original_url[:50]}, falling back to store: {e}")
            return None

    def _create(self, original_url: str) -> UrlMapping:
        for attempt in range(1, self.max_insert_attempts + 1):
            short_code = self.generator.generate(original_url)
            mapping = UrlMapping(original_url=original_url, short_code=short_code, created_at=utcnow())
            try:
                created = self.store.insert(mapping)
            except StoreConflictError:
                # A concurrent writer won the race: its row is now authoritative
                winner = self.store.find_by_original_url(original_url)
                if winner:
                    logger.info(
                        f"Concurrent insert for {original_url[:50]}, using existing code {winner.short_code}"
                    )
                    return winner
                logger.info(
                    f"Short code {short_code} taken by a concurrent insert, "
                    f"attempt {attempt}/{self.max_insert_attempts}"
                )
                continue

            logger.info(f"Created short code {created.short_code} for {original_url[:50]}")
            return created

        raise GenerationExhaustedError(
            f"Failed to persist a unique short code after {self.max_insert_attempts} attempts"
        )
