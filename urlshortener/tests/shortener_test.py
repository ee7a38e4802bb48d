from unittest.mock import MagicMock

import pytest

from urlshortener.core.exceptions import GenerationExhaustedError
from urlshortener.db.models import UrlMapping
from urlshortener.db.repository import MappingRepository
from urlshortener.services.cache import url_key
from urlshortener.services.generator import ShortCodeGenerator
from urlshortener.services.shortener import ShortenService
from urlshortener.utils.encoding import is_valid_short_code


class StaleReadRepository(MappingRepository):
    """Misses the first N lookups by URL, as if another writer committed just after them."""

    def __init__(self, db, stale_reads=1):
        super().__init__(db)
        self.stale_reads = stale_reads

    def find_by_original_url(self, original_url):
        if self.stale_reads > 0:
            self.stale_reads -= 1
            return None
        return super().find_by_original_url(original_url)


class SequenceGenerator:
    """Hands out a fixed list of codes, ignoring the store."""

    def __init__(self, codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self, normalized_url):
        self.calls += 1
        return self.codes.pop(0)


def test_shorten_new_url(shorten_service, store, fake_redis):
    """A new URL gets a fresh code, persisted and cached both ways."""
    url = "https://example.com/a"
    result = shorten_service.shorten(url)

    assert is_valid_short_code(result.short_code)
    assert result.original_url == url
    assert store.find_by_short_code(result.short_code).original_url == url
    assert fake_redis.data[result.short_code] == url
    assert fake_redis.data[url_key(url)] == result.short_code


def test_shorten_is_idempotent(shorten_service, store):
    """Same URL always maps to the same code, with a single row."""
    url = "https://example.com/idempotent"
    first = shorten_service.shorten(url)
    second = shorten_service.shorten(url)

    assert first.short_code == second.short_code
    assert store.db.query(UrlMapping).count() == 1


def test_shorten_idempotent_without_cache(shorten_service, fake_redis):
    """Store lookup alone preserves idempotence when the cache is empty."""
    url = "https://example.com/a"
    first = shorten_service.shorten(url)
    fake_redis.flushall()

    assert shorten_service.shorten(url).short_code == first.short_code


def test_shorten_distinct_urls_get_distinct_codes(shorten_service, sample_urls):
    codes = {shorten_service.shorten(url).short_code for url in sample_urls}
    assert len(codes) == len(sample_urls)


def test_shorten_cache_hit_skips_store(cache, fake_redis):
    """A url: key in the cache answers without touching the store."""
    fake_redis.data[url_key("https://example.com/a")] = "cached01"
    store = MagicMock(spec=MappingRepository)

    result = ShortenService(store, cache, ShortCodeGenerator(store)).shorten("https://example.com/a")

    assert result.short_code == "cached01"
    store.find_by_original_url.assert_not_called()
    store.insert.assert_not_called()


def test_shorten_store_hit_repairs_cache(shorten_service, store, fake_redis):
    """Existing row with a cold cache: return it and refill both keys."""
    url = "https://example.com/a"
    store.insert(UrlMapping(original_url=url, short_code="exist001"))

    result = shorten_service.shorten(url)

    assert result.short_code == "exist001"
    assert fake_redis.data["exist001"] == url
    assert fake_redis.data[url_key(url)] == "exist001"


def test_shorten_works_when_cache_is_down(shorten_service, store, fake_redis):
    """Redis outage degrades to store-only operation."""
    fake_redis.down = True
    url = "https://example.com/a"

    first = shorten_service.shorten(url)
    second = shorten_service.shorten(url)

    assert first.short_code == second.short_code
    assert store.find_by_short_code(first.short_code) is not None
    assert fake_redis.data == {}


def test_shorten_conflict_returns_winner(db_session, cache, fake_redis):
    """Losing the insert race for a URL returns the winner's code."""
    url = "https://example.com/race"
    MappingRepository(db_session).insert(UrlMapping(original_url=url, short_code="winner01"))

    store = StaleReadRepository(db_session)
    result = ShortenService(store, cache, ShortCodeGenerator(store)).shorten(url)

    assert result.short_code == "winner01"
    assert db_session.query(UrlMapping).count() == 1
    assert fake_redis.data[url_key(url)] == "winner01"


def test_shorten_retries_after_short_code_conflict(store, cache):
    """A short code taken between check and insert costs one more attempt."""
    store.insert(UrlMapping(original_url="https://example.com/other", short_code="taken001"))
    generator = SequenceGenerator(["taken001", "fresh001"])

    result = ShortenService(store, cache, generator).shorten("https://example.com/a")

    assert result.short_code == "fresh001"
    assert generator.calls == 2


def test_shorten_insert_attempts_are_bounded(store, cache):
    """Every insert colliding on short code ends in GenerationExhaustedError."""
    store.insert(UrlMapping(original_url="https://example.com/other", short_code="taken001"))
    generator = SequenceGenerator(["taken001"] * 5)

    with pytest.raises(GenerationExhaustedError):
        ShortenService(store, cache, generator, max_insert_attempts=3).shorten("https://example.com/a")

    assert generator.calls == 3
    assert store.find_by_original_url("https://example.com/a") is None


def test_shorten_generation_exhausted_propagates(cache):
    """Generator exhaustion surfaces unchanged and nothing is inserted."""
    store = MagicMock(spec=MappingRepository)
    store.find_by_original_url.return_value = None
    store.exists_by_short_code.return_value = True

    with pytest.raises(GenerationExhaustedError):
        ShortenService(store, cache, ShortCodeGenerator(store, max_attempts=5)).shorten("https://example.com/a")

    assert store.exists_by_short_code.call_count == 5
    store.insert.assert_not_called()
