import logging
from typing import Optional

import redis
import redis.exceptions

from urlshortener.core.config import THIRTY_DAYS_SECONDS
from urlshortener.core.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)

URL_KEY_PREFIX = "url:"


def url_key(original_url: str) -> str:
    return f"{URL_KEY_PREFIX}{original_url}"


class URLCache:
    """Redis-backed cache holding both directions of every mapping.

    Keys:
        <short_code>          -> original URL
        url:<original_url>    -> short code

    Any Redis failure surfaces as CacheUnavailableError; this class never
    decides for the caller whether to carry on.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int = THIRTY_DAYS_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Cache read failed for {key[:60]}") from e

        if value is None:
            return None
        return value.decode() if isinstance(value, (bytes, bytearray)) else str(value)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            self.client.setex(key, ttl or self.ttl_seconds, value)
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Cache write failed for {key[:60]}") from e

    def put_mapping(self, short_code: str, original_url: str, ttl: Optional[int] = None) -> None:
        ttl = ttl or self.ttl_seconds
        try:
            with self.client.pipeline(transaction=False) as pipe:
                pipe.setex(short_code, ttl, original_url)
                pipe.setex(url_key(original_url), ttl, short_code)
                pipe.execute()
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f"Failed to cache {short_code}") from e
        logger.debug(f"Cached {short_code} <-> {original_url[:50]}")


def cache_mapping(cache: URLCache, short_code: str, original_url: str) -> None:
    """Write both cache directions; a cache outage is logged and otherwise ignored."""
    try:
        cache.put_mapping(short_code, original_url)
    except CacheUnavailableError as e:
        logger.warning(f"Failed to cache {short_code}, Redis unavailable: {e}")
