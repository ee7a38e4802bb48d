from fastapi import Depends
from sqlalchemy.orm import Session
import redis

from urlshortener.core.config import settings
from urlshortener.db import database
from urlshortener.db.repository import MappingRepository
from urlshortener.services.cache import URLCache
from urlshortener.services.expander import ExpandService
from urlshortener.services.generator import ShortCodeGenerator
from urlshortener.services.shortener import ShortenService


def get_cache(client: redis.Redis = Depends(database.get_redis)) -> URLCache:
    return URLCache(client, ttl_seconds=settings.CACHE_TTL_SECONDS)


def get_shorten_service(
    db: Session = Depends(database.get_db),
    cache: URLCache = Depends(get_cache),
) -> ShortenService:
    store = MappingRepository(db)
    generator = ShortCodeGenerator(
        store,
        max_attempts=settings.MAX_GENERATION_ATTEMPTS,
        length=settings.SHORT_CODE_LENGTH,
    )
    return ShortenService(store, cache, generator, max_insert_attempts=settings.MAX_INSERT_ATTEMPTS)


def get_expand_service(
    db: Session = Depends(database.get_db),
    cache: URLCache = Depends(get_cache),
) -> ExpandService:
    return ExpandService(MappingRepository(db), cache)
