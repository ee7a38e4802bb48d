from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
import logging

from urlshortener.core.exceptions import StoreConflictError, StoreUnavailableError
from urlshortener.db.models import UrlMapping

logger = logging.getLogger(__name__)


class MappingRepository:
    """Durable url <-> short code mappings, backed by the url_mappings table.

    The two unique indexes on the table are the only arbiter of concurrent
    inserts; this class never locks and never retries.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_original_url(self, original_url: str) -> Optional[UrlMapping]:
        return self._first(select(UrlMapping).where(UrlMapping.original_url == original_url))

    def find_by_short_code(self, short_code: str) -> Optional[UrlMapping]:
        return self._first(select(UrlMapping).where(UrlMapping.short_code == short_code))

    def exists_by_short_code(self, short_code: str) -> bool:
        stmt = select(UrlMapping.id).where(UrlMapping.short_code == short_code).limit(1)
        try:
            return self.db.execute(stmt).first() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError("Failed to look up short code") from e

    def insert(self, mapping: UrlMapping) -> UrlMapping:
        try:
            self.db.add(mapping)
            self.db.commit()
            self.db.refresh(mapping)
            return mapping
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "IntegrityError creating UrlMapping short_code=%s original=%s",
                mapping.short_code, mapping.original_url[:50]
            )
            raise StoreConflictError(
                f"Mapping for short code '{mapping.short_code}' or its URL already exists"
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Database error creating UrlMapping short_code=%s: %s", mapping.short_code, e)
            raise StoreUnavailableError("Failed to insert mapping") from e

    def _first(self, stmt) -> Optional[UrlMapping]:
        try:
            return self.db.execute(stmt).scalars().first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailableError("Failed to read mapping") from e
