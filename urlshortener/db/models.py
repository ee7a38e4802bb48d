from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UrlMapping(Base):
    __tablename__ = "url_mappings"

    # Surrogate key, never exposed
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Both columns are unique: together they form the url <-> code bijection
    original_url = Column(String, unique=True, index=True, nullable=False)
    short_code = Column(String(16), unique=True, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<UrlMapping {self.short_code} -> {self.original_url[:50]}>"
