from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings

THIRTY_DAYS_SECONDS = 2_592_000  # 60 * 60 * 24 * 30


class Settings(BaseSettings):
    PROJECT_NAME: str = "URL Shortener"

    # Infrastructure Configs (Env Vars)
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "urlshortener"
    # Full SQLAlchemy URL, takes precedence over the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None

    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_SOCKET_TIMEOUT: float = 2.0

    # When unset, short URLs are built from the incoming request's scheme and host
    BASE_URL: Optional[str] = None

    # Resolution engine
    CACHE_TTL_SECONDS: int = THIRTY_DAYS_SECONDS
    # bounded by the short_code column width
    SHORT_CODE_LENGTH: int = Field(8, ge=4, le=16)
    MAX_GENERATION_ATTEMPTS: int = 5
    MAX_INSERT_ATTEMPTS: int = 3

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()
