import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from urlshortener.core.config import settings
from redis.connection import ConnectionPool
import redis
from sqlalchemy import text

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.database_url

if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}, future=True)
else:
    engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True, future=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Every Redis call is a single bounded operation: no retries, short socket timeouts
pool = ConnectionPool(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
    decode_responses=True,
    max_connections=50,
    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_keepalive=True,
)

redis_client = redis.Redis(connection_pool=pool)


def get_redis() -> redis.Redis:
    return redis_client


def verify_redis_connection():
    try:
        redis_client.ping()
        logger.info("Redis connection verified")
        return True
    except redis.exceptions.RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Service will run with degraded performance.")
        return False


def verify_database_connection():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


def dispose():
    try:
        engine.dispose()
    except Exception:
        logger.debug("Error disposing DB engine")
    try:
        redis_client.close()
    except Exception:
        logger.debug("Error closing Redis client")
