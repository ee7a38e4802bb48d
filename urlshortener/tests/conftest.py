import os

# Point the app at SQLite before anything builds the SQLAlchemy engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from urlshortener.main import app
from urlshortener.db.models import Base
from urlshortener.db import database
from urlshortener.db.repository import MappingRepository
from urlshortener.services.cache import URLCache
from urlshortener.services.expander import ExpandService
from urlshortener.services.generator import ShortCodeGenerator
from urlshortener.services.shortener import ShortenService


# Create in-memory SQLite database for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakePipeline:
    def __init__(self, client):
        self.client = client
        self.ops = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.ops = []
        return False

    def setex(self, key, ttl, value):
        self.ops.append((key, ttl, value))
        return self

    def execute(self):
        self.client._check()
        results = [self.client.setex(*op) for op in self.ops]
        self.ops = []
        return results


class FakeRedis:
    """Dict-backed stand-in for redis.Redis with an outage switch."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.down = False

    def _check(self):
        if self.down:
            raise redis.exceptions.ConnectionError("Redis is down")

    def get(self, key):
        self._check()
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self._check()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def ping(self):
        self._check()
        return True

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    def flushall(self):
        self.data.clear()
        self.ttls.clear()


@pytest.fixture
def db_session():
    """Creates a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(db_session):
    return MappingRepository(db_session)


@pytest.fixture
def cache(fake_redis):
    return URLCache(fake_redis)


@pytest.fixture
def shorten_service(store, cache):
    return ShortenService(store, cache, ShortCodeGenerator(store))


@pytest.fixture
def expand_service(store, cache):
    return ExpandService(store, cache)


@pytest.fixture
def client(db_session, fake_redis):
    """Creates a test client with overridden database and Redis dependencies."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database.get_db] = override_get_db
    app.dependency_overrides[database.get_redis] = lambda: fake_redis
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_urls():
    """Provides sample URLs for testing."""
    return [
        "https://example.com/test1",
        "https://google.com/search?q=test",
        "https://github.com/user/repo",
    ]
