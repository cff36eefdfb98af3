"""Shared test fixtures for the travel planning API."""

import os
import time
from datetime import datetime, timedelta

# Settings are read at import time, so the environment comes first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./unused.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["SMTP_HOST"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""
os.environ["COOKIE_SECURE"] = "false"
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "true"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from travelplan.main import app
from travelplan.core.cache import RedisCache
from travelplan.core.database import Base, get_db
from travelplan.core.redis_lifecycle import get_redis_client, get_cache
from travelplan.core.security import hash_password
from travelplan.models.user.user import User
from travelplan.services import email_service
import travelplan.models  # noqa: F401


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the app makes."""

    def __init__(self):
        self.values = {}
        self.hashes = {}
        self.zsets = {}
        self.expiry = {}

    def _alive(self, key):
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= time.time():
            for store in (self.values, self.hashes, self.zsets, self.expiry):
                store.pop(key, None)
        return key in self.values or key in self.hashes or key in self.zsets

    async def ping(self):
        return True

    async def get(self, key):
        return self.values.get(key) if self._alive(key) else None

    async def set(self, key, value, ex=None):
        self.values[key] = value
        if ex:
            self.expiry[key] = time.time() + ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self._alive(key):
                removed += 1
            for store in (self.values, self.hashes, self.zsets, self.expiry):
                store.pop(key, None)
        return removed

    async def exists(self, key):
        return 1 if self._alive(key) else 0

    async def expire(self, key, seconds):
        self.expiry[key] = time.time() + seconds
        return True

    async def hset(self, key, mapping=None):
        self.hashes.setdefault(key, {}).update(mapping or {})
        return len(mapping or {})

    async def zadd(self, key, mapping):
        self.zsets.setdefault(key, {}).update(mapping)
        return len(mapping)

    async def zcard(self, key):
        return len(self.zsets.get(key, {})) if self._alive(key) else 0

    async def zrange(self, key, start, end):
        if not self._alive(key):
            return []
        members = [m for m, _ in sorted(self.zsets[key].items(), key=lambda kv: kv[1])]
        end = len(members) - 1 if end == -1 else end
        return members[start:end + 1]

    async def zrem(self, key, *members):
        zset = self.zsets.get(key, {})
        return sum(1 for m in members if zset.pop(m, None) is not None)

    async def close(self):
        pass


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    yield factory

    await engine.dispose()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing mail instead of sending it."""
    outbox = []

    def capture(to_email, subject, html):
        outbox.append({"to": to_email, "subject": subject, "html": html})
        return True

    monkeypatch.setattr(email_service, "send_email_html", capture)
    return outbox


@pytest.fixture
async def client(session_factory, fake_redis, sent_emails):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_redis():
        yield fake_redis

    async def override_cache():
        yield RedisCache(fake_redis)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = override_redis
    app.dependency_overrides[get_cache] = override_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    """Insert a verified local user directly and return its id."""

    async def _make(name="Alice", email=None, password="secret123", verified=True):
        email = email or f"{name.lower()}@example.com"
        async with session_factory() as session:
            user = User(
                name=name,
                email=email,
                hashed_password=hash_password(password),
                auth_type="local",
                email_verified_at=datetime.utcnow() if verified else None,
            )
            session.add(user)
            await session.commit()
            return user.id

    return _make


@pytest.fixture
def login(client):
    """Log a user in and return Authorization headers."""

    async def _login(email, password="secret123"):
        resp = await client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login


@pytest.fixture
async def alice(make_user, login):
    user_id = await make_user("Alice")
    return {"id": user_id, "email": "alice@example.com", "headers": await login("alice@example.com")}


@pytest.fixture
async def bob(make_user, login):
    user_id = await make_user("Bob")
    return {"id": user_id, "email": "bob@example.com", "headers": await login("bob@example.com")}


@pytest.fixture
async def carol(make_user, login):
    user_id = await make_user("Carol")
    return {"id": user_id, "email": "carol@example.com", "headers": await login("carol@example.com")}


@pytest.fixture
def future_iso():
    def _future(hours=24):
        return (datetime.utcnow() + timedelta(hours=hours)).isoformat()
    return _future


