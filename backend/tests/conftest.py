"""
Shared fixtures.

Each test gets its own in-memory SQLite database (aiosqlite, single shared
connection) so tests are isolated and need no external services.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.database import Base, get_db
from app.main import app
from app.models import campaign, creator  # noqa: F401
from app.services.matching import CreatorMatchingService
from app.services.storage import MatchingStorage


# === Database ===

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(db) -> MatchingStorage:
    return MatchingStorage(db)


@pytest.fixture
def matcher(storage) -> CreatorMatchingService:
    return CreatorMatchingService(storage)


# === Seed helpers ===

@pytest.fixture
def make_campaign(storage):
    """Create a campaign, optionally with explicit brand preferences."""

    async def _make(preferences: dict | None = None, **overrides):
        data = {
            "title": "Spring drop",
            "brand_name": "Acme",
            "category": "fashion",
            "compensation": 500,
            "status": "active",
        }
        data.update(overrides)
        campaign = await storage.create_campaign(data)
        if preferences is not None:
            await storage.replace_brand_preferences(campaign.id, preferences)
        return campaign

    return _make


@pytest.fixture
def make_creator(storage):
    """Create a creator and, when given, its profile."""
    counter = {"n": 0}

    async def _make(profile: dict | None = None, **overrides):
        counter["n"] += 1
        data = {
            "username": f"creator{counter['n']}",
            "follower_count": 50_000,
            "tier": "standard",
            "completed_campaigns": 0,
            "role": "creator",
            "is_active": True,
        }
        data.update(overrides)
        creator = await storage.create_creator(data)
        if profile is not None:
            await storage.upsert_creator_profile(creator.id, profile)
        return creator

    return _make


@pytest.fixture
def fashion_preferences() -> dict:
    return {
        "preferred_categories": ["fashion"],
        "required_platforms": ["instagram"],
        "min_follower_count": 1000,
        "max_follower_count": 100_000,
        "preferred_demographics": {},
        "budget_range": {"min": 400, "max": 600},
        "location_preferences": ["any"],
    }


@pytest.fixture
def strong_profile() -> dict:
    return {
        "categories": ["fashion", "lifestyle"],
        "platforms": [{"platform": "instagram", "handle": "@strong"}],
        "engagement_rate": 6.0,
        "is_verified": True,
    }


# === HTTP ===

@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
