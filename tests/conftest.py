"""
Shared fixtures: an in-memory SQLite store, an ASGI test client wired to
it, and small factories for identities, profiles and skills.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.database import create_tables, get_db
from app.main import app
from app.models.profile import Profile, YearOfStudyEnum
from app.models.skill import Skill
from app.models.user import User
from app.models.user_skill import UserSkill
from app.routers.auth import COOKIE_KEY, create_access_token


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


def login(client: AsyncClient, user: User) -> None:
    """Sign ``client`` in as ``user`` by setting the session cookie."""
    client.cookies.set(COOKIE_KEY, create_access_token({"sub": str(user.id)}))


@pytest.fixture
def make_user(session_factory):
    async def _make(email="alice@example.com", display_name="Alice Builder"):
        async with session_factory() as session:
            user = User(email=email, display_name=display_name)
            session.add(user)
            await session.commit()
            return user
    return _make


@pytest.fixture
def make_skill(session_factory):
    async def _make(name, category="Programming"):
        async with session_factory() as session:
            skill = Skill(name=name, category=category)
            session.add(skill)
            await session.commit()
            return skill
    return _make


@pytest.fixture
def make_profile(session_factory):
    async def _make(user, skills=(), **overrides):
        fields = {
            "full_name": user.display_name or "Test Student",
            "department": "Computer Science",
            "year_of_study": YearOfStudyEnum.THIRD,
            "email": user.email,
        }
        fields.update(overrides)
        async with session_factory() as session:
            profile = Profile(id=user.id, **fields)
            session.add(profile)
            await session.flush()
            session.add_all([UserSkill(user_id=user.id, skill_id=s.id) for s in skills])
            await session.commit()
            return profile
    return _make


@pytest.fixture
def fetch(session_factory):
    """Run a one-off query in a fresh session and return ``scalars().all()``."""
    async def _fetch(statement):
        async with session_factory() as session:
            result = await session.execute(statement)
            return result.scalars().all()
    return _fetch
