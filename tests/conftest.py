"""
Pytest configuration and fixtures.

The app is pointed at a throw-away SQLite file before anything under
``app`` is imported; the schema is created and dropped around every test.
"""
import itertools
import os
import tempfile
from datetime import datetime, timezone

_DB_DIR = tempfile.mkdtemp(prefix="ideaji-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["DEBUG"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SMTP_USERNAME"] = ""

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from app.database import Base, build_engine, create_all, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.idea import Idea, IdeaStatus  # noqa: E402
from app.models.user import RoleEnum, User  # noqa: E402
from app.routers.auth import create_access_token  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    eng = build_engine(os.environ["DATABASE_URL"])
    await create_all(eng)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client bound to the ASGI app, sharing the test database."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_user(db):
    counter = itertools.count(1)

    async def _make(
        name=None,
        points=0,
        role=RoleEnum.USER,
        verified=True,
        password="password123",
        email=None,
    ):
        n = next(counter)
        user = User(
            email=email or f"user{n}@example.com",
            name=name or f"User {n}",
            role=role,
            points=points,
            email_verified_at=datetime.now(timezone.utc) if verified else None,
        )
        user.set_password(password)
        db.add(user)
        await db.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def make_idea(db):
    async def _make(owner, title="Smart Compost Bin", **fields):
        values = {
            "description": "A bin that tells you when compost is ready.",
            "problem": "Home composting is slow and easy to get wrong.",
            "solution": "Sensors track moisture and temperature.",
            "status": IdeaStatus.PUBLISHED,
            "is_anonymous": False,
        }
        values.update(fields)
        idea = Idea(user_id=owner.id, title=title, **values)
        db.add(idea)
        await db.commit()
        return idea

    return _make


@pytest.fixture
def auth_headers():
    """Build a Bearer header for ``user``."""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}

    return _headers
