"""Shared fixtures: in-memory database, signed tokens and an ASGI client."""

import os
import time

os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("RESEND_API_KEY", "re_test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_TO_FILE", "0")

import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.database import Base, get_db
from app.main import app
from app.middleware.rate_limit import limiter
from app.models.profile import Profile
from app.services.session_state import sessions

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


def make_token(user_id: str, role: str = "student", email: str = None) -> str:
    payload = {
        "sub": user_id,
        "email": email or f"{user_id}@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
        "app_metadata": {"role": role},
        "user_metadata": {"full_name": user_id.replace("-", " ").title()},
    }
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: str, role: str = "student") -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    sessions.clear()
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    sessions.clear()
    limiter.enabled = True


@pytest.fixture
def add_profile(session_factory):
    """Insert a profile directly; returns its id"""

    async def _add(profile_id: str, role: str = "student", **fields) -> str:
        async with session_factory() as session:
            session.add(Profile(
                id=profile_id,
                email=f"{profile_id}@example.com",
                full_name=profile_id.replace("-", " ").title(),
                role=role,
                **fields,
            ))
            await session.commit()
        return profile_id

    return _add


@pytest.fixture
def coach_headers():
    return auth_headers("coach-carol", "coach")


@pytest.fixture
def student_headers():
    return auth_headers("student-sam", "student")
