"""Shared test fixtures for the RuidCar API tests.

Uses an in-memory SQLite async engine so tests run without PostgreSQL.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["GEMINI_API_KEY"] = ""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db, json_serializer
from app.main import app

# Import all models to ensure they're registered with Base.metadata
from app.models.user import User, UserRole
from app.models.workshop import Workshop
from app.models.notification import Notification  # noqa: F401
from app.models.lead import Lead, LeadInteraction, LeadStatusHistory  # noqa: F401
from app.models.diagnostic import (  # noqa: F401
    AppointmentSlot, AppointmentException, AppointmentSettings, VehiclePricing, DiagnosticServiceConfig,
)
from app.models.appointment import DiagnosticAppointment  # noqa: F401
from app.services.auth import create_access_token, hash_password
from app.services.lead_scoring import RuleBasedLeadScorer, get_lead_scorer


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL, echo=False, poolclass=StaticPool, json_serializer=json_serializer
)
TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with TestSession() as session:
        yield session


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_lead_scorer] = lambda: RuleBasedLeadScorer()


@pytest_asyncio.fixture
async def client():
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db():
    """Direct DB session for test setup/assertions."""
    async with TestSession() as session:
        yield session


async def make_user(db, email, role, name="Test User", password="testpass123", is_active=True) -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=hash_password(password),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest_asyncio.fixture
async def admin_user(db):
    return await make_user(db, "admin@ruidcar.com", UserRole.ADMIN, name="Ana Admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest_asyncio.fixture
async def owner_user(db):
    return await make_user(db, "owner@oficina.com", UserRole.WORKSHOP_OWNER, name="Otávio Oficina")


@pytest_asyncio.fixture
async def workshop(db, owner_user):
    shop = Workshop(name="Oficina Central", city="São Paulo", state="SP", owner_id=owner_user.id)
    db.add(shop)
    await db.commit()
    await db.refresh(shop)
    return shop


@pytest_asyncio.fixture
async def workshop_headers(owner_user, workshop):
    return {**auth_headers(owner_user), "x-workshop-id": str(workshop.id)}


@pytest_asyncio.fixture
async def lead(db):
    row = Lead(
        full_name="Carlos Cliente",
        email="carlos@example.com",
        company="Frota Sul",
        whatsapp="11987654321",
        message="Quero um orçamento para isolamento acústico da frota",
        city="Campinas",
        state="SP",
        lead_score=60,
        interaction_count=0,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row
