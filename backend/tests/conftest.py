"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.core.exceptions import PaymentProcessorError
from backend.app.core.identity import create_id_token
from backend.app.db.session import get_db, Base
from backend.app.models.enums import UserRole
from backend.app.models.user import User
from backend.app.services.payments import get_payment_gateway

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class FakePaymentGateway:
    """Stands in for the payment processor."""

    def __init__(self):
        self.calls = []
        self.fail_with = None

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        self.calls.append(amount_in_cents)
        if self.fail_with:
            raise PaymentProcessorError(self.fail_with)
        return f"pi_test_{amount_in_cents}_secret"


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture(autouse=True)
def apply_overrides(payment_gateway):
    """Route the app to the test database and fake payment gateway."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


def auth_headers(email: str) -> dict:
    """Bearer header carrying a valid ID token for email."""
    return {"Authorization": f"Bearer {create_id_token(email)}"}


@pytest.fixture
def headers_for():
    """Factory building auth headers for any email."""
    return auth_headers


@pytest.fixture
async def admin_headers(db_session):
    """Stored admin user plus headers authenticating as them."""
    db_session.add(User(email="admin@test.com", role=UserRole.ADMIN))
    await db_session.commit()
    return auth_headers("admin@test.com")


@pytest.fixture
def user_headers():
    return auth_headers("shipper@test.com")


@pytest.fixture
async def rider(client):
    """Registered rider; returns its id."""
    response = await client.post("/riders", json={
        "name": "Rider One",
        "email": "rider1@test.com",
        "phone": "01700000000",
        "region": "Dhaka",
        "warehouse": "Mirpur",
        "bike_brand": "Yamaha"
    })
    return response.json()["insertedId"]


@pytest.fixture
async def parcel(client):
    """Unpaid parcel created by shipper@test.com; returns its id."""
    response = await client.post("/parcels", json={
        "title": "Books",
        "parcel_type": "non-document",
        "weight": 2.5,
        "cost": 150,
        "created_by": "shipper@test.com"
    })
    return response.json()["insertedId"]
