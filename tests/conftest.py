"""Shared fixtures: a throwaway sqlite database per test, seeded users and a listing,
an offline gateway with a known secret and an HTTP client bound to the app."""

import os

# Settings are read at import time
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAYMENT_GATEWAY"] = "manual"
os.environ["RAZORPAY_KEY_SECRET"] = "test-gateway-secret"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"

import uuid
from collections.abc import Callable
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.core.security import create_access_token
from app.database import Base, get_db
from app.gateways.manual import ManualGateway
from app.main import app as fastapi_app
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.user import User
from app.services.booking_service import BookingService
from app.services.gateway_service import GatewayService, get_gateway_service
from app.services.notification_service import NotificationService
from app.services.receipt_service import ReceiptService, get_receipt_service

GATEWAY_SECRET = "test-gateway-secret"


@pytest.fixture
async def engine(tmp_path):
    # File-backed so concurrent sessions see each other's commits
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


# ==================== COLLABORATORS ====================


@pytest.fixture
def gateway() -> ManualGateway:
    return ManualGateway(key_secret=GATEWAY_SECRET)


@pytest.fixture
def gateway_service(gateway) -> GatewayService:
    return GatewayService(gateway)


@pytest.fixture
def receipts(tmp_path) -> ReceiptService:
    return ReceiptService(receipts_dir=tmp_path / "receipts")


@pytest.fixture
def notifications() -> NotificationService:
    return NotificationService()


@pytest.fixture
def booking_service(gateway_service, receipts, notifications) -> BookingService:
    return BookingService(gateway=gateway_service, receipts=receipts, notifications=notifications)


@pytest.fixture
def signed_payment(gateway) -> Callable[..., tuple[str, str, str]]:
    """Factory for (order_id, payment_id, signature) as a checkout would return them."""

    def _sign(order_id: str | None = None, payment_id: str | None = None) -> tuple[str, str, str]:
        order_id = order_id or f"order_{uuid.uuid4().hex[:14]}"
        payment_id = payment_id or f"pay_{uuid.uuid4().hex[:14]}"
        return order_id, payment_id, gateway.generate_signature(order_id, payment_id)

    return _sign


# ==================== DATA ====================


async def _add(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


@pytest.fixture
async def owner(db) -> User:
    return await _add(db, User(email="host@example.com", username="Priya Host"))


@pytest.fixture
async def guest(db) -> User:
    return await _add(db, User(email="guest@example.com", username="Arjun Guest"))


@pytest.fixture
async def other_user(db) -> User:
    return await _add(db, User(email="other@example.com", username="Someone Else"))


@pytest.fixture
async def listing(db, owner) -> Listing:
    return await _add(
        db,
        Listing(owner_id=owner.id, title="Sea View Villa", location="Goa", country="India", price=1000),
    )


@pytest.fixture
def make_booking(db) -> Callable:
    """Insert a booking row directly, bypassing payment."""

    async def _make(
        listing: Listing,
        user: User,
        check_in: date,
        check_out: date,
        status: str = "Confirmed",
    ) -> Booking:
        return await _add(
            db,
            Booking(
                listing_id=listing.id,
                user_id=user.id,
                check_in=check_in,
                check_out=check_out,
                guests=2,
                payment_id=f"pay_{uuid.uuid4().hex[:14]}",
                order_id=f"order_{uuid.uuid4().hex[:14]}",
                status=status,
            ),
        )

    return _make


# ==================== HTTP ====================


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}

    return _headers


@pytest.fixture
async def client(session_maker, gateway_service, receipts):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_gateway_service] = lambda: gateway_service
    fastapi_app.dependency_overrides[get_receipt_service] = lambda: receipts

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
