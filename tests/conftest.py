"""Shared test fixtures."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cropalert.config import Settings
from cropalert.db.base import Base
# Import all models to register with Base.metadata
import cropalert.db.models  # noqa: F401
from cropalert.models.enums import (
    GovernmentUpdateType,
    PriceTrigger,
    Season,
    TipCategory,
    TipImportance,
    WeatherAlertType,
    WeatherSeverity,
)
from cropalert.models.events import ContactInfo, GovernmentUpdate, PriceAlert, SeasonalTip, WeatherAlert
from cropalert.services.engine import build_engine
from cropalert.services.storage import DurableStorage

T0 = datetime(2026, 7, 15, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Virtual clock: ``sleep`` advances time instead of waiting."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)
        await asyncio.sleep(0)

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///",
        simulated_sources_enabled=False,
        scheduler_enabled=False,
        push_permission_response="granted",
    )


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(session_factory):
    return DurableStorage(session_factory)


@pytest.fixture
async def engine(test_settings, session_factory, clock):
    """AlertEngine over in-memory storage, no sources, scheduler stopped."""
    alert_engine = build_engine(test_settings, session_factory, clock=clock)
    await alert_engine.init(start_scheduler=False)
    yield alert_engine
    await alert_engine.shutdown()


@pytest.fixture
def app(db_engine, session_factory, engine):
    """Create a test application instance with in-memory DB."""
    from cropalert.main import create_app

    _app = create_app()
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    _app.state.redis = None
    _app.state.engine = engine
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Domain event factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_weather():
    def _make(event_id: str = "w1", severity: WeatherSeverity = WeatherSeverity.SEVERE, **overrides) -> WeatherAlert:
        fields = dict(
            id=event_id,
            alert_type=WeatherAlertType.STORM,
            severity=severity,
            start_time=T0,
            end_time=T0 + timedelta(hours=24),
            affected_area="Nashik",
            description="Heavy storm expected",
            recommendations=["Secure equipment", "Check drainage"],
        )
        fields.update(overrides)
        return WeatherAlert(**fields)

    return _make


@pytest.fixture
def make_price():
    def _make(event_id: str = "p1", change_percentage: float = 12.0, **overrides) -> PriceAlert:
        fields = dict(
            id=event_id,
            commodity="Onion",
            current_price=2240,
            previous_price=2000,
            change=240 if change_percentage >= 0 else -240,
            change_percentage=change_percentage,
            market_name="Lasalgaon Mandi",
            alert_trigger=PriceTrigger.SUDDEN_SPIKE,
            recommendations=["Consider selling"],
        )
        fields.update(overrides)
        return PriceAlert(**fields)

    return _make


@pytest.fixture
def make_tip():
    def _make(event_id: str = "tip_7_3_0", importance: TipImportance = TipImportance.CRITICAL, **overrides) -> SeasonalTip:
        fields = dict(
            id=event_id,
            season=Season.MONSOON,
            month=7,
            week=3,
            category=TipCategory.IRRIGATION,
            applicable_crops=["Rice", "Cotton"],
            title="Monitor Rainfall and Drainage",
            tip="Ensure proper drainage in fields",
            timing="During monsoon season",
            importance=importance,
        )
        fields.update(overrides)
        return SeasonalTip(**fields)

    return _make


@pytest.fixture
def make_government():
    def _make(event_id: str = "g1", deadline: datetime | None = None, **overrides) -> GovernmentUpdate:
        fields = dict(
            id=event_id,
            scheme="PM-KISAN",
            update_type=GovernmentUpdateType.DEADLINE_REMINDER if deadline else GovernmentUpdateType.PAYMENT_RELEASED,
            title="PM-KISAN: DEADLINE REMINDER",
            description="Complete your KYC verification",
            deadline=deadline,
            contact_info=ContactInfo(office="District Agriculture Office", phone="+91-1800-180-1551"),
        )
        fields.update(overrides)
        return GovernmentUpdate(**fields)

    return _make
