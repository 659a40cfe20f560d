"""
Pytest configuration and fixtures for portfolio service tests.

This module provides:
- In-memory SQLite database fixtures
- Manually advanced clocks (wall clock and monotonic)
- Deterministic, failing and controllable upstream providers
- In-memory snapshot store for threaded tests
- Service and repository fixtures
- FastAPI test client with dependency overrides
"""

import threading
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from piefolio.main import app
from piefolio.api import deps
from piefolio.config.settings import Settings, set_settings, reset_settings
from piefolio.core.concurrency import SingleFlight
from piefolio.core.exceptions import UpstreamError
from piefolio.core.timezone import UTC
from piefolio.repositories.sqlalchemy.database import Base, get_db
# Import ORM models to register them with Base before creating tables
from piefolio.repositories.sqlalchemy import orm_models  # noqa: F401
from piefolio.repositories.sqlalchemy import (
    SqlAlchemySnapshotRepository,
    SqlAlchemyUserSettingsRepository,
    SqlAlchemyAllocationTargetRepository,
)
from piefolio.repositories.protocols import StoredSnapshot
from piefolio.providers.stub_provider import StubPortfolioProvider
from piefolio.services import (
    AllocationAnalyzer,
    AllocationService,
    PortfolioCache,
    PortfolioFetcher,
    PortfolioService,
    RateLimiter,
    SettingsService,
)
from piefolio.domain.models import (
    DepositInfo,
    InstrumentPosition,
    InstrumentType,
    OverallSummary,
    Pie,
    PortfolioSnapshot,
    UserSettings,
)


# =============================================================================
# CLOCKS
# =============================================================================


def utc_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in UTC."""
    return UTC.localize(datetime(year, month, day, hour, minute, second))


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FakeMonotonic:
    """Monotonic seconds counter for the rate limiter."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return utc_datetime(2025, 3, 1, 17, 12, 57)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def monotonic() -> FakeMonotonic:
    return FakeMonotonic()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def snapshot_repo(test_session) -> SqlAlchemySnapshotRepository:
    """Provide test SnapshotRepository."""
    return SqlAlchemySnapshotRepository(test_session)


@pytest.fixture
def settings_repo(test_session) -> SqlAlchemyUserSettingsRepository:
    """Provide test UserSettingsRepository."""
    return SqlAlchemyUserSettingsRepository(test_session)


@pytest.fixture
def allocation_repo(test_session) -> SqlAlchemyAllocationTargetRepository:
    """Provide test AllocationTargetRepository."""
    return SqlAlchemyAllocationTargetRepository(test_session)


class InMemorySnapshotRepository:
    """Thread-safe dict-backed SnapshotRepository for concurrency tests."""

    def __init__(self) -> None:
        self._rows: dict[str, StoredSnapshot] = {}
        self._guard = threading.Lock()
        self.upserts = 0

    def get(self, user_id: str) -> Optional[StoredSnapshot]:
        with self._guard:
            return self._rows.get(user_id)

    def upsert(self, user_id: str, payload: str, fetched_at: datetime) -> None:
        with self._guard:
            self.upserts += 1
            self._rows[user_id] = StoredSnapshot(user_id=user_id, payload=payload, fetched_at=fetched_at)


class BrokenSnapshotRepository:
    """SnapshotRepository whose reads and/or writes fail like a dead database."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self._inner = InMemorySnapshotRepository()

    def get(self, user_id: str) -> Optional[StoredSnapshot]:
        if self.fail_reads:
            raise SQLAlchemyError("database is locked")
        return self._inner.get(user_id)

    def upsert(self, user_id: str, payload: str, fetched_at: datetime) -> None:
        if self.fail_writes:
            raise SQLAlchemyError("disk I/O error")
        self._inner.upsert(user_id, payload, fetched_at)


@pytest.fixture
def memory_snapshot_repo() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


# =============================================================================
# PROVIDER FIXTURES
# =============================================================================


class FailingPortfolioProvider:
    """Provider that always fails like an unreachable upstream."""

    def __init__(self, status: Optional[int] = 502):
        self.status = status
        self.calls = 0

    def fetch_portfolio(self, country: str, currency: str, budget: Decimal) -> dict[str, Any]:
        self.calls += 1
        raise UpstreamError("upstream unavailable", upstream_status=self.status)


class ControllablePortfolioProvider:
    """
    Stub provider that can be switched into failure or slowed down.

    Set ``error`` to an exception instance to raise it, ``payload`` to
    return a custom document, or ``gate`` to a threading.Event to block each
    call until it is set.
    """

    def __init__(self) -> None:
        self.calls = 0
        self.error: Optional[Exception] = None
        self.payload: Optional[dict[str, Any]] = None
        self.gate: Optional[threading.Event] = None
        self.last_request: Optional[dict[str, Any]] = None
        self._stub = StubPortfolioProvider()
        self._lock = threading.Lock()

    def fetch_portfolio(self, country: str, currency: str, budget: Decimal) -> dict[str, Any]:
        with self._lock:
            self.calls += 1
            self.last_request = {"country": country, "currency": currency, "budget": budget}
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        if self.payload is not None:
            return self.payload
        return self._stub.fetch_portfolio(country, currency, budget)


@pytest.fixture
def stub_provider() -> StubPortfolioProvider:
    return StubPortfolioProvider()


@pytest.fixture
def failing_provider() -> FailingPortfolioProvider:
    return FailingPortfolioProvider()


@pytest.fixture
def controllable_provider() -> ControllablePortfolioProvider:
    return ControllablePortfolioProvider()


# =============================================================================
# DOMAIN FACTORIES
# =============================================================================


@pytest.fixture
def user_settings() -> UserSettings:
    return UserSettings(user_id="user-1", country="BG", currency="BGN", monthly_budget=Decimal("1000"))


def make_instrument(
    ticker: str,
    invested: str,
    current: str,
    dividend_yield: Optional[str] = None,
    instrument_type: InstrumentType = InstrumentType.STOCK,
) -> InstrumentPosition:
    """Build an InstrumentPosition from string amounts."""
    return InstrumentPosition(
        ticker=ticker,
        owned_quantity=Decimal("1"),
        invested_value=Decimal(invested),
        current_value=Decimal(current),
        result_value=Decimal(current) - Decimal(invested),
        instrument_type=instrument_type,
        dividend_yield=Decimal(dividend_yield) if dividend_yield is not None else None,
    )


def make_snapshot(
    pies: dict[str, str],
    user_id: str = "user-1",
    fetched_at: Optional[datetime] = None,
    free_cash: str = "0",
) -> PortfolioSnapshot:
    """Build a snapshot with one instrument per pie, invested == current."""
    pie_list = [
        Pie(
            name=name,
            total_invested=Decimal(amount),
            current_value=Decimal(amount),
            total_result=Decimal("0"),
            return_percentage=Decimal("0"),
            instruments=[make_instrument(f"T{i}", amount, amount)],
        )
        for i, (name, amount) in enumerate(pies.items())
    ]
    total = sum((p.total_invested for p in pie_list), Decimal("0"))
    return PortfolioSnapshot(
        user_id=user_id,
        fetched_at=fetched_at or utc_datetime(2025, 3, 1),
        pies=pie_list,
        overall=OverallSummary(total_invested=total, total_result=Decimal("0"), return_percentage=Decimal("0")),
        deposit_info=DepositInfo(free_cash_available=Decimal(free_cash)),
    )


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_cache(snapshot_repo) -> PortfolioCache:
    return PortfolioCache(repository=snapshot_repo)


@pytest.fixture
def portfolio_fetcher(controllable_provider, portfolio_cache, clock) -> PortfolioFetcher:
    return PortfolioFetcher(provider=controllable_provider, cache=portfolio_cache, clock=clock)


@pytest.fixture
def portfolio_service(portfolio_cache, portfolio_fetcher, clock) -> PortfolioService:
    return PortfolioService(
        cache=portfolio_cache,
        fetcher=portfolio_fetcher,
        single_flight=SingleFlight(),
        clock=clock,
    )


@pytest.fixture
def settings_service(settings_repo) -> SettingsService:
    return SettingsService(settings_repo=settings_repo)


@pytest.fixture
def allocation_service(allocation_repo, portfolio_service, settings_service) -> AllocationService:
    return AllocationService(
        target_repo=allocation_repo,
        portfolio_service=portfolio_service,
        settings_service=settings_service,
        analyzer=AllocationAnalyzer(),
    )


@pytest.fixture
def limiter_factory(monotonic) -> Callable[..., RateLimiter]:
    """Build RateLimiters on the shared fake monotonic clock."""

    def _create(limit: int = 3, window_seconds: float = 60.0, **kwargs) -> RateLimiter:
        return RateLimiter(limit=limit, window_seconds=window_seconds, clock=monotonic, **kwargs)

    return _create


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def api_settings() -> Settings:
    """Settings used by the API client; tests may mutate before requesting client."""
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        api_rate_limit=100,
        auth_rate_limit=10,
    )


@pytest.fixture
def api_limiter(api_settings, monotonic) -> RateLimiter:
    return RateLimiter(
        limit=api_settings.api_rate_limit,
        window_seconds=api_settings.api_rate_window_seconds,
        clock=monotonic,
        name="api",
    )


@pytest.fixture
def auth_limiter(api_settings, monotonic) -> RateLimiter:
    return RateLimiter(
        limit=api_settings.auth_rate_limit,
        window_seconds=api_settings.auth_rate_window_seconds,
        clock=monotonic,
        name="auth",
    )


@pytest.fixture
def client(test_engine, api_settings, controllable_provider, api_limiter, auth_limiter) -> TestClient:
    """Provide FastAPI test client with test database and stub upstream."""
    set_settings(api_settings)
    deps.reset_state()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_portfolio_provider] = lambda: controllable_provider
    app.dependency_overrides[deps.get_api_limiter] = lambda: api_limiter
    app.dependency_overrides[deps.get_auth_limiter] = lambda: auth_limiter
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    deps.reset_state()
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
