"""
Pytest configuration and fixtures for portfolio ledger tests.

This module provides:
- In-memory SQLite database fixtures
- Factory helpers for portfolios, positions and trades
- Deterministic stub market data providers
- Time helpers for Eastern timezone
- Service and repository fixtures
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from portfolio_ledger.main import app
from portfolio_ledger.api.deps import (
    get_app_settings,
    get_market_data_service,
    reset_market_data_service,
)
from portfolio_ledger.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from portfolio_ledger.repositories.sqlalchemy import orm_models  # noqa: F401
from portfolio_ledger.repositories.sqlalchemy import (
    SqlAlchemyPortfolioRepository,
    SqlAlchemyPositionRepository,
    SqlAlchemyTradeRepository,
    SqlAlchemyUnitOfWork,
)
from portfolio_ledger.services import (
    LedgerService,
    PortfolioEngine,
    MarketDataService,
    AnalysisService,
)
from portfolio_ledger.domain.models import (
    Portfolio,
    Position,
    Trade,
    TradeSide,
    OrderType,
)
from portfolio_ledger.domain.views import Quote
from portfolio_ledger.core.timezone import EASTERN_TZ
from portfolio_ledger.config.settings import Settings, reset_settings, set_settings


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return eastern_datetime(2024, 6, 15, 14, 30, 0)


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with an in-memory database and default trading rules."""
    return Settings(database_url="sqlite://")


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


@pytest.fixture
def file_session_factory(tmp_path) -> sessionmaker:
    """
    Session factory over a file-backed SQLite database.

    Separate sessions get separate connections, which in-memory StaticPool
    databases cannot provide.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_repo(test_session) -> SqlAlchemyPortfolioRepository:
    """Provide test PortfolioRepository."""
    return SqlAlchemyPortfolioRepository(test_session)


@pytest.fixture
def position_repo(test_session) -> SqlAlchemyPositionRepository:
    """Provide test PositionRepository."""
    return SqlAlchemyPositionRepository(test_session)


@pytest.fixture
def trade_repo(test_session) -> SqlAlchemyTradeRepository:
    """Provide test TradeRepository."""
    return SqlAlchemyTradeRepository(test_session)


@pytest.fixture
def uow_factory(test_session) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Provide a unit-of-work factory bound to the test session."""
    return lambda: SqlAlchemyUnitOfWork(test_session)


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class DeterministicMarketProvider:
    """
    Deterministic market data provider for testing.

    Provides fixed quotes with no randomness.
    """

    FIXED_QUOTES = {
        "AAPL": (Decimal("185.50"), Decimal("184.25")),  # +1.25 / +0.68%
        "GOOGL": (Decimal("142.75"), Decimal("141.50")),  # +1.25 / +0.88%
        "MSFT": (Decimal("378.25"), Decimal("376.80")),  # +1.45 / +0.38%
        "TSLA": (Decimal("248.75"), Decimal("250.10")),  # -1.35 / -0.54% (down)
        "SPY": (Decimal("485.25"), Decimal("484.10")),  # +1.15 / +0.24%
    }

    def __init__(self, as_of: Optional[datetime] = None):
        self._as_of = as_of or eastern_datetime(2024, 6, 15, 16, 0, 0)
        self.calls = 0

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """Return deterministic quotes for requested symbols."""
        self.calls += 1
        result = {}
        for symbol in symbols:
            upper_symbol = symbol.upper()
            if upper_symbol in self.FIXED_QUOTES:
                last_price, prev_close = self.FIXED_QUOTES[upper_symbol]
                result[upper_symbol] = Quote(
                    symbol=upper_symbol,
                    last_price=last_price,
                    prev_close=prev_close,
                    as_of=self._as_of,
                )
        return result


class FailingMarketProvider:
    """Market provider that always raises an exception."""

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider(fixed_now) -> DeterministicMarketProvider:
    """Provide deterministic market data provider."""
    return DeterministicMarketProvider(as_of=fixed_now)


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    """Provide a market provider that always fails."""
    return FailingMarketProvider()


@pytest.fixture
def market_data_service(deterministic_provider) -> MarketDataService:
    """Provide test MarketDataService with deterministic provider."""
    return MarketDataService(
        provider=deterministic_provider,
        cache_ttl_seconds=60,
    )


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_engine() -> PortfolioEngine:
    """Provide PortfolioEngine with the default fee schedule."""
    return PortfolioEngine()


@pytest.fixture
def ledger_service(
    portfolio_repo,
    position_repo,
    trade_repo,
    uow_factory,
    portfolio_engine,
    test_settings,
    market_data_service,
) -> LedgerService:
    """Provide test LedgerService."""
    return LedgerService(
        portfolio_repo=portfolio_repo,
        position_repo=position_repo,
        trade_repo=trade_repo,
        uow_factory=uow_factory,
        engine=portfolio_engine,
        settings=test_settings,
        market_data=market_data_service,
    )


@pytest.fixture
def analysis_service(ledger_service, market_data_service, portfolio_engine) -> AnalysisService:
    """Provide test AnalysisService."""
    return AnalysisService(
        ledger_service=ledger_service,
        market_data_service=market_data_service,
        portfolio_engine=portfolio_engine,
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def portfolio_factory(ledger_service) -> Callable[..., Portfolio]:
    """Factory for creating persisted test portfolios."""

    def _create_portfolio(
        user_id: int = 1,
        cash: Decimal = Decimal("100000"),
        name: Optional[str] = None,
    ) -> Portfolio:
        return ledger_service.create_portfolio(user_id=user_id, initial_cash=cash, name=name)

    return _create_portfolio


@pytest.fixture
def sample_portfolio(portfolio_factory) -> Portfolio:
    """A persisted portfolio with $100,000 cash."""
    return portfolio_factory()


@pytest.fixture
def sample_portfolio_with_positions(sample_portfolio, ledger_service) -> Portfolio:
    """
    A persisted portfolio holding 10 AAPL @ $150 and 5 MSFT @ $350.

    Cash afterwards: 100000 − 1501.50 − 1751.75 = 96746.75
    """
    ledger_service.execute_trade(
        sample_portfolio.portfolio_id,
        make_trade("AAPL", TradeSide.BUY, 10),
        Decimal("150"),
    )
    ledger_service.execute_trade(
        sample_portfolio.portfolio_id,
        make_trade("MSFT", TradeSide.BUY, 5),
        Decimal("350"),
    )
    return ledger_service.get_portfolio(sample_portfolio.portfolio_id)


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, test_settings, market_data_service) -> TestClient:
    """Provide FastAPI test client with test database and deterministic prices."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    # Startup creates tables through the module-level engine; point it at memory
    reset_database()
    set_settings(test_settings)
    reset_market_data_service()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = lambda: test_settings
    app.dependency_overrides[get_market_data_service] = lambda: market_data_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()
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
    diff = abs(Decimal(actual) - Decimal(expected))
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


def make_trade(
    symbol: str,
    side,
    quantity: int,
    order_type: OrderType = OrderType.MARKET,
    portfolio_id: int = 0,
    user_id: int = 0,
) -> Trade:
    """Helper to build a pending trade; execution fills in ids and price."""
    return Trade(
        portfolio_id=portfolio_id,
        user_id=user_id,
        symbol=symbol,
        quantity=quantity,
        side=side,
        order_type=order_type,
    )


def make_portfolio(
    cash: Decimal,
    positions: Optional[list[tuple[str, int, Decimal]]] = None,
    user_id: int = 1,
) -> Portfolio:
    """Helper to build an in-memory portfolio from (symbol, quantity, entry) tuples."""
    portfolio = Portfolio(user_id=user_id, cash=Decimal(cash), portfolio_id=1)
    for symbol, quantity, entry in positions or []:
        portfolio.positions.append(
            Position(
                portfolio_id=1,
                user_id=user_id,
                symbol=symbol,
                quantity=quantity,
                entry_price=Decimal(entry),
                current_price=Decimal(entry),
            )
        )
    return portfolio
