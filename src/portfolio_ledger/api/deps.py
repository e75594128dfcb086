"""Dependency injection for FastAPI."""

from typing import Callable, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from portfolio_ledger.config.settings import Settings, get_settings
from portfolio_ledger.repositories.sqlalchemy.database import get_db
from portfolio_ledger.repositories.sqlalchemy import (
    SqlAlchemyPortfolioRepository,
    SqlAlchemyPositionRepository,
    SqlAlchemyTradeRepository,
    SqlAlchemyUnitOfWork,
)
from portfolio_ledger.providers import (
    MarketDataProvider,
    StubMarketDataProvider,
    YahooFinanceProvider,
)
from portfolio_ledger.services import (
    LedgerService,
    PortfolioEngine,
    MarketDataService,
    AnalysisService,
)

# One market data service per process so its quote cache outlives a request
_market_data_service: Optional[MarketDataService] = None


def get_app_settings() -> Settings:
    """Provide the Settings instance."""
    return get_settings()


def get_portfolio_repo(db: Session = Depends(get_db)) -> SqlAlchemyPortfolioRepository:
    """Provide PortfolioRepository instance."""
    return SqlAlchemyPortfolioRepository(db)


def get_position_repo(db: Session = Depends(get_db)) -> SqlAlchemyPositionRepository:
    """Provide PositionRepository instance."""
    return SqlAlchemyPositionRepository(db)


def get_trade_repo(db: Session = Depends(get_db)) -> SqlAlchemyTradeRepository:
    """Provide TradeRepository instance."""
    return SqlAlchemyTradeRepository(db)


def get_uow_factory(db: Session = Depends(get_db)) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Provide a factory for units of work bound to the request session."""
    return lambda: SqlAlchemyUnitOfWork(db)


def get_market_provider(settings: Settings = Depends(get_app_settings)) -> MarketDataProvider:
    """Provide the MarketDataProvider named in settings (stub for offline operation)."""
    if settings.market_data_provider == "yahoo":
        return YahooFinanceProvider(fetch_timeout_seconds=settings.market_data_timeout_seconds)
    return StubMarketDataProvider()


def get_market_data_service(
    provider: MarketDataProvider = Depends(get_market_provider),
    settings: Settings = Depends(get_app_settings),
) -> MarketDataService:
    """Provide MarketDataService instance."""
    global _market_data_service
    if _market_data_service is None:
        _market_data_service = MarketDataService(
            provider=provider,
            cache_ttl_seconds=settings.market_data_cache_ttl_seconds,
        )
    return _market_data_service


def get_portfolio_engine(settings: Settings = Depends(get_app_settings)) -> PortfolioEngine:
    """Provide PortfolioEngine instance."""
    return PortfolioEngine.from_settings(settings)


def get_ledger_service(
    portfolio_repo: SqlAlchemyPortfolioRepository = Depends(get_portfolio_repo),
    position_repo: SqlAlchemyPositionRepository = Depends(get_position_repo),
    trade_repo: SqlAlchemyTradeRepository = Depends(get_trade_repo),
    uow_factory: Callable[[], SqlAlchemyUnitOfWork] = Depends(get_uow_factory),
    engine: PortfolioEngine = Depends(get_portfolio_engine),
    market_data: MarketDataService = Depends(get_market_data_service),
    settings: Settings = Depends(get_app_settings),
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(
        portfolio_repo=portfolio_repo,
        position_repo=position_repo,
        trade_repo=trade_repo,
        uow_factory=uow_factory,
        engine=engine,
        settings=settings,
        market_data=market_data,
    )


def get_analysis_service(
    ledger_service: LedgerService = Depends(get_ledger_service),
    market_data_service: MarketDataService = Depends(get_market_data_service),
    portfolio_engine: PortfolioEngine = Depends(get_portfolio_engine),
) -> AnalysisService:
    """Provide AnalysisService instance."""
    return AnalysisService(
        ledger_service=ledger_service,
        market_data_service=market_data_service,
        portfolio_engine=portfolio_engine,
    )


def reset_market_data_service() -> None:
    """Drop the shared market data service (tests and reconfiguration)."""
    global _market_data_service
    _market_data_service = None
