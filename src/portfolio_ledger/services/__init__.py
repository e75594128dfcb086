"""Service layer - business logic orchestration."""

from portfolio_ledger.services.portfolio_engine import PortfolioEngine
from portfolio_ledger.services.market_data_service import MarketDataService
from portfolio_ledger.services.ledger_service import LedgerService
from portfolio_ledger.services.analysis_service import AnalysisService

__all__ = [
    "PortfolioEngine",
    "MarketDataService",
    "LedgerService",
    "AnalysisService",
]
