"""Market data providers module."""

from portfolio_ledger.providers.market_data_provider import MarketDataProvider
from portfolio_ledger.providers.stub_provider import StubMarketDataProvider
from portfolio_ledger.providers.yahoo_provider import YahooFinanceProvider

__all__ = [
    "MarketDataProvider",
    "StubMarketDataProvider",
    "YahooFinanceProvider",
]
