"""Market data provider protocol."""

from typing import Protocol

from portfolio_ledger.domain.views import Quote


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Implementations fetch quotes (last_price, prev_close) for symbols.
    """

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch quotes for multiple symbols.

        Returns dict mapping symbol -> Quote with last_price, prev_close, as_of.
        Missing symbols are omitted from result.
        """
        ...
