"""Market data service for quotes and prices."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_ledger.core.exceptions import PriceUnavailableError
from portfolio_ledger.core.timezone import now_eastern
from portfolio_ledger.domain.views import Quote
from portfolio_ledger.providers.market_data_provider import MarketDataProvider


class MarketDataService:
    """
    Service for fetching market data.

    Wraps provider with caching and graceful degradation.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        cache_ttl_seconds: int = 60,
        logger: Optional[logging.Logger] = None,
    ):
        self._provider = provider
        self._cache_ttl = cache_ttl_seconds
        self._logger = logger or logging.getLogger(__name__)
        self._quote_cache: dict[str, Quote] = {}
        self._fetched_at: dict[str, datetime] = {}

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """
        Fetch quotes for symbols with caching.

        Returns dict mapping symbol -> Quote (last_price, prev_close, as_of).
        Each cached quote is served while younger than the TTL; expired and
        unknown symbols are fetched. Falls back to cache on provider failure.
        """
        if not symbols:
            return {}

        # Normalize symbols
        symbols = [s.upper() for s in symbols]

        now = now_eastern()
        cached_result = {s: self._quote_cache[s] for s in symbols if self._is_fresh(s, now)}
        missing = [s for s in symbols if s not in cached_result]
        if not missing:
            return cached_result

        try:
            new_quotes = self._provider.get_quotes(missing)
        except Exception as exc:
            self._logger.warning(
                "Quote provider failed for %s, serving cached quotes: %s", missing, exc
            )
            cached_result.update(
                {s: self._quote_cache[s] for s in missing if s in self._quote_cache}
            )
        else:
            self._quote_cache.update(new_quotes)
            for symbol in new_quotes:
                self._fetched_at[symbol] = now
            cached_result.update(new_quotes)

        return {s: cached_result[s] for s in symbols if s in cached_result}

    def current_prices(self, symbols: list[str]) -> dict[str, Decimal]:
        """Last prices by symbol; symbols without a quote are omitted."""
        return {s: q.last_price for s, q in self.get_quotes(symbols).items()}

    def previous_close_prices(self, symbols: list[str]) -> dict[str, Decimal]:
        """Previous closing prices by symbol."""
        return {s: q.prev_close for s, q in self.get_quotes(symbols).items()}

    def current_price(self, symbol: str) -> Decimal:
        """Last price of one symbol (raises PriceUnavailableError)."""
        quote = self.get_quotes([symbol]).get(symbol.upper())
        if quote is None or quote.last_price is None:
            raise PriceUnavailableError(symbol.upper())
        return quote.last_price

    def clear_cache(self) -> None:
        """Drop all cached quotes."""
        self._quote_cache.clear()
        self._fetched_at.clear()

    def _is_fresh(self, symbol: str, now: datetime) -> bool:
        """Check if the cached quote for symbol is within TTL."""
        fetched_at = self._fetched_at.get(symbol)
        if fetched_at is None or symbol not in self._quote_cache:
            return False
        return (now - fetched_at).total_seconds() < self._cache_ttl
