"""
Yahoo Finance market data provider.

Quotes come from yfinance ticker info: currentPrice (or regularMarketPrice)
as the last price and previousClose (or regularMarketPreviousClose) as the
previous close. Lookups run on a worker thread with a timeout so a hung
request cannot stall an order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

import yfinance as yf

from portfolio_ledger.core.timezone import now_eastern
from portfolio_ledger.domain.views import Quote

CENT = Decimal("0.01")

DEFAULT_FETCH_TIMEOUT_SECONDS = 10


def _to_price(value: object) -> Optional[Decimal]:
    """Positive price rounded to cents, or None."""
    if value is None:
        return None
    try:
        price = Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        return None
    return price if price > 0 else None


class YahooFinanceProvider:
    """
    Live quotes from Yahoo Finance.

    Symbols Yahoo cannot price are omitted. A fetch that exceeds the timeout
    raises concurrent.futures.TimeoutError, which MarketDataService treats
    like any other provider failure.
    """

    def __init__(
        self,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        self._fetch_timeout = fetch_timeout_seconds
        self._logger = logger or logging.getLogger(__name__)

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """Return quotes for the requested symbols."""
        symbols = [s.strip().upper() for s in symbols if s and s.strip()]
        if not symbols:
            return {}

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._fetch, symbols)
            return future.result(timeout=self._fetch_timeout)
        finally:
            executor.shutdown(wait=False)

    def _fetch(self, symbols: list[str]) -> dict[str, Quote]:
        tickers = yf.Tickers(" ".join(symbols))
        as_of = now_eastern()
        result: dict[str, Quote] = {}
        for symbol in symbols:
            quote = self._quote_for(symbol, tickers, as_of)
            if quote is not None:
                result[symbol] = quote
        self._logger.debug("Fetched %d of %d quotes from Yahoo", len(result), len(symbols))
        return result

    def _quote_for(self, symbol: str, tickers, as_of: datetime) -> Optional[Quote]:
        ticker = tickers.tickers.get(symbol)
        if ticker is None:
            return None
        try:
            info = ticker.info
        except Exception as exc:
            self._logger.warning("Yahoo lookup failed for %s: %s", symbol, exc)
            return None
        if not isinstance(info, dict):
            return None

        last_price = _to_price(info.get("currentPrice")) or _to_price(info.get("regularMarketPrice"))
        if last_price is None:
            return None
        prev_close = (
            _to_price(info.get("previousClose"))
            or _to_price(info.get("regularMarketPreviousClose"))
            or last_price
        )
        return Quote(symbol=symbol, last_price=last_price, prev_close=prev_close, as_of=as_of)
