"""Stub market data provider for offline/testing use."""

import zlib
from decimal import Decimal
from typing import Optional

from portfolio_ledger.core.timezone import now_eastern
from portfolio_ledger.domain.views import Quote


# Deterministic fake prices for common symbols: (last_price, prev_close)
_STUB_PRICES: dict[str, tuple[Decimal, Decimal]] = {
    "AAPL": (Decimal("185.50"), Decimal("184.25")),
    "GOOGL": (Decimal("142.75"), Decimal("141.50")),
    "MSFT": (Decimal("378.25"), Decimal("376.80")),
    "AMZN": (Decimal("178.50"), Decimal("177.25")),
    "TSLA": (Decimal("248.75"), Decimal("250.10")),
    "NVDA": (Decimal("485.25"), Decimal("482.50")),
    "META": (Decimal("505.50"), Decimal("502.75")),
    "SPY": (Decimal("485.25"), Decimal("484.10")),
    "QQQ": (Decimal("418.75"), Decimal("417.50")),
    "VTI": (Decimal("252.30"), Decimal("251.80")),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined prices for common symbols. Unknown symbols get a price
    derived from a checksum of the symbol, so the same symbol always quotes
    the same, or are omitted when generate_unknown is False.
    """

    def __init__(
        self,
        prices: Optional[dict[str, tuple[Decimal, Decimal]]] = None,
        generate_unknown: bool = True,
    ):
        self._prices = dict(_STUB_PRICES if prices is None else prices)
        self._generate_unknown = generate_unknown

    def get_quotes(self, symbols: list[str]) -> dict[str, Quote]:
        """Return stub quotes for requested symbols."""
        as_of = now_eastern()
        result: dict[str, Quote] = {}

        for symbol in symbols:
            upper_symbol = symbol.upper()
            if upper_symbol in self._prices:
                last_price, prev_close = self._prices[upper_symbol]
            elif self._generate_unknown:
                last_price, prev_close = self._derived_prices(upper_symbol)
            else:
                continue

            result[upper_symbol] = Quote(
                symbol=upper_symbol,
                last_price=last_price,
                prev_close=prev_close,
                as_of=as_of,
            )

        return result

    @staticmethod
    def _derived_prices(symbol: str) -> tuple[Decimal, Decimal]:
        checksum = zlib.crc32(symbol.encode("utf-8"))
        last_price = (Decimal(50) + Decimal(checksum % 20000) / 100).quantize(Decimal("0.01"))
        # Previous close within +/-2% of the last price
        change_bp = Decimal((checksum // 20000) % 401 - 200)
        prev_close = (last_price / (1 + change_bp / 10000)).quantize(Decimal("0.01"))
        return last_price, prev_close
