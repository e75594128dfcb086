"""
Unit tests for MarketDataService and the stub provider.

Tests cover:
- Quote retrieval and symbol normalization
- Caching and TTL expiry
- Serving cached quotes when the provider fails
- Price helpers and PriceUnavailableError
- Deterministic stub prices
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

from portfolio_ledger.core.exceptions import PriceUnavailableError
from portfolio_ledger.domain.views import Quote
from portfolio_ledger.providers import StubMarketDataProvider
from portfolio_ledger.services import MarketDataService
from portfolio_ledger.services import market_data_service as market_data_module

from tests.conftest import (
    DeterministicMarketProvider,
    FailingMarketProvider,
    eastern_datetime,
)


def _quote(symbol: str, last: str, prev: str) -> Quote:
    return Quote(
        symbol=symbol,
        last_price=Decimal(last),
        prev_close=Decimal(prev),
        as_of=eastern_datetime(2024, 6, 15, 14, 0, 0),
    )


# =============================================================================
# QUOTE RETRIEVAL TESTS
# =============================================================================


class TestGetQuotes:
    """Tests for basic quote retrieval."""

    def test_known_symbols(self, market_data_service: MarketDataService):
        """
        GIVEN a provider quoting AAPL and MSFT
        WHEN I request "aapl" and "msft"
        THEN both quotes come back keyed by upper-case symbol
        """
        quotes = market_data_service.get_quotes(["aapl", "msft"])

        assert set(quotes) == {"AAPL", "MSFT"}
        assert quotes["AAPL"].last_price == Decimal("185.50")
        assert quotes["AAPL"].prev_close == Decimal("184.25")

    def test_empty_request(self, market_data_service: MarketDataService, deterministic_provider):
        """
        GIVEN no symbols
        WHEN I request quotes
        THEN an empty dict is returned without calling the provider
        """
        assert market_data_service.get_quotes([]) == {}
        assert deterministic_provider.calls == 0

    def test_unknown_symbol_omitted(self, market_data_service: MarketDataService):
        """
        GIVEN a symbol the provider does not quote
        WHEN I request it alongside a known one
        THEN only the known one is returned
        """
        quotes = market_data_service.get_quotes(["AAPL", "ZZZZ"])

        assert list(quotes) == ["AAPL"]


# =============================================================================
# CACHING TESTS
# =============================================================================


class TestCaching:
    """Tests for quote caching."""

    def test_second_request_within_ttl_is_cached(
        self, market_data_service: MarketDataService, deterministic_provider
    ):
        """
        GIVEN AAPL was fetched a moment ago
        WHEN I request it again
        THEN the provider is not called a second time
        """
        market_data_service.get_quotes(["AAPL"])
        market_data_service.get_quotes(["AAPL"])

        assert deterministic_provider.calls == 1

    def test_only_missing_symbols_are_fetched(self):
        """
        GIVEN AAPL is cached
        WHEN I request AAPL and MSFT
        THEN the provider is asked for MSFT only
        """
        provider = MagicMock()
        provider.get_quotes.side_effect = [
            {"AAPL": _quote("AAPL", "185.50", "184.25")},
            {"MSFT": _quote("MSFT", "378.25", "376.80")},
        ]
        service = MarketDataService(provider=provider, cache_ttl_seconds=60)

        service.get_quotes(["AAPL"])
        quotes = service.get_quotes(["AAPL", "MSFT"])

        assert provider.get_quotes.call_args_list[1].args[0] == ["MSFT"]
        assert set(quotes) == {"AAPL", "MSFT"}

    def test_expired_cache_is_refetched(self):
        """
        GIVEN a cached quote older than the TTL
        WHEN I request it again
        THEN the provider is called again and the new price is served
        """
        provider = MagicMock()
        provider.get_quotes.side_effect = [
            {"AAPL": _quote("AAPL", "185.50", "184.25")},
            {"AAPL": _quote("AAPL", "190.00", "185.50")},
        ]
        service = MarketDataService(provider=provider, cache_ttl_seconds=60)

        service.get_quotes(["AAPL"])
        service._fetched_at["AAPL"] = eastern_datetime(2024, 1, 2, 9, 30, 0)
        quotes = service.get_quotes(["AAPL"])

        assert provider.get_quotes.call_count == 2
        assert quotes["AAPL"].last_price == Decimal("190.00")

    def test_ttl_is_tracked_per_symbol(self, monkeypatch):
        """
        GIVEN AAPL cached at t0 with a 60s TTL
        AND MSFT fetched at t0+59s
        WHEN I ask for the AAPL price at t0+110s
        THEN AAPL is refetched and the new price is served
        """
        t0 = eastern_datetime(2024, 6, 15, 14, 0, 0)
        clock = {"now": t0}
        monkeypatch.setattr(market_data_module, "now_eastern", lambda: clock["now"])
        provider = MagicMock()
        provider.get_quotes.side_effect = [
            {"AAPL": _quote("AAPL", "100", "99")},
            {"MSFT": _quote("MSFT", "378.25", "376.80")},
            {"AAPL": _quote("AAPL", "150", "100")},
        ]
        service = MarketDataService(provider=provider, cache_ttl_seconds=60)

        service.get_quotes(["AAPL"])
        clock["now"] = t0 + timedelta(seconds=59)
        service.get_quotes(["MSFT"])
        clock["now"] = t0 + timedelta(seconds=110)

        assert service.current_price("AAPL") == Decimal("150")
        assert provider.get_quotes.call_args_list[2].args[0] == ["AAPL"]

    def test_fresh_symbol_not_refetched_alongside_expired_one(self, monkeypatch):
        """
        GIVEN AAPL cached at t0 and MSFT cached at t0+59s with a 60s TTL
        WHEN I request both at t0+70s
        THEN only AAPL is fetched again
        """
        t0 = eastern_datetime(2024, 6, 15, 14, 0, 0)
        clock = {"now": t0}
        monkeypatch.setattr(market_data_module, "now_eastern", lambda: clock["now"])
        provider = MagicMock()
        provider.get_quotes.side_effect = [
            {"AAPL": _quote("AAPL", "185.50", "184.25")},
            {"MSFT": _quote("MSFT", "378.25", "376.80")},
            {"AAPL": _quote("AAPL", "186.00", "184.25")},
        ]
        service = MarketDataService(provider=provider, cache_ttl_seconds=60)

        service.get_quotes(["AAPL"])
        clock["now"] = t0 + timedelta(seconds=59)
        service.get_quotes(["MSFT"])
        clock["now"] = t0 + timedelta(seconds=70)
        quotes = service.get_quotes(["AAPL", "MSFT"])

        assert provider.get_quotes.call_args_list[2].args[0] == ["AAPL"]
        assert quotes["AAPL"].last_price == Decimal("186.00")
        assert quotes["MSFT"].last_price == Decimal("378.25")

    def test_clear_cache(self, market_data_service: MarketDataService, deterministic_provider):
        """
        GIVEN a warm cache
        WHEN I clear it
        THEN the next request goes to the provider
        """
        market_data_service.get_quotes(["AAPL"])
        market_data_service.clear_cache()
        market_data_service.get_quotes(["AAPL"])

        assert deterministic_provider.calls == 2


# =============================================================================
# PROVIDER FAILURE TESTS
# =============================================================================


class TestProviderFailure:
    """Tests for degraded operation when the provider fails."""

    def test_stale_cache_served_on_failure(self):
        """
        GIVEN an expired cached AAPL quote
        AND a provider that now fails
        WHEN I request AAPL
        THEN the stale cached quote is served
        """
        provider = MagicMock()
        provider.get_quotes.side_effect = [
            {"AAPL": _quote("AAPL", "185.50", "184.25")},
            ConnectionError("Network unavailable"),
        ]
        service = MarketDataService(provider=provider, cache_ttl_seconds=60)

        service.get_quotes(["AAPL"])
        service._fetched_at["AAPL"] = eastern_datetime(2024, 1, 2, 9, 30, 0)
        quotes = service.get_quotes(["AAPL"])

        assert quotes["AAPL"].last_price == Decimal("185.50")

    def test_failure_without_cache_returns_empty(self, failing_provider: FailingMarketProvider):
        """
        GIVEN nothing cached and a failing provider
        WHEN I request quotes
        THEN an empty dict is returned
        """
        service = MarketDataService(provider=failing_provider)

        assert service.get_quotes(["AAPL"]) == {}

    def test_current_price_raises_when_unavailable(self, failing_provider: FailingMarketProvider):
        """
        GIVEN nothing cached and a failing provider
        WHEN I ask for the current price of AAPL
        THEN PriceUnavailableError is raised
        """
        service = MarketDataService(provider=failing_provider)

        with pytest.raises(PriceUnavailableError) as exc_info:
            service.current_price("aapl")

        assert exc_info.value.code == "PRICE_UNAVAILABLE"
        assert "AAPL" in exc_info.value.message


# =============================================================================
# PRICE HELPER TESTS
# =============================================================================


class TestPriceHelpers:
    """Tests for the price map helpers."""

    def test_current_and_previous_prices(self, market_data_service: MarketDataService):
        """
        GIVEN quotes for AAPL and TSLA
        WHEN I ask for current and previous prices
        THEN each map carries the matching field
        """
        current = market_data_service.current_prices(["AAPL", "TSLA"])
        previous = market_data_service.previous_close_prices(["AAPL", "TSLA"])

        assert current == {"AAPL": Decimal("185.50"), "TSLA": Decimal("248.75")}
        assert previous == {"AAPL": Decimal("184.25"), "TSLA": Decimal("250.10")}

    def test_current_price(self, market_data_service: MarketDataService):
        """
        GIVEN a quote for MSFT
        WHEN I ask for its current price
        THEN the last price is returned
        """
        assert market_data_service.current_price("MSFT") == Decimal("378.25")

    def test_current_price_for_unknown_symbol(self, market_data_service: MarketDataService):
        """
        GIVEN a symbol without a quote
        WHEN I ask for its current price
        THEN PriceUnavailableError is raised
        """
        with pytest.raises(PriceUnavailableError):
            market_data_service.current_price("ZZZZ")


# =============================================================================
# STUB PROVIDER TESTS
# =============================================================================


class TestStubProvider:
    """Tests for the offline stub provider."""

    def test_known_symbol(self):
        """
        GIVEN the stub provider
        WHEN I ask for AAPL
        THEN the fixed stub price is returned
        """
        quotes = StubMarketDataProvider().get_quotes(["aapl"])

        assert quotes["AAPL"].last_price == Decimal("185.50")

    def test_unknown_symbols_are_deterministic(self):
        """
        GIVEN the stub provider
        WHEN I ask twice for an unlisted symbol
        THEN the same positive price is returned both times
        """
        first = StubMarketDataProvider().get_quotes(["ZZZZ"])["ZZZZ"]
        second = StubMarketDataProvider().get_quotes(["ZZZZ"])["ZZZZ"]

        assert first.last_price == second.last_price
        assert first.last_price > 0
        assert first.prev_close > 0

    def test_unknown_symbols_can_be_omitted(self):
        """
        GIVEN a stub provider that does not generate unknown symbols
        WHEN I ask for an unlisted symbol
        THEN it is omitted
        """
        provider = StubMarketDataProvider(generate_unknown=False)

        assert provider.get_quotes(["ZZZZ"]) == {}

    def test_custom_price_table(self):
        """
        GIVEN a custom price table
        WHEN I ask for a listed symbol
        THEN the custom price is used
        """
        provider = StubMarketDataProvider(prices={"ABC": (Decimal("10"), Decimal("9"))})

        assert provider.get_quotes(["ABC"])["ABC"].prev_close == Decimal("9")
