"""
Unit tests for AnalysisService.

Tests cover:
- Portfolio summary at live prices (day P/L, returns)
- Allocation breakdown
- Risk metrics
- Rebalance recommendations and target validation
- Single position summaries
"""

import pytest
from decimal import Decimal

from portfolio_ledger.core.exceptions import NotFoundError, ValidationError
from portfolio_ledger.domain.models import Portfolio
from portfolio_ledger.services import AnalysisService, MarketDataService

from tests.conftest import assert_decimal_equal


# Holdings of sample_portfolio_with_positions at the deterministic quotes:
#   AAPL 10 @ 150 -> 185.50 (prev 184.25)
#   MSFT  5 @ 350 -> 378.25 (prev 376.80)
CASH = Decimal("96746.75")
AAPL_VALUE = Decimal("1855.00")
MSFT_VALUE = Decimal("1891.25")
TOTAL_VALUE = CASH + AAPL_VALUE + MSFT_VALUE


# =============================================================================
# SUMMARY TESTS
# =============================================================================


class TestSummary:
    """Tests for the headline portfolio summary."""

    def test_summary_at_market(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN 10 AAPL @ 150 and 5 MSFT @ 350
        WHEN I request the summary
        THEN values, P/L and returns reflect the current quotes
        """
        summary = analysis_service.summary(sample_portfolio_with_positions.portfolio_id)

        assert summary.cash == CASH
        assert summary.total_value == TOTAL_VALUE
        assert summary.positions_value == AAPL_VALUE + MSFT_VALUE
        assert summary.unrealized_pnl == Decimal("496.25")
        assert summary.day_pnl == Decimal("19.75")
        assert summary.day_return == Decimal("0.02")
        assert summary.total_return == Decimal("13.25")
        assert summary.position_count == 2
        assert summary.as_of is not None

    def test_summary_of_empty_portfolio(self, analysis_service: AnalysisService, sample_portfolio):
        """
        GIVEN a cash-only portfolio
        WHEN I request the summary
        THEN total value equals cash and returns are zero
        """
        summary = analysis_service.summary(sample_portfolio.portfolio_id)

        assert summary.total_value == Decimal("100000")
        assert summary.position_count == 0
        assert summary.total_return == Decimal("0")

    def test_summary_without_quotes(
        self, ledger_service, portfolio_engine, failing_provider, sample_portfolio_with_positions
    ):
        """
        GIVEN a market data source that is down with nothing cached
        WHEN I request the summary
        THEN unpriced positions contribute nothing and the call still succeeds
        """
        service = AnalysisService(
            ledger_service=ledger_service,
            market_data_service=MarketDataService(provider=failing_provider),
            portfolio_engine=portfolio_engine,
        )

        summary = service.summary(sample_portfolio_with_positions.portfolio_id)

        assert summary.total_value == CASH
        assert summary.unrealized_pnl == Decimal("0")

    def test_summary_of_missing_portfolio(self, analysis_service: AnalysisService):
        """
        GIVEN no portfolio 999
        WHEN I request its summary
        THEN NotFoundError is raised
        """
        with pytest.raises(NotFoundError):
            analysis_service.summary(999)


# =============================================================================
# ALLOCATION TESTS
# =============================================================================


class TestAllocation:
    """Tests for the allocation breakdown."""

    def test_allocation_items(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN cash plus AAPL and MSFT
        WHEN I request the allocation
        THEN cash comes first, then each position, summing to 100%
        """
        view = analysis_service.allocation(sample_portfolio_with_positions.portfolio_id)

        assert [item.symbol for item in view.items] == ["CASH", "AAPL", "MSFT"]
        assert view.total_value == TOTAL_VALUE
        assert view.items[1].market_value == AAPL_VALUE
        assert_decimal_equal(sum(item.percentage for item in view.items), Decimal("100"))

    def test_cash_only_allocation(self, analysis_service: AnalysisService, sample_portfolio):
        """
        GIVEN a cash-only portfolio
        WHEN I request the allocation
        THEN cash is 100%
        """
        view = analysis_service.allocation(sample_portfolio.portfolio_id)

        assert len(view.items) == 1
        assert view.items[0].percentage == Decimal("100.0000")


# =============================================================================
# RISK TESTS
# =============================================================================


class TestRiskMetrics:
    """Tests for concentration metrics."""

    def test_risk_metrics(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN a cash-heavy portfolio with two small positions
        WHEN I request risk metrics
        THEN MSFT is the largest position and cash dominates
        """
        metrics = analysis_service.risk_metrics(sample_portfolio_with_positions.portfolio_id)

        expected_max = (MSFT_VALUE / TOTAL_VALUE * 100).quantize(Decimal("0.0001"))
        assert metrics.position_count == 2
        assert metrics.max_position_pct == expected_max
        assert metrics.cash_pct > Decimal("96")
        assert Decimal("0") < metrics.diversification_score < Decimal("100")


# =============================================================================
# REBALANCE TESTS
# =============================================================================


class TestRebalance:
    """Tests for rebalance recommendations."""

    def test_recommendations(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN AAPL at under 2% of the portfolio
        WHEN the target for "aapl" is 10%
        THEN a buy of 44 shares is recommended
        """
        recs = analysis_service.rebalance(
            sample_portfolio_with_positions.portfolio_id, {"aapl": Decimal("10")}
        )

        assert len(recs) == 1
        rec = recs[0]
        assert rec.symbol == "AAPL"
        assert rec.action == "buy"
        assert rec.estimated_shares == 44
        assert rec.current_value == AAPL_VALUE

    def test_target_for_unheld_symbol(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN no TSLA position
        WHEN the target for TSLA is 5%
        THEN a buy is recommended at the TSLA quote
        """
        recs = analysis_service.rebalance(
            sample_portfolio_with_positions.portfolio_id, {"TSLA": Decimal("5")}
        )

        assert recs[0].symbol == "TSLA"
        assert recs[0].current_value == Decimal("0")
        assert recs[0].estimated_shares == int(TOTAL_VALUE * Decimal("0.05") / Decimal("248.75"))

    @pytest.mark.parametrize(
        "targets",
        [
            {"AAPL": Decimal("101")},
            {"AAPL": Decimal("-1")},
            {"AAPL": Decimal("60"), "MSFT": Decimal("50")},
        ],
    )
    def test_invalid_targets(self, analysis_service: AnalysisService, sample_portfolio, targets):
        """
        GIVEN targets outside [0, 100] or summing above 100
        WHEN I ask for recommendations
        THEN ValidationError is raised
        """
        with pytest.raises(ValidationError):
            analysis_service.rebalance(sample_portfolio.portfolio_id, targets)


# =============================================================================
# POSITION SUMMARY TESTS
# =============================================================================


class TestPositionSummary:
    """Tests for single position valuation."""

    def test_position_summary(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN 10 AAPL @ 150
        WHEN I summarize "aapl" at the 185.50 quote
        THEN market value is 1855 and the return is 23.67%
        """
        summary = analysis_service.position_summary(
            sample_portfolio_with_positions.portfolio_id, "aapl"
        )

        assert summary.symbol == "AAPL"
        assert summary.market_value == AAPL_VALUE
        assert summary.unrealized_pnl == Decimal("355")
        assert summary.unrealized_return == Decimal("23.67")

    def test_position_not_held(
        self, analysis_service: AnalysisService, sample_portfolio_with_positions: Portfolio
    ):
        """
        GIVEN no TSLA position
        WHEN I summarize TSLA
        THEN NotFoundError is raised
        """
        with pytest.raises(NotFoundError):
            analysis_service.position_summary(sample_portfolio_with_positions.portfolio_id, "TSLA")
