"""Analysis service for portfolio analytics at live prices."""

from decimal import Decimal

from portfolio_ledger.core.exceptions import NotFoundError, ValidationError
from portfolio_ledger.domain.views import (
    AllocationView,
    PortfolioSummary,
    PositionSummary,
    RebalanceRecommendation,
    RiskMetrics,
)
from portfolio_ledger.services.ledger_service import LedgerService
from portfolio_ledger.services.market_data_service import MarketDataService
from portfolio_ledger.services.portfolio_engine import PortfolioEngine


class AnalysisService:
    """
    Service for portfolio analytics and reporting.

    Reads portfolios through the ledger, prices them through market data
    and leaves the arithmetic to the engine. Nothing here writes.
    """

    def __init__(
        self,
        ledger_service: LedgerService,
        market_data_service: MarketDataService,
        portfolio_engine: PortfolioEngine,
    ):
        self._ledger = ledger_service
        self._market = market_data_service
        self._engine = portfolio_engine

    def summary(self, portfolio_id: int) -> PortfolioSummary:
        """Total value, P/L and returns at current prices."""
        portfolio = self._ledger.get_portfolio(portfolio_id)
        symbols = portfolio.symbols
        prices = self._market.current_prices(symbols)
        previous = self._market.previous_close_prices(symbols)
        return self._engine.portfolio_summary(portfolio, prices, previous)

    def allocation(self, portfolio_id: int) -> AllocationView:
        """Cash and position weights at current prices."""
        portfolio = self._ledger.get_portfolio(portfolio_id)
        prices = self._market.current_prices(portfolio.symbols)
        return self._engine.allocation(portfolio, prices)

    def risk_metrics(self, portfolio_id: int) -> RiskMetrics:
        """Concentration metrics at current prices."""
        portfolio = self._ledger.get_portfolio(portfolio_id)
        prices = self._market.current_prices(portfolio.symbols)
        return self._engine.risk_metrics(portfolio, prices)

    def rebalance(
        self,
        portfolio_id: int,
        target_allocations: dict[str, Decimal],
    ) -> list[RebalanceRecommendation]:
        """
        Recommend trades toward target weights.

        Args:
            portfolio_id: Portfolio to rebalance
            target_allocations: symbol -> target percentage of total value

        Raises:
            ValidationError: a target is outside [0, 100] or targets exceed 100 in total
        """
        targets: dict[str, Decimal] = {}
        for symbol, pct in target_allocations.items():
            pct = Decimal(pct)
            if pct < 0 or pct > 100:
                raise ValidationError(f"Target for {symbol} must be between 0 and 100, got {pct}")
            targets[symbol.strip().upper()] = pct
        if sum(targets.values(), Decimal("0")) > 100:
            raise ValidationError("Target allocations exceed 100%")

        portfolio = self._ledger.get_portfolio(portfolio_id)
        symbols = sorted(set(portfolio.symbols) | set(targets))
        prices = self._market.current_prices(symbols)
        return self._engine.rebalance_recommendations(portfolio, targets, prices)

    def position_summary(self, portfolio_id: int, symbol: str) -> PositionSummary:
        """Valuation of one held position at its current price."""
        portfolio = self._ledger.get_portfolio(portfolio_id)
        symbol = symbol.upper()
        position = portfolio.find_position(symbol)
        if position is None:
            raise NotFoundError("Position", f"{symbol} in portfolio {portfolio_id}")
        price = self._market.current_price(symbol)
        return self._engine.position_summary(position, price)
