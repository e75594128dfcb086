"""Portfolio engine: valuation and order rules over in-memory snapshots."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from portfolio_ledger.config.settings import Settings
from portfolio_ledger.core.timezone import now_eastern
from portfolio_ledger.core.exceptions import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidSideError,
)
from portfolio_ledger.domain.models import (
    Portfolio,
    Position,
    Trade,
    TradeSide,
    TradeStatus,
)
from portfolio_ledger.domain.views import (
    AllocationItem,
    AllocationView,
    PortfolioSummary,
    PositionSummary,
    RebalanceRecommendation,
    RiskMetrics,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
PRICE_QUANTUM = Decimal("0.0001")
# Weights carry four places so a full allocation sums to 100 within 0.01
WEIGHT_QUANTUM = Decimal("0.0001")

CASH_SYMBOL = "CASH"


class PortfolioEngine:
    """
    Engine for valuing portfolios and applying orders to them.

    Works purely on domain objects and price maps; it never touches storage.
    The only state is the fee and rebalance configuration.
    """

    def __init__(
        self,
        commission_rate: Decimal = Decimal("0.001"),
        min_commission: Decimal = Decimal("1.00"),
        rebalance_threshold: Decimal = Decimal("1.0"),
    ):
        self._commission_rate = Decimal(commission_rate)
        self._min_commission = Decimal(min_commission)
        self._rebalance_threshold = Decimal(rebalance_threshold)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PortfolioEngine":
        """Build an engine from the trading rules in settings."""
        return cls(
            commission_rate=settings.commission_rate,
            min_commission=settings.min_commission,
            rebalance_threshold=settings.rebalance_threshold,
        )

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    def calculate_commission(self, trade_value: Decimal) -> Decimal:
        """
        Commission for a trade of the given notional value.

        Formula: max(min_commission, commission_rate × trade_value), in cents.
        """
        commission = max(self._min_commission, trade_value * self._commission_rate)
        return commission.quantize(CENT, rounding=ROUND_HALF_UP)

    def portfolio_value(self, portfolio: Portfolio, prices: dict[str, Decimal]) -> Decimal:
        """Cash plus marked value of positions; unpriced symbols count as zero."""
        total = portfolio.cash
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            if price is not None:
                total += position.market_value(price)
        return total

    def unrealized_pnl(self, positions: list[Position], prices: dict[str, Decimal]) -> Decimal:
        """Σ (price − entry) × quantity over priced positions."""
        total = ZERO
        for position in positions:
            price = prices.get(position.symbol)
            if price is not None:
                total += (price - position.entry_price) * position.quantity
        return total

    def position_summary(self, position: Position, current_price: Decimal) -> PositionSummary:
        """Market value and unrealized P/L of one position at a price."""
        market_value = position.market_value(current_price)
        pnl = (current_price - position.entry_price) * position.quantity
        cost_basis = position.cost_basis
        unrealized_return = ZERO
        if cost_basis != ZERO:
            unrealized_return = (pnl / cost_basis * HUNDRED).quantize(CENT)
        return PositionSummary(
            symbol=position.symbol,
            quantity=position.quantity,
            entry_price=position.entry_price,
            current_price=current_price,
            market_value=market_value,
            unrealized_pnl=pnl,
            unrealized_return=unrealized_return,
            realized_pnl=position.realized_pnl,
        )

    # ------------------------------------------------------------------
    # Order rules
    # ------------------------------------------------------------------

    def validate_order(
        self,
        trade: Trade,
        portfolio: Portfolio,
        execution_price: Optional[Decimal],
    ) -> None:
        """
        Check an order against the portfolio without changing anything.

        Raises:
            InvalidQuantityError: quantity is not positive
            InvalidPriceError: execution price is missing or not positive
            InvalidSideError: side is neither buy nor sell
            InsufficientFundsError: a buy costs more than the available cash
            InsufficientSharesError: a sell exceeds the shares held
        """
        if trade.quantity is None or trade.quantity <= 0:
            raise InvalidQuantityError(trade.quantity)
        if execution_price is None or execution_price <= ZERO:
            raise InvalidPriceError(execution_price)

        side = self._resolve_side(trade.side)
        if side == TradeSide.BUY:
            value = execution_price * trade.quantity
            required = value + self.calculate_commission(value)
            if portfolio.cash < required:
                raise InsufficientFundsError(str(required), str(portfolio.cash))
        else:
            position = portfolio.find_position(trade.symbol)
            available = position.quantity if position else 0
            if available < trade.quantity:
                raise InsufficientSharesError(trade.symbol, trade.quantity, available)

    def execute_order(
        self,
        trade: Trade,
        portfolio: Portfolio,
        execution_price: Decimal,
    ) -> Optional[Position]:
        """
        Apply an order to the in-memory portfolio.

        The order is validated first. On success the trade is stamped as
        filled, cash is debited or credited, and the affected position is
        opened, grown, reduced or removed.

        Returns:
            The affected position, or None when a sell closed it completely
        """
        self.validate_order(trade, portfolio, execution_price)

        side = self._resolve_side(trade.side)
        value = execution_price * trade.quantity
        fee = self.calculate_commission(value)

        trade.side = side
        trade.price = execution_price
        trade.fees = fee
        trade.status = TradeStatus.FILLED
        trade.executed_at_est = now_eastern()

        position = portfolio.find_position(trade.symbol)

        if side == TradeSide.BUY:
            portfolio.cash += trade.net_cash_impact
            if position is None:
                position = Position(
                    portfolio_id=portfolio.portfolio_id,
                    user_id=portfolio.user_id,
                    symbol=trade.symbol,
                    quantity=trade.quantity,
                    entry_price=execution_price.quantize(PRICE_QUANTUM),
                )
                portfolio.positions.append(position)
            else:
                new_quantity = position.quantity + trade.quantity
                weighted_cost = position.entry_price * position.quantity + value
                position.entry_price = (weighted_cost / new_quantity).quantize(PRICE_QUANTUM)
                position.quantity = new_quantity
        else:
            portfolio.cash += trade.net_cash_impact
            realized = (execution_price - position.entry_price) * trade.quantity
            trade.realized_pnl = realized
            portfolio.realized_pnl += realized
            position.quantity -= trade.quantity
            if position.quantity == 0:
                portfolio.positions.remove(position)
                self._refresh_cached_totals(portfolio)
                return None
            position.realized_pnl += realized

        position.current_price = execution_price
        position.unrealized_pnl = (execution_price - position.entry_price) * position.quantity
        self._refresh_cached_totals(portfolio)
        return position

    def refresh_marks(self, portfolio: Portfolio, prices: dict[str, Decimal]) -> None:
        """
        Mark positions to the given prices and recompute cached totals.

        Positions without a price keep their previous mark.
        """
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            if price is None:
                continue
            position.current_price = price
            position.unrealized_pnl = (price - position.entry_price) * position.quantity
        self._refresh_cached_totals(portfolio)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def allocation(self, portfolio: Portfolio, prices: dict[str, Decimal]) -> AllocationView:
        """Weight of cash and of each priced position in the total value."""
        total_value = self.portfolio_value(portfolio, prices)
        if total_value <= ZERO:
            return AllocationView(items=[], total_value=total_value, as_of=now_eastern())

        items = [
            AllocationItem(
                symbol=CASH_SYMBOL,
                market_value=portfolio.cash,
                percentage=self._weight(portfolio.cash, total_value),
            )
        ]
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            if price is None:
                continue
            market_value = position.market_value(price)
            items.append(
                AllocationItem(
                    symbol=position.symbol,
                    market_value=market_value,
                    percentage=self._weight(market_value, total_value),
                )
            )
        return AllocationView(items=items, total_value=total_value, as_of=now_eastern())

    def portfolio_summary(
        self,
        portfolio: Portfolio,
        prices: dict[str, Decimal],
        previous_prices: dict[str, Decimal],
    ) -> PortfolioSummary:
        """
        Headline figures at current prices.

        day P/L: Σ (current − previous close) × quantity over positions with both prices
        total return: unrealized P/L as a percentage of positions value
        """
        total_value = self.portfolio_value(portfolio, prices)
        positions_value = total_value - portfolio.cash
        unrealized = self.unrealized_pnl(portfolio.positions, prices)

        day_pnl = ZERO
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            previous = previous_prices.get(position.symbol)
            if price is not None and previous is not None:
                day_pnl += (price - previous) * position.quantity

        day_return = ZERO
        if total_value > ZERO:
            day_return = (day_pnl / total_value * HUNDRED).quantize(CENT)

        total_return = ZERO
        if positions_value > ZERO:
            total_return = (unrealized / positions_value * HUNDRED).quantize(CENT)

        return PortfolioSummary(
            portfolio_id=portfolio.portfolio_id,
            total_value=total_value,
            cash=portfolio.cash,
            positions_value=positions_value,
            unrealized_pnl=unrealized,
            realized_pnl=portfolio.realized_pnl,
            day_pnl=day_pnl,
            day_return=day_return,
            total_return=total_return,
            position_count=len(portfolio.positions),
            as_of=now_eastern(),
        )

    def risk_metrics(self, portfolio: Portfolio, prices: dict[str, Decimal]) -> RiskMetrics:
        """
        Concentration measures.

        diversification score: (1 − Σ w²) × 100 over position weights, a
        Herfindahl complement; 0 with one position or none.
        """
        total_value = self.portfolio_value(portfolio, prices)
        position_count = len(portfolio.positions)
        if total_value <= ZERO:
            return RiskMetrics(
                total_value=total_value,
                position_count=position_count,
                max_position_pct=ZERO,
                cash_pct=ZERO,
                diversification_score=ZERO,
            )

        max_weight = ZERO
        sum_of_squares = ZERO
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            if price is None:
                continue
            weight = position.market_value(price) / total_value
            max_weight = max(max_weight, weight)
            sum_of_squares += weight * weight

        diversification = ZERO
        if position_count > 1:
            diversification = ((1 - sum_of_squares) * HUNDRED).quantize(WEIGHT_QUANTUM)

        return RiskMetrics(
            total_value=total_value,
            position_count=position_count,
            max_position_pct=(max_weight * HUNDRED).quantize(WEIGHT_QUANTUM),
            cash_pct=self._weight(portfolio.cash, total_value),
            diversification_score=diversification,
        )

    def rebalance_recommendations(
        self,
        portfolio: Portfolio,
        targets: dict[str, Decimal],
        prices: dict[str, Decimal],
    ) -> list[RebalanceRecommendation]:
        """
        Trades that would move each target symbol to its target weight.

        Only symbols whose weight is off by more than the threshold and that
        have a price are reported. estimated_shares is truncated toward zero
        and is negative for sells.
        """
        total_value = self.portfolio_value(portfolio, prices)
        current_values: dict[str, Decimal] = {}
        for position in portfolio.positions:
            price = prices.get(position.symbol)
            if price is not None:
                current_values[position.symbol] = position.market_value(price)

        recommendations = []
        for symbol in sorted(targets):
            target_pct = Decimal(targets[symbol])
            current_value = current_values.get(symbol, ZERO)
            current_pct = current_value / total_value * HUNDRED if total_value > ZERO else ZERO
            difference = target_pct - current_pct
            if abs(difference) <= self._rebalance_threshold:
                continue
            price = prices.get(symbol)
            if price is None or price <= ZERO:
                continue

            target_value = target_pct / HUNDRED * total_value
            recommendations.append(
                RebalanceRecommendation(
                    symbol=symbol,
                    current_pct=current_pct.quantize(WEIGHT_QUANTUM),
                    target_pct=target_pct,
                    difference=difference.quantize(WEIGHT_QUANTUM),
                    current_value=current_value,
                    target_value=target_value.quantize(PRICE_QUANTUM),
                    action=self._rebalance_action(difference),
                    estimated_shares=int((target_value - current_value) / price),
                )
            )
        return recommendations

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_side(side: object) -> TradeSide:
        try:
            return TradeSide(side)
        except ValueError:
            raise InvalidSideError(str(side)) from None

    @staticmethod
    def _weight(value: Decimal, total: Decimal) -> Decimal:
        return (value / total * HUNDRED).quantize(WEIGHT_QUANTUM)

    def _rebalance_action(self, difference: Decimal) -> str:
        if difference > self._rebalance_threshold:
            return "buy"
        elif difference < -self._rebalance_threshold:
            return "sell"
        return "hold"

    @staticmethod
    def _refresh_cached_totals(portfolio: Portfolio) -> None:
        """Recompute cached total value and unrealized P/L from position marks."""
        positions_value = ZERO
        unrealized = ZERO
        for position in portfolio.positions:
            positions_value += position.market_value(position.current_price)
            unrealized += position.unrealized_pnl
        portfolio.total_value = portfolio.cash + positions_value
        portfolio.unrealized_pnl = unrealized
