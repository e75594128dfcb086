"""Trade domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_ledger.domain.models.enums import TradeSide, OrderType, TradeStatus


@dataclass
class Trade:
    """
    Immutable ledger entry for one executed order.

    position_id is a non-owning reference: the position may be deleted by a
    later full close while the trade stays readable through its own
    symbol/side/price fields.

    side is left as given so the rule engine can reject unknown values;
    it is normalized to TradeSide on execution.
    """

    portfolio_id: int
    user_id: int
    symbol: str
    quantity: int
    side: TradeSide
    order_type: OrderType = OrderType.MARKET
    status: TradeStatus = TradeStatus.PENDING
    price: Decimal = field(default_factory=lambda: Decimal("0"))
    fees: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    position_id: Optional[int] = None
    trade_id: Optional[int] = None
    executed_at_est: Optional[datetime] = field(default=None)
    created_at_est: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.order_type, str):
            self.order_type = OrderType(self.order_type)
        if isinstance(self.status, str):
            self.status = TradeStatus(self.status)

    @property
    def notional(self) -> Decimal:
        """Quantity times execution price."""
        return self.price * self.quantity

    @property
    def net_cash_impact(self) -> Decimal:
        """
        Calculate net cash impact of this trade.

        Positive = cash added, Negative = cash removed.
        """
        if self.side == TradeSide.BUY:
            return -(self.notional + self.fees)
        elif self.side == TradeSide.SELL:
            return self.notional - self.fees
        return Decimal("0")
