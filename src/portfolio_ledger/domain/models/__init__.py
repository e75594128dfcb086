"""Domain models package."""

from portfolio_ledger.domain.models.enums import TradeSide, OrderType, TradeStatus, PositionSide
from portfolio_ledger.domain.models.position import Position
from portfolio_ledger.domain.models.portfolio import Portfolio
from portfolio_ledger.domain.models.trade import Trade

__all__ = [
    "TradeSide",
    "OrderType",
    "TradeStatus",
    "PositionSide",
    "Position",
    "Portfolio",
    "Trade",
]
