"""Domain layer - pure business models with no external dependencies."""

from portfolio_ledger.domain.models import (
    Portfolio,
    Position,
    Trade,
    TradeSide,
    OrderType,
    TradeStatus,
    PositionSide,
)

__all__ = [
    "Portfolio",
    "Position",
    "Trade",
    "TradeSide",
    "OrderType",
    "TradeStatus",
    "PositionSide",
]
