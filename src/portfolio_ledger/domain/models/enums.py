"""Enumerations for domain models."""

from enum import Enum


class TradeSide(str, Enum):
    """Direction of an order."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """How the execution price of an order is determined."""

    MARKET = "market"  # Filled at the current market price
    LIMIT = "limit"  # Filled at the caller-supplied limit price


class TradeStatus(str, Enum):
    """Lifecycle status of a trade."""

    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class PositionSide(str, Enum):
    """Position direction (long-only engine)."""

    LONG = "long"
