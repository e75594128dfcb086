"""View models for valuation and analysis outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Quote:
    """Market quote data for a symbol."""

    symbol: str
    last_price: Decimal
    prev_close: Decimal
    as_of: datetime


@dataclass
class PositionSummary:
    """Valuation of a single position at a given price."""

    symbol: str
    quantity: int
    entry_price: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    unrealized_return: Decimal  # percent of cost basis
    realized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))


@dataclass
class PortfolioSummary:
    """Headline figures for a portfolio."""

    portfolio_id: Optional[int]
    total_value: Decimal
    cash: Decimal
    positions_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    day_pnl: Decimal
    day_return: Decimal
    total_return: Decimal
    position_count: int
    as_of: Optional[datetime] = None


@dataclass
class AllocationItem:
    """Single item in allocation breakdown."""

    symbol: str
    market_value: Decimal
    percentage: Decimal


@dataclass
class AllocationView:
    """Portfolio allocation breakdown."""

    items: list[AllocationItem] = field(default_factory=list)
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    as_of: Optional[datetime] = None


@dataclass
class RiskMetrics:
    """Concentration figures for a portfolio."""

    total_value: Decimal
    position_count: int
    max_position_pct: Decimal
    cash_pct: Decimal
    diversification_score: Decimal


@dataclass
class RebalanceRecommendation:
    """Suggested adjustment to move one symbol toward its target weight."""

    symbol: str
    current_pct: Decimal
    target_pct: Decimal
    difference: Decimal
    current_value: Decimal
    target_value: Decimal
    action: str  # buy, sell or hold
    estimated_shares: int
