"""Portfolio domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_ledger.domain.models.position import Position


@dataclass
class Portfolio:
    """
    Cash plus open positions for one user.

    total_value and unrealized_pnl are cached marks; the trade ledger and
    cash are the source of truth. version increments on every persisted
    update and guards against lost updates.
    """

    user_id: int
    cash: Decimal
    name: str = "Default"
    margin_used: Decimal = field(default_factory=lambda: Decimal("0"))
    margin_available: Decimal = field(default_factory=lambda: Decimal("0"))
    total_value: Decimal = field(default_factory=lambda: Decimal("0"))
    unrealized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    day_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    positions: list[Position] = field(default_factory=list)
    portfolio_id: Optional[int] = None
    version: int = 1
    created_at_est: Optional[datetime] = field(default=None)
    updated_at_est: Optional[datetime] = field(default=None)

    def find_position(self, symbol: str) -> Optional[Position]:
        """Return the open position for a symbol, if any."""
        for position in self.positions:
            if position.symbol == symbol:
                return position
        return None

    @property
    def symbols(self) -> list[str]:
        """Symbols of all open positions."""
        return [p.symbol for p in self.positions]
