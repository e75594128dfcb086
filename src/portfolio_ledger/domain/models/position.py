"""Position domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from portfolio_ledger.domain.models.enums import PositionSide


@dataclass
class Position:
    """
    Net open exposure to one symbol within one portfolio.

    A row exists only while quantity > 0; a full close deletes it.
    entry_price is the weighted-average cost basis of the shares held.
    """

    portfolio_id: Optional[int]
    user_id: int
    symbol: str
    quantity: int
    entry_price: Decimal
    side: PositionSide = PositionSide.LONG
    current_price: Decimal = field(default_factory=lambda: Decimal("0"))
    unrealized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    realized_pnl: Decimal = field(default_factory=lambda: Decimal("0"))
    position_id: Optional[int] = None
    created_at_est: Optional[datetime] = field(default=None)
    updated_at_est: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.side, str):
            self.side = PositionSide(self.side)

    @property
    def cost_basis(self) -> Decimal:
        """Total cost of the shares held at the average entry price."""
        return self.entry_price * self.quantity

    def market_value(self, price: Decimal) -> Decimal:
        """Value of the position at the given price."""
        return price * self.quantity
