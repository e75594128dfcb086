"""Trade repository protocol."""

from datetime import datetime
from typing import Protocol, Optional

from portfolio_ledger.domain.models import Trade


class TradeRepository(Protocol):
    """Interface for the append-only trade ledger."""

    def create(self, trade: Trade) -> Trade:
        """Append a trade."""
        ...

    def get_by_id(self, trade_id: int) -> Trade:
        """Retrieve trade by ID (raises NotFoundError)."""
        ...

    def list_by_user(
        self,
        user_id: int,
        symbol: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Trade]:
        """List a user's trades, newest first."""
        ...

    def list_by_portfolio(
        self,
        portfolio_id: int,
        symbol: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Trade]:
        """List a portfolio's trades, newest first."""
        ...
