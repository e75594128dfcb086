"""Position repository protocol."""

from typing import Protocol, Optional

from portfolio_ledger.domain.models import Position


class PositionRepository(Protocol):
    """Interface for position data access."""

    def create(self, position: Position) -> Position:
        """Persist a new position."""
        ...

    def get_by_id(self, position_id: int) -> Position:
        """Retrieve position by ID (raises NotFoundError)."""
        ...

    def list_by_portfolio(self, portfolio_id: int) -> list[Position]:
        """List open positions of a portfolio."""
        ...

    def get_by_portfolio_and_symbol(self, portfolio_id: int, symbol: str) -> Optional[Position]:
        """Retrieve the position for a symbol within a portfolio."""
        ...

    def get_by_user_and_symbol(self, user_id: int, symbol: str) -> Optional[Position]:
        """Retrieve a user's position for a symbol."""
        ...

    def update(self, position: Position) -> Position:
        """Update an existing position."""
        ...

    def delete(self, position_id: int) -> None:
        """Delete a position."""
        ...
