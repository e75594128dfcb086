"""Portfolio repository protocol."""

from typing import Protocol

from portfolio_ledger.domain.models import Portfolio


class PortfolioRepository(Protocol):
    """Interface for portfolio data access."""

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio."""
        ...

    def get_by_id(self, portfolio_id: int, for_update: bool = False) -> Portfolio:
        """Retrieve a portfolio with its positions (raises NotFoundError)."""
        ...

    def list_by_user(self, user_id: int) -> list[Portfolio]:
        """List a user's portfolios."""
        ...

    def update(self, portfolio: Portfolio) -> Portfolio:
        """Version-checked update (raises ConcurrencyError on mismatch)."""
        ...

    def delete(self, portfolio_id: int) -> None:
        """Delete a portfolio and everything it owns."""
        ...
