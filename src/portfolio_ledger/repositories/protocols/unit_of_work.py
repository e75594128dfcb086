"""Unit of work protocol."""

from typing import Protocol

from portfolio_ledger.repositories.protocols.portfolio_repo import PortfolioRepository
from portfolio_ledger.repositories.protocols.position_repo import PositionRepository
from portfolio_ledger.repositories.protocols.trade_repo import TradeRepository


class UnitOfWork(Protocol):
    """
    Context manager grouping repository writes into one transaction.

    Commits on normal exit, rolls back on any exception.
    """

    portfolios: PortfolioRepository
    positions: PositionRepository
    trades: TradeRepository

    def __enter__(self) -> "UnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> bool:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...
