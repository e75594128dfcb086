"""Repository layer - data access abstractions and implementations."""

from portfolio_ledger.repositories.protocols import (
    PortfolioRepository,
    PositionRepository,
    TradeRepository,
    UnitOfWork,
)

__all__ = [
    "PortfolioRepository",
    "PositionRepository",
    "TradeRepository",
    "UnitOfWork",
]
