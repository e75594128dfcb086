"""Repository protocol definitions (interfaces)."""

from portfolio_ledger.repositories.protocols.portfolio_repo import PortfolioRepository
from portfolio_ledger.repositories.protocols.position_repo import PositionRepository
from portfolio_ledger.repositories.protocols.trade_repo import TradeRepository
from portfolio_ledger.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "PortfolioRepository",
    "PositionRepository",
    "TradeRepository",
    "UnitOfWork",
]
