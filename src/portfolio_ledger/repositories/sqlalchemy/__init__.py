"""SQLAlchemy repository implementations."""

from portfolio_ledger.repositories.sqlalchemy.database import (
    build_engine,
    get_engine,
    get_session_factory,
    get_db,
    init_db,
    reset_database,
    Base,
)
from portfolio_ledger.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from portfolio_ledger.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository
from portfolio_ledger.repositories.sqlalchemy.trade_repo import SqlAlchemyTradeRepository
from portfolio_ledger.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "build_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemyPortfolioRepository",
    "SqlAlchemyPositionRepository",
    "SqlAlchemyTradeRepository",
    "SqlAlchemyUnitOfWork",
]
