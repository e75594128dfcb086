"""SQLAlchemy unit of work: one transaction spanning several repositories."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_ledger.core.exceptions import PersistenceError
from portfolio_ledger.repositories.sqlalchemy.portfolio_repo import SqlAlchemyPortfolioRepository
from portfolio_ledger.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository
from portfolio_ledger.repositories.sqlalchemy.trade_repo import SqlAlchemyTradeRepository


class SqlAlchemyUnitOfWork:
    """
    Transactional scope over the portfolio, position and trade repositories.

    Usage:
        with SqlAlchemyUnitOfWork(db) as uow:
            portfolio = uow.portfolios.get_by_id(1, for_update=True)
            ...

    Leaving the block normally commits. Leaving it through any exception,
    including KeyboardInterrupt or a cancelled task, rolls back so that no
    partial write survives.
    """

    def __init__(self, db: Session, logger: Optional[logging.Logger] = None):
        self._db = db
        self._logger = logger or logging.getLogger(__name__)
        self.portfolios = SqlAlchemyPortfolioRepository(db, autocommit=False, logger=logger)
        self.positions = SqlAlchemyPositionRepository(db, autocommit=False, logger=logger)
        self.trades = SqlAlchemyTradeRepository(db, autocommit=False, logger=logger)

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
            self._logger.debug("Unit of work rolled back after %s", exc_type.__name__)
            return False
        self.commit()
        return False

    def commit(self) -> None:
        """Make all writes of this unit durable."""
        try:
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            self._logger.error("Commit failed, unit of work rolled back: %s", exc)
            raise PersistenceError("Failed to commit ledger changes") from exc

    def rollback(self) -> None:
        """Discard all writes of this unit."""
        self._db.rollback()
