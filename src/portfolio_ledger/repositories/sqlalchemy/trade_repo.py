"""SQLAlchemy implementation of TradeRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_

from portfolio_ledger.core.exceptions import NotFoundError
from portfolio_ledger.core.timezone import now_eastern, to_storage
from portfolio_ledger.domain.models import Trade
from portfolio_ledger.repositories.sqlalchemy.base import SqlAlchemyRepository
from portfolio_ledger.repositories.sqlalchemy.orm_models import TradeORM


class SqlAlchemyTradeRepository(SqlAlchemyRepository):
    """
    SQLAlchemy-backed trade ledger.

    Append-only: trades are never updated or deleted through this class.
    """

    def create(self, trade: Trade) -> Trade:
        """Append a trade to the ledger."""
        orm_trade = TradeORM(
            portfolio_id=trade.portfolio_id,
            user_id=trade.user_id,
            position_id=trade.position_id,
            symbol=trade.symbol,
            quantity=trade.quantity,
            price=trade.price,
            side=trade.side,
            order_type=trade.order_type,
            status=trade.status,
            fees=trade.fees,
            realized_pnl=trade.realized_pnl,
            executed_at_est=to_storage(trade.executed_at_est),
            created_at_est=to_storage(trade.created_at_est or now_eastern()),
        )
        self._db.add(orm_trade)
        self._persist("Trade", trade.symbol)
        self._db.refresh(orm_trade)
        self._logger.info(
            "Recorded trade %s: %s %s x%s @ %s",
            orm_trade.trade_id,
            orm_trade.side.value,
            orm_trade.symbol,
            orm_trade.quantity,
            orm_trade.price,
        )
        return self._to_domain(orm_trade)

    def get_by_id(self, trade_id: int) -> Trade:
        """Retrieve trade by ID."""
        orm_trade = self._db.query(TradeORM).filter(TradeORM.trade_id == trade_id).first()
        if orm_trade is None:
            raise NotFoundError("Trade", trade_id)
        return self._to_domain(orm_trade)

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
        conditions = [TradeORM.user_id == user_id]
        if symbol:
            conditions.append(TradeORM.symbol == symbol)
        if start_date:
            conditions.append(TradeORM.created_at_est >= to_storage(start_date))
        if end_date:
            conditions.append(TradeORM.created_at_est <= to_storage(end_date))
        return self._page(conditions, limit, offset)

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
        conditions = [TradeORM.portfolio_id == portfolio_id]
        if symbol:
            conditions.append(TradeORM.symbol == symbol)
        if start_date:
            conditions.append(TradeORM.created_at_est >= to_storage(start_date))
        if end_date:
            conditions.append(TradeORM.created_at_est <= to_storage(end_date))
        return self._page(conditions, limit, offset)

    def _page(self, conditions: list, limit: int, offset: int) -> list[Trade]:
        query = (
            self._db.query(TradeORM)
            .filter(and_(*conditions))
            .order_by(TradeORM.created_at_est.desc(), TradeORM.trade_id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(t) for t in query.all()]

    @staticmethod
    def _to_domain(orm: TradeORM) -> Trade:
        """Convert ORM model to domain model."""
        return Trade(
            trade_id=orm.trade_id,
            portfolio_id=orm.portfolio_id,
            user_id=orm.user_id,
            position_id=orm.position_id,
            symbol=orm.symbol,
            quantity=orm.quantity,
            price=orm.price,
            side=orm.side,
            order_type=orm.order_type,
            status=orm.status,
            fees=orm.fees,
            realized_pnl=orm.realized_pnl,
            executed_at_est=orm.executed_at_est,
            created_at_est=orm.created_at_est,
        )
