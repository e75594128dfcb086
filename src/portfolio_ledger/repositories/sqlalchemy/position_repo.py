"""SQLAlchemy implementation of PositionRepository."""

from typing import Optional

from portfolio_ledger.core.exceptions import NotFoundError
from portfolio_ledger.core.timezone import now_eastern, to_storage
from portfolio_ledger.domain.models import Position
from portfolio_ledger.repositories.sqlalchemy.base import SqlAlchemyRepository
from portfolio_ledger.repositories.sqlalchemy.orm_models import PositionORM


class SqlAlchemyPositionRepository(SqlAlchemyRepository):
    """SQLAlchemy-backed position repository."""

    def create(self, position: Position) -> Position:
        """Persist a new position."""
        now = to_storage(now_eastern())
        orm_position = PositionORM(
            portfolio_id=position.portfolio_id,
            user_id=position.user_id,
            symbol=position.symbol,
            quantity=position.quantity,
            side=position.side,
            entry_price=position.entry_price,
            current_price=position.current_price,
            unrealized_pnl=position.unrealized_pnl,
            realized_pnl=position.realized_pnl,
            created_at_est=to_storage(position.created_at_est) or now,
            updated_at_est=now,
        )
        self._db.add(orm_position)
        self._persist("Position", position.symbol)
        self._db.refresh(orm_position)
        self._logger.info(
            "Opened position %s %s x%s in portfolio %s",
            orm_position.position_id,
            orm_position.symbol,
            orm_position.quantity,
            orm_position.portfolio_id,
        )
        return self._to_domain(orm_position)

    def get_by_id(self, position_id: int) -> Position:
        """Retrieve position by ID."""
        orm_position = self._db.query(PositionORM).filter(
            PositionORM.position_id == position_id
        ).first()
        if orm_position is None:
            raise NotFoundError("Position", position_id)
        return self._to_domain(orm_position)

    def list_by_portfolio(self, portfolio_id: int) -> list[Position]:
        """List open positions of a portfolio, ordered by symbol."""
        orm_positions = (
            self._db.query(PositionORM)
            .filter(PositionORM.portfolio_id == portfolio_id)
            .order_by(PositionORM.symbol)
            .all()
        )
        return [self._to_domain(p) for p in orm_positions]

    def get_by_portfolio_and_symbol(self, portfolio_id: int, symbol: str) -> Optional[Position]:
        """Retrieve the position for a symbol within a portfolio."""
        orm_position = self._db.query(PositionORM).filter(
            PositionORM.portfolio_id == portfolio_id,
            PositionORM.symbol == symbol,
        ).first()
        return self._to_domain(orm_position) if orm_position else None

    def get_by_user_and_symbol(self, user_id: int, symbol: str) -> Optional[Position]:
        """Retrieve the most recently updated position for a symbol across a user's portfolios."""
        orm_position = (
            self._db.query(PositionORM)
            .filter(PositionORM.user_id == user_id, PositionORM.symbol == symbol)
            .order_by(PositionORM.updated_at_est.desc(), PositionORM.position_id.desc())
            .first()
        )
        return self._to_domain(orm_position) if orm_position else None

    def update(self, position: Position) -> Position:
        """Update an existing position."""
        orm_position = self._db.query(PositionORM).filter(
            PositionORM.position_id == position.position_id
        ).first()
        if orm_position is None:
            raise NotFoundError("Position", position.position_id)

        orm_position.quantity = position.quantity
        orm_position.entry_price = position.entry_price
        orm_position.current_price = position.current_price
        orm_position.unrealized_pnl = position.unrealized_pnl
        orm_position.realized_pnl = position.realized_pnl
        orm_position.updated_at_est = to_storage(now_eastern())

        self._persist("Position", position.position_id)
        self._db.refresh(orm_position)
        return self._to_domain(orm_position)

    def delete(self, position_id: int) -> None:
        """Delete a position."""
        orm_position = self._db.query(PositionORM).filter(
            PositionORM.position_id == position_id
        ).first()
        if orm_position is None:
            raise NotFoundError("Position", position_id)
        self._db.delete(orm_position)
        self._persist("Position", position_id)
        self._logger.info("Closed position %s", position_id)

    @staticmethod
    def _to_domain(orm: PositionORM) -> Position:
        """Convert ORM model to domain model."""
        return Position(
            position_id=orm.position_id,
            portfolio_id=orm.portfolio_id,
            user_id=orm.user_id,
            symbol=orm.symbol,
            quantity=orm.quantity,
            side=orm.side,
            entry_price=orm.entry_price,
            current_price=orm.current_price,
            unrealized_pnl=orm.unrealized_pnl,
            realized_pnl=orm.realized_pnl,
            created_at_est=orm.created_at_est,
            updated_at_est=orm.updated_at_est,
        )
