"""SQLAlchemy implementation of PortfolioRepository."""

from sqlalchemy.orm import selectinload

from portfolio_ledger.core.exceptions import ConcurrencyError, NotFoundError
from portfolio_ledger.core.timezone import now_eastern, to_storage
from portfolio_ledger.domain.models import Portfolio
from portfolio_ledger.repositories.sqlalchemy.base import SqlAlchemyRepository
from portfolio_ledger.repositories.sqlalchemy.orm_models import PortfolioORM
from portfolio_ledger.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository


class SqlAlchemyPortfolioRepository(SqlAlchemyRepository):
    """SQLAlchemy-backed portfolio repository."""

    def create(self, portfolio: Portfolio) -> Portfolio:
        """Persist a new portfolio (without positions)."""
        now = to_storage(now_eastern())
        orm_portfolio = PortfolioORM(
            user_id=portfolio.user_id,
            name=portfolio.name,
            cash=portfolio.cash,
            margin_used=portfolio.margin_used,
            margin_available=portfolio.margin_available,
            total_value=portfolio.total_value,
            unrealized_pnl=portfolio.unrealized_pnl,
            realized_pnl=portfolio.realized_pnl,
            day_pnl=portfolio.day_pnl,
            created_at_est=to_storage(portfolio.created_at_est) or now,
            updated_at_est=to_storage(portfolio.updated_at_est) or now,
        )
        self._db.add(orm_portfolio)
        self._persist("Portfolio", "new")
        self._db.refresh(orm_portfolio)
        self._logger.info(
            "Created portfolio %s for user %s", orm_portfolio.portfolio_id, orm_portfolio.user_id
        )
        return self._to_domain(orm_portfolio)

    def get_by_id(self, portfolio_id: int, for_update: bool = False) -> Portfolio:
        """
        Retrieve a portfolio with its positions.

        With for_update the row is read with SELECT ... FOR UPDATE, which
        holds a row lock until the surrounding transaction ends on backends
        that support it. The locked read overwrites any copy of the
        portfolio and its positions already held by the session.
        """
        query = self._db.query(PortfolioORM).filter(
            PortfolioORM.portfolio_id == portfolio_id
        )
        if for_update:
            query = (
                query.with_for_update()
                .populate_existing()
                .options(selectinload(PortfolioORM.positions))
            )
        orm_portfolio = query.first()
        if orm_portfolio is None:
            raise NotFoundError("Portfolio", portfolio_id)
        return self._to_domain(orm_portfolio)

    def list_by_user(self, user_id: int) -> list[Portfolio]:
        """List a user's portfolios, oldest first."""
        orm_portfolios = (
            self._db.query(PortfolioORM)
            .filter(PortfolioORM.user_id == user_id)
            .order_by(PortfolioORM.created_at_est, PortfolioORM.portfolio_id)
            .all()
        )
        return [self._to_domain(p) for p in orm_portfolios]

    def update(self, portfolio: Portfolio) -> Portfolio:
        """
        Write back cash, margin and cached valuation fields.

        The caller's version must match the stored one; the version is
        incremented by the write itself.
        """
        orm_portfolio = self._db.query(PortfolioORM).filter(
            PortfolioORM.portfolio_id == portfolio.portfolio_id
        ).first()
        if orm_portfolio is None:
            raise NotFoundError("Portfolio", portfolio.portfolio_id)
        if orm_portfolio.version != portfolio.version:
            self._logger.error(
                "Version mismatch on portfolio %s: stored %s, given %s",
                portfolio.portfolio_id,
                orm_portfolio.version,
                portfolio.version,
            )
            raise ConcurrencyError("Portfolio", portfolio.portfolio_id)

        orm_portfolio.name = portfolio.name
        orm_portfolio.cash = portfolio.cash
        orm_portfolio.margin_used = portfolio.margin_used
        orm_portfolio.margin_available = portfolio.margin_available
        orm_portfolio.total_value = portfolio.total_value
        orm_portfolio.unrealized_pnl = portfolio.unrealized_pnl
        orm_portfolio.realized_pnl = portfolio.realized_pnl
        orm_portfolio.day_pnl = portfolio.day_pnl
        orm_portfolio.updated_at_est = to_storage(now_eastern())

        self._persist("Portfolio", portfolio.portfolio_id)
        self._db.refresh(orm_portfolio)
        self._logger.info(
            "Updated portfolio %s to version %s", orm_portfolio.portfolio_id, orm_portfolio.version
        )
        return self._to_domain(orm_portfolio)

    def delete(self, portfolio_id: int) -> None:
        """Delete a portfolio together with its positions and trades."""
        orm_portfolio = self._db.query(PortfolioORM).filter(
            PortfolioORM.portfolio_id == portfolio_id
        ).first()
        if orm_portfolio is None:
            raise NotFoundError("Portfolio", portfolio_id)
        self._db.delete(orm_portfolio)
        self._persist("Portfolio", portfolio_id)
        self._logger.info("Deleted portfolio %s", portfolio_id)

    @staticmethod
    def _to_domain(orm: PortfolioORM) -> Portfolio:
        """Convert ORM model to domain model."""
        return Portfolio(
            portfolio_id=orm.portfolio_id,
            user_id=orm.user_id,
            name=orm.name,
            cash=orm.cash,
            margin_used=orm.margin_used,
            margin_available=orm.margin_available,
            total_value=orm.total_value,
            unrealized_pnl=orm.unrealized_pnl,
            realized_pnl=orm.realized_pnl,
            day_pnl=orm.day_pnl,
            positions=[SqlAlchemyPositionRepository._to_domain(p) for p in orm.positions],
            version=orm.version,
            created_at_est=orm.created_at_est,
            updated_at_est=orm.updated_at_est,
        )
