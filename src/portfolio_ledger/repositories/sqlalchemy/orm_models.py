"""SQLAlchemy ORM model definitions."""

from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship

from portfolio_ledger.repositories.sqlalchemy.database import Base
from portfolio_ledger.domain.models.enums import (
    TradeSide,
    OrderType,
    TradeStatus,
    PositionSide,
)

MONEY = Numeric(precision=18, scale=4)
PRICE = Numeric(precision=18, scale=4)


class PortfolioORM(Base):
    """SQLAlchemy model for Portfolio."""

    __tablename__ = "portfolios"

    portfolio_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False, default="Default")
    cash = Column(MONEY, nullable=False, default=Decimal("0"))
    margin_used = Column(MONEY, nullable=False, default=Decimal("0"))
    margin_available = Column(MONEY, nullable=False, default=Decimal("0"))
    total_value = Column(MONEY, nullable=False, default=Decimal("0"))
    unrealized_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    realized_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    day_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    version = Column(Integer, nullable=False)
    created_at_est = Column(DateTime, nullable=False)
    updated_at_est = Column(DateTime, nullable=False)

    positions = relationship(
        "PositionORM",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        order_by="PositionORM.symbol",
    )
    trades = relationship(
        "TradeORM",
        back_populates="portfolio",
        cascade="all, delete-orphan",
    )

    # UPDATE ... WHERE version = :loaded_version; zero rows raises StaleDataError
    __mapper_args__ = {"version_id_col": version}


class PositionORM(Base):
    """SQLAlchemy model for Position (net open exposure per symbol)."""

    __tablename__ = "positions"
    __table_args__ = (
        UniqueConstraint("portfolio_id", "symbol", name="uq_positions_portfolio_symbol"),
    )

    position_id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer,
        ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Integer, nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    quantity = Column(BigInteger, nullable=False)
    side = Column(SqlEnum(PositionSide), nullable=False, default=PositionSide.LONG)
    entry_price = Column(PRICE, nullable=False)
    current_price = Column(PRICE, nullable=False, default=Decimal("0"))
    unrealized_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    realized_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    created_at_est = Column(DateTime, nullable=False)
    updated_at_est = Column(DateTime, nullable=False)

    portfolio = relationship("PortfolioORM", back_populates="positions")


class TradeORM(Base):
    """SQLAlchemy model for Trade (immutable ledger entry)."""

    __tablename__ = "trades"

    trade_id = Column(Integer, primary_key=True, autoincrement=True)
    portfolio_id = Column(
        Integer,
        ForeignKey("portfolios.portfolio_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Integer, nullable=False, index=True)
    # No FK: the position row is deleted on a full close, the trade is not
    position_id = Column(Integer, nullable=True, index=True)
    symbol = Column(String(20), nullable=False, index=True)
    quantity = Column(BigInteger, nullable=False)
    price = Column(PRICE, nullable=False)
    side = Column(SqlEnum(TradeSide), nullable=False)
    order_type = Column(SqlEnum(OrderType), nullable=False, default=OrderType.MARKET)
    status = Column(SqlEnum(TradeStatus), nullable=False, default=TradeStatus.PENDING)
    fees = Column(MONEY, nullable=False, default=Decimal("0"))
    realized_pnl = Column(MONEY, nullable=False, default=Decimal("0"))
    executed_at_est = Column(DateTime, nullable=True)
    created_at_est = Column(DateTime, nullable=False, index=True)

    portfolio = relationship("PortfolioORM", back_populates="trades")
