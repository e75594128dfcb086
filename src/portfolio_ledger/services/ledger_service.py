"""Ledger service: portfolio lifecycle, trade execution and history."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Union

from portfolio_ledger.config.settings import Settings
from portfolio_ledger.core.exceptions import (
    AppError,
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidSideError,
    PersistenceError,
    PriceUnavailableError,
    ValidationError,
)
from portfolio_ledger.domain.models import (
    OrderType,
    Portfolio,
    Position,
    Trade,
    TradeSide,
    TradeStatus,
)
from portfolio_ledger.repositories.protocols import (
    PortfolioRepository,
    PositionRepository,
    TradeRepository,
    UnitOfWork,
)
from portfolio_ledger.services.market_data_service import MarketDataService
from portfolio_ledger.services.portfolio_engine import PortfolioEngine


class LedgerService:
    """
    Service for managing portfolios and the trade ledger.

    Every mutation of cash, positions and trades that belongs together runs
    inside one unit of work, so an order is either fully booked or not at all.
    Reads go through the standalone repositories.
    """

    def __init__(
        self,
        portfolio_repo: PortfolioRepository,
        position_repo: PositionRepository,
        trade_repo: TradeRepository,
        uow_factory: Callable[[], UnitOfWork],
        engine: PortfolioEngine,
        settings: Settings,
        market_data: Optional[MarketDataService] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._portfolio_repo = portfolio_repo
        self._position_repo = position_repo
        self._trade_repo = trade_repo
        self._uow_factory = uow_factory
        self._engine = engine
        self._settings = settings
        self._market = market_data
        self._logger = logger or logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Portfolio lifecycle
    # ------------------------------------------------------------------

    def create_portfolio(
        self,
        user_id: int,
        initial_cash: Decimal,
        name: Optional[str] = None,
    ) -> Portfolio:
        """
        Open a portfolio funded with an initial cash deposit.

        Args:
            user_id: Owner of the portfolio
            initial_cash: Starting cash, must not be negative
            name: Optional label, "Default" when omitted

        Returns:
            Created Portfolio instance (version 1, no positions)
        """
        initial_cash = Decimal(initial_cash)
        if initial_cash < 0:
            raise ValidationError(f"Initial cash cannot be negative, got {initial_cash}")

        portfolio = Portfolio(
            user_id=user_id,
            cash=initial_cash,
            name=name or "Default",
            margin_available=initial_cash * self._settings.margin_ratio,
            total_value=initial_cash,
        )
        return self._portfolio_repo.create(portfolio)

    def get_portfolio(self, portfolio_id: int) -> Portfolio:
        """Get portfolio by ID, with its open positions."""
        return self._portfolio_repo.get_by_id(portfolio_id)

    def list_portfolios(self, user_id: int) -> list[Portfolio]:
        """List a user's portfolios."""
        return self._portfolio_repo.list_by_user(user_id)

    def delete_portfolio(self, portfolio_id: int) -> None:
        """Delete a portfolio with its positions and trades."""
        self._portfolio_repo.delete(portfolio_id)

    def adjust_cash(self, portfolio_id: int, amount: Decimal) -> Portfolio:
        """
        Deposit (positive amount) or withdraw (negative amount) cash.

        Margin availability is recomputed from the new cash balance.
        """
        amount = Decimal(amount)
        if amount == 0:
            raise ValidationError("Cash adjustment must be non-zero")

        with self._uow_factory() as uow:
            portfolio = uow.portfolios.get_by_id(portfolio_id, for_update=True)
            new_cash = portfolio.cash + amount
            if new_cash < 0:
                self._logger.warning(
                    "Rejected withdrawal of %s from portfolio %s: cash %s",
                    -amount,
                    portfolio_id,
                    portfolio.cash,
                )
                raise InsufficientFundsError(str(-amount), str(portfolio.cash))

            portfolio.cash = new_cash
            portfolio.margin_available = new_cash * self._settings.margin_ratio
            self._engine.refresh_marks(portfolio, {})
            updated = uow.portfolios.update(portfolio)

        self._logger.info("Adjusted cash of portfolio %s by %s", portfolio_id, amount)
        return updated

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def get_positions(self, portfolio_id: int) -> list[Position]:
        """Open positions of a portfolio (raises NotFoundError for unknown portfolios)."""
        self._portfolio_repo.get_by_id(portfolio_id)
        return self._position_repo.list_by_portfolio(portfolio_id)

    def get_position(self, user_id: int, symbol: str) -> Optional[Position]:
        """A user's position in a symbol, or None."""
        return self._position_repo.get_by_user_and_symbol(user_id, symbol.upper())

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def execute_trade(
        self,
        portfolio_id: int,
        trade: Trade,
        execution_price: Decimal,
    ) -> tuple[Trade, Optional[Position]]:
        """
        Validate and book an order at a known execution price.

        Steps, all inside one unit of work:
        1. Load the portfolio with its positions under a row lock
        2. Validate and apply the order to the in-memory snapshot
        3. Write the affected position, append the trade, update the portfolio
        4. Commit

        A validation failure leaves storage untouched and marks the in-memory
        trade as rejected. Storage failures roll everything back and surface
        as PersistenceError.

        Returns:
            (recorded trade, resulting position or None after a full close)
        """
        try:
            with self._uow_factory() as uow:
                portfolio = uow.portfolios.get_by_id(portfolio_id, for_update=True)
                trade.portfolio_id = portfolio.portfolio_id
                trade.user_id = portfolio.user_id

                existing = portfolio.find_position(trade.symbol)
                existing_id = existing.position_id if existing else None

                position = self._engine.execute_order(trade, portfolio, execution_price)

                if position is None:
                    uow.positions.delete(existing_id)
                    trade.position_id = existing_id
                elif position.position_id is None:
                    position = uow.positions.create(position)
                    trade.position_id = position.position_id
                else:
                    position = uow.positions.update(position)
                    trade.position_id = position.position_id

                recorded = uow.trades.create(trade)
                uow.portfolios.update(portfolio)
        except PersistenceError:
            self._logger.error(
                "Failed to book %s %s x%s for portfolio %s; rolled back",
                _side_label(trade.side),
                trade.symbol,
                trade.quantity,
                portfolio_id,
            )
            raise
        except (ValidationError, InsufficientFundsError, InsufficientSharesError) as exc:
            self._reject(trade, portfolio_id, exc)
            raise

        self._logger.info(
            "Executed trade %s: %s %s x%s @ %s (fees %s) in portfolio %s",
            recorded.trade_id,
            recorded.side.value,
            recorded.symbol,
            recorded.quantity,
            recorded.price,
            recorded.fees,
            portfolio_id,
        )
        return recorded, position

    def place_order(
        self,
        portfolio_id: int,
        symbol: str,
        side: Union[TradeSide, str],
        quantity: int,
        order_type: Union[OrderType, str] = OrderType.MARKET,
        limit_price: Optional[Decimal] = None,
    ) -> tuple[Trade, Optional[Position]]:
        """
        Build an order, resolve its execution price and book it.

        Market orders fill at the current market price; limit orders fill at
        the limit price.
        """
        resolved_side = self._parse_side(side)
        resolved_type = self._parse_order_type(order_type)
        symbol = (symbol or "").strip().upper()
        if not symbol:
            raise ValidationError("Symbol is required")
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError(quantity)

        portfolio = self._portfolio_repo.get_by_id(portfolio_id)

        if resolved_type == OrderType.LIMIT:
            if limit_price is None or Decimal(limit_price) <= 0:
                raise InvalidPriceError(limit_price)
            execution_price = Decimal(limit_price)
        else:
            if self._market is None:
                raise PriceUnavailableError(symbol)
            execution_price = self._market.current_price(symbol)

        trade = Trade(
            portfolio_id=portfolio.portfolio_id,
            user_id=portfolio.user_id,
            symbol=symbol,
            quantity=quantity,
            side=resolved_side,
            order_type=resolved_type,
            status=TradeStatus.PENDING,
        )
        return self.execute_trade(portfolio_id, trade, execution_price)

    def mark_to_market(
        self,
        portfolio_id: int,
        prices: Optional[dict[str, Decimal]] = None,
    ) -> Portfolio:
        """
        Persist fresh marks for positions and the portfolio's cached totals.

        Prices default to current market prices for the held symbols.
        """
        if prices is None:
            held = self._portfolio_repo.get_by_id(portfolio_id).symbols
            prices = self._market.current_prices(held) if self._market and held else {}

        with self._uow_factory() as uow:
            portfolio = uow.portfolios.get_by_id(portfolio_id, for_update=True)
            self._engine.refresh_marks(portfolio, prices)
            for position in portfolio.positions:
                if position.symbol in prices:
                    uow.positions.update(position)
            updated = uow.portfolios.update(portfolio)

        self._logger.info(
            "Marked portfolio %s to market: total value %s", portfolio_id, updated.total_value
        )
        return updated

    # ------------------------------------------------------------------
    # Trade history
    # ------------------------------------------------------------------

    def get_trade(self, trade_id: int) -> Trade:
        """Get trade by ID."""
        return self._trade_repo.get_by_id(trade_id)

    def get_trade_history(
        self,
        user_id: int,
        symbol: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Trade]:
        """
        A user's trades across portfolios, newest first.

        limit defaults to the configured page size and is clamped to
        [1, max_trade_history_limit].
        """
        limit = self._clamp_limit(limit, offset)
        return self._trade_repo.list_by_user(
            user_id,
            symbol=symbol.upper() if symbol else None,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )

    def get_portfolio_trades(
        self,
        portfolio_id: int,
        symbol: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Trade]:
        """One portfolio's trades, newest first."""
        limit = self._clamp_limit(limit, offset)
        self._portfolio_repo.get_by_id(portfolio_id)
        return self._trade_repo.list_by_portfolio(
            portfolio_id,
            symbol=symbol.upper() if symbol else None,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clamp_limit(self, limit: Optional[int], offset: int) -> int:
        if offset is None or offset < 0:
            raise ValidationError(f"Offset cannot be negative, got {offset}")
        if limit is None:
            limit = self._settings.default_trade_history_limit
        return max(1, min(limit, self._settings.max_trade_history_limit))

    def _reject(self, trade: Trade, portfolio_id: int, exc: AppError) -> None:
        trade.status = TradeStatus.REJECTED
        self._logger.warning(
            "Rejected %s order for %s x%s in portfolio %s: %s",
            _side_label(trade.side),
            trade.symbol,
            trade.quantity,
            portfolio_id,
            exc.message,
        )

    @staticmethod
    def _parse_side(side: Union[TradeSide, str]) -> TradeSide:
        if isinstance(side, TradeSide):
            return side
        try:
            return TradeSide(str(side).lower())
        except ValueError:
            raise InvalidSideError(str(side)) from None

    @staticmethod
    def _parse_order_type(order_type: Union[OrderType, str]) -> OrderType:
        if isinstance(order_type, OrderType):
            return order_type
        try:
            return OrderType(str(order_type).lower())
        except ValueError:
            raise ValidationError(f"Invalid order type: {order_type}") from None


def _side_label(side: object) -> str:
    return side.value if isinstance(side, TradeSide) else str(side)
