"""Order placement and trade history endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from portfolio_ledger.api.deps import get_ledger_service
from portfolio_ledger.api.schemas import (
    OrderRequest,
    OrderResponse,
    PositionResponse,
    TradeResponse,
    TradeListResponse,
)
from portfolio_ledger.core.exceptions import ValidationError
from portfolio_ledger.core.timezone import parse_datetime_eastern
from portfolio_ledger.services import LedgerService

router = APIRouter(tags=["trades"])


def _parse_bound(name: str, value: Optional[str]) -> Optional[datetime]:
    """Parse a since/until query value; naive values are US/Eastern."""
    if not value:
        return None
    try:
        return parse_datetime_eastern(value)
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid {name} timestamp: {value}") from None


def _trade_list(trades) -> TradeListResponse:
    return TradeListResponse(
        trades=[TradeResponse.model_validate(t) for t in trades],
        count=len(trades),
    )


@router.post("/portfolios/{portfolio_id}/trades", response_model=OrderResponse, status_code=201)
def place_order(
    portfolio_id: int,
    data: OrderRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> OrderResponse:
    """Place a market or limit order; it is executed immediately."""
    trade, position = ledger.place_order(
        portfolio_id=portfolio_id,
        symbol=data.symbol,
        side=data.side,
        quantity=data.quantity,
        order_type=data.order_type,
        limit_price=data.limit_price,
    )
    return OrderResponse(
        trade=TradeResponse.model_validate(trade),
        position=PositionResponse.model_validate(position) if position else None,
    )


@router.get("/portfolios/{portfolio_id}/trades", response_model=TradeListResponse)
def get_portfolio_trades(
    portfolio_id: int,
    symbol: Optional[str] = Query(None, description="Filter by symbol"),
    limit: Optional[int] = Query(None, description="Page size (default 50)"),
    offset: int = Query(0, description="Number of trades to skip"),
    since: Optional[str] = Query(None, description="Earliest trade time"),
    until: Optional[str] = Query(None, description="Latest trade time"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TradeListResponse:
    """Trade history of one portfolio, newest first."""
    trades = ledger.get_portfolio_trades(
        portfolio_id,
        symbol=symbol,
        limit=limit,
        offset=offset,
        start_date=_parse_bound("since", since),
        end_date=_parse_bound("until", until),
    )
    return _trade_list(trades)


@router.get("/trades/user/{user_id}", response_model=TradeListResponse)
def get_user_trades(
    user_id: int,
    symbol: Optional[str] = Query(None, description="Filter by symbol"),
    limit: Optional[int] = Query(None, description="Page size (default 50)"),
    offset: int = Query(0, description="Number of trades to skip"),
    since: Optional[str] = Query(None, description="Earliest trade time"),
    until: Optional[str] = Query(None, description="Latest trade time"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TradeListResponse:
    """Trade history of a user across portfolios, newest first."""
    trades = ledger.get_trade_history(
        user_id,
        symbol=symbol,
        limit=limit,
        offset=offset,
        start_date=_parse_bound("since", since),
        end_date=_parse_bound("until", until),
    )
    return _trade_list(trades)


@router.get("/trades/{trade_id}", response_model=TradeResponse)
def get_trade(
    trade_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TradeResponse:
    """Get a single trade."""
    return TradeResponse.model_validate(ledger.get_trade(trade_id))
