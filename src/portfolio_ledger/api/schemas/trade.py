"""Pydantic schemas for trade endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portfolio_ledger.domain.models.enums import TradeSide, OrderType, TradeStatus
from portfolio_ledger.api.schemas.portfolio import PositionResponse


class OrderRequest(BaseModel):
    """
    Request schema for placing an order.

    side and order_type stay plain strings so that unknown values are
    reported with the ledger's own error codes.
    """

    symbol: str = Field(..., min_length=1, max_length=20, description="Stock symbol")
    side: str = Field(..., description="buy or sell")
    quantity: int = Field(..., description="Number of shares")
    order_type: str = Field(default="market", description="market or limit")
    limit_price: Optional[Decimal] = Field(
        default=None,
        description="Execution price for limit orders",
    )

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class TradeResponse(BaseModel):
    """Response schema for a single trade."""

    model_config = {"from_attributes": True}

    trade_id: int
    portfolio_id: int
    user_id: int
    position_id: Optional[int] = None
    symbol: str
    quantity: int
    price: Decimal
    side: TradeSide
    order_type: OrderType
    status: TradeStatus
    fees: Decimal
    realized_pnl: Decimal
    executed_at_est: Optional[datetime] = None
    created_at_est: Optional[datetime] = None


class OrderResponse(BaseModel):
    """Response schema for an executed order."""

    trade: TradeResponse
    position: Optional[PositionResponse] = None


class TradeListResponse(BaseModel):
    """Response schema for trade history."""

    trades: list[TradeResponse]
    count: int
