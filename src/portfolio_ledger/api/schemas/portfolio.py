"""Pydantic schemas for portfolio and position endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from portfolio_ledger.domain.models.enums import PositionSide


class PortfolioCreate(BaseModel):
    """Request schema for creating a portfolio."""

    user_id: int = Field(..., ge=1, description="Owner of the portfolio")
    initial_cash: Decimal = Field(..., description="Initial cash deposit")
    name: Optional[str] = Field(default=None, max_length=255, description="Optional label")


class CashAdjustmentRequest(BaseModel):
    """Request schema for a deposit (positive) or withdrawal (negative)."""

    amount: Decimal = Field(..., description="Signed cash amount")


class PositionResponse(BaseModel):
    """Response schema for a single position."""

    model_config = {"from_attributes": True}

    position_id: Optional[int] = None
    portfolio_id: Optional[int] = None
    user_id: int
    symbol: str
    quantity: int
    side: PositionSide
    entry_price: Decimal
    current_price: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    created_at_est: Optional[datetime] = None
    updated_at_est: Optional[datetime] = None


class PositionListResponse(BaseModel):
    """Response schema for listing positions."""

    positions: list[PositionResponse]
    count: int


class PortfolioResponse(BaseModel):
    """Response schema for a single portfolio."""

    model_config = {"from_attributes": True}

    portfolio_id: int
    user_id: int
    name: str
    cash: Decimal
    margin_used: Decimal
    margin_available: Decimal
    total_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    day_pnl: Decimal
    version: int
    positions: list[PositionResponse] = Field(default_factory=list)
    created_at_est: Optional[datetime] = None
    updated_at_est: Optional[datetime] = None


class PortfolioListResponse(BaseModel):
    """Response schema for listing portfolios."""

    portfolios: list[PortfolioResponse]
    count: int
