"""Pydantic schemas for analysis endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PortfolioSummaryResponse(BaseModel):
    """Response schema for a portfolio summary."""

    model_config = {"from_attributes": True}

    portfolio_id: Optional[int] = None
    total_value: Decimal
    cash: Decimal
    positions_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    day_pnl: Decimal
    day_return: Decimal
    total_return: Decimal
    position_count: int
    as_of: Optional[datetime] = None


class PositionSummaryResponse(BaseModel):
    """Response schema for a position valuation."""

    model_config = {"from_attributes": True}

    symbol: str
    quantity: int
    entry_price: Decimal
    current_price: Decimal
    market_value: Decimal
    unrealized_pnl: Decimal
    unrealized_return: Decimal
    realized_pnl: Decimal


class AllocationItemResponse(BaseModel):
    """Response schema for a single allocation item."""

    model_config = {"from_attributes": True}

    symbol: str
    market_value: Decimal
    percentage: Decimal


class AllocationResponse(BaseModel):
    """Response schema for allocation breakdown."""

    model_config = {"from_attributes": True}

    items: list[AllocationItemResponse]
    total_value: Decimal
    as_of: Optional[datetime] = None


class RiskMetricsResponse(BaseModel):
    """Response schema for risk metrics."""

    model_config = {"from_attributes": True}

    total_value: Decimal
    position_count: int
    max_position_pct: Decimal
    cash_pct: Decimal
    diversification_score: Decimal


class RebalanceRequest(BaseModel):
    """Request schema for rebalance recommendations."""

    target_allocations: dict[str, Decimal] = Field(
        ...,
        description="Symbol -> target percentage of total value",
    )


class RebalanceRecommendationResponse(BaseModel):
    """Response schema for one rebalance recommendation."""

    model_config = {"from_attributes": True}

    symbol: str
    current_pct: Decimal
    target_pct: Decimal
    difference: Decimal
    current_value: Decimal
    target_value: Decimal
    action: str
    estimated_shares: int


class RebalanceResponse(BaseModel):
    """Response schema for rebalance recommendations."""

    recommendations: list[RebalanceRecommendationResponse]
    count: int
