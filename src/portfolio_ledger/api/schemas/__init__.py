"""Pydantic schemas for API request/response."""

from portfolio_ledger.api.schemas.portfolio import (
    PortfolioCreate,
    CashAdjustmentRequest,
    PositionResponse,
    PositionListResponse,
    PortfolioResponse,
    PortfolioListResponse,
)
from portfolio_ledger.api.schemas.trade import (
    OrderRequest,
    TradeResponse,
    OrderResponse,
    TradeListResponse,
)
from portfolio_ledger.api.schemas.analysis import (
    PortfolioSummaryResponse,
    PositionSummaryResponse,
    AllocationItemResponse,
    AllocationResponse,
    RiskMetricsResponse,
    RebalanceRequest,
    RebalanceRecommendationResponse,
    RebalanceResponse,
)

__all__ = [
    "PortfolioCreate",
    "CashAdjustmentRequest",
    "PositionResponse",
    "PositionListResponse",
    "PortfolioResponse",
    "PortfolioListResponse",
    "OrderRequest",
    "TradeResponse",
    "OrderResponse",
    "TradeListResponse",
    "PortfolioSummaryResponse",
    "PositionSummaryResponse",
    "AllocationItemResponse",
    "AllocationResponse",
    "RiskMetricsResponse",
    "RebalanceRequest",
    "RebalanceRecommendationResponse",
    "RebalanceResponse",
]
