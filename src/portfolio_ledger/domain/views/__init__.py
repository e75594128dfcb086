"""View models for service outputs."""

from portfolio_ledger.domain.views.portfolio import (
    Quote,
    PositionSummary,
    PortfolioSummary,
    AllocationItem,
    AllocationView,
    RiskMetrics,
    RebalanceRecommendation,
)

__all__ = [
    "Quote",
    "PositionSummary",
    "PortfolioSummary",
    "AllocationItem",
    "AllocationView",
    "RiskMetrics",
    "RebalanceRecommendation",
]
