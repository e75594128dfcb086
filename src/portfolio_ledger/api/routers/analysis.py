"""Portfolio analysis endpoints."""

from fastapi import APIRouter, Depends

from portfolio_ledger.api.deps import get_analysis_service
from portfolio_ledger.api.schemas import (
    PortfolioSummaryResponse,
    PositionSummaryResponse,
    AllocationResponse,
    RiskMetricsResponse,
    RebalanceRequest,
    RebalanceRecommendationResponse,
    RebalanceResponse,
)
from portfolio_ledger.services import AnalysisService

router = APIRouter(prefix="/portfolios", tags=["analysis"])


@router.get("/{portfolio_id}/summary", response_model=PortfolioSummaryResponse)
def get_summary(
    portfolio_id: int,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> PortfolioSummaryResponse:
    """Total value, P/L and returns at current prices."""
    return PortfolioSummaryResponse.model_validate(analysis.summary(portfolio_id))


@router.get("/{portfolio_id}/allocation", response_model=AllocationResponse)
def get_allocation(
    portfolio_id: int,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> AllocationResponse:
    """Cash and position weights."""
    return AllocationResponse.model_validate(analysis.allocation(portfolio_id))


@router.get("/{portfolio_id}/risk", response_model=RiskMetricsResponse)
def get_risk_metrics(
    portfolio_id: int,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> RiskMetricsResponse:
    """Concentration risk metrics."""
    return RiskMetricsResponse.model_validate(analysis.risk_metrics(portfolio_id))


@router.post("/{portfolio_id}/rebalance", response_model=RebalanceResponse)
def rebalance(
    portfolio_id: int,
    data: RebalanceRequest,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> RebalanceResponse:
    """Recommend trades toward target allocations."""
    recommendations = analysis.rebalance(portfolio_id, data.target_allocations)
    return RebalanceResponse(
        recommendations=[RebalanceRecommendationResponse.model_validate(r) for r in recommendations],
        count=len(recommendations),
    )


@router.get("/{portfolio_id}/positions/{symbol}/summary", response_model=PositionSummaryResponse)
def get_position_summary(
    portfolio_id: int,
    symbol: str,
    analysis: AnalysisService = Depends(get_analysis_service),
) -> PositionSummaryResponse:
    """Valuation of one held position."""
    return PositionSummaryResponse.model_validate(analysis.position_summary(portfolio_id, symbol))
