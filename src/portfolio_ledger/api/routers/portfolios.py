"""Portfolio lifecycle endpoints."""

from fastapi import APIRouter, Depends, Response

from portfolio_ledger.api.deps import get_ledger_service
from portfolio_ledger.api.schemas import (
    PortfolioCreate,
    CashAdjustmentRequest,
    PortfolioResponse,
    PortfolioListResponse,
    PositionResponse,
    PositionListResponse,
)
from portfolio_ledger.services import LedgerService

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


@router.post("", response_model=PortfolioResponse, status_code=201)
def create_portfolio(
    data: PortfolioCreate,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Create a portfolio with an initial cash deposit."""
    portfolio = ledger.create_portfolio(
        user_id=data.user_id,
        initial_cash=data.initial_cash,
        name=data.name,
    )
    return PortfolioResponse.model_validate(portfolio)


@router.get("/user/{user_id}", response_model=PortfolioListResponse)
def list_user_portfolios(
    user_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioListResponse:
    """List a user's portfolios."""
    portfolios = ledger.list_portfolios(user_id)
    return PortfolioListResponse(
        portfolios=[PortfolioResponse.model_validate(p) for p in portfolios],
        count=len(portfolios),
    )


@router.get("/{portfolio_id}", response_model=PortfolioResponse)
def get_portfolio(
    portfolio_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Get a portfolio with its open positions."""
    return PortfolioResponse.model_validate(ledger.get_portfolio(portfolio_id))


@router.delete("/{portfolio_id}", status_code=204)
def delete_portfolio(
    portfolio_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> Response:
    """Delete a portfolio together with its positions and trades."""
    ledger.delete_portfolio(portfolio_id)
    return Response(status_code=204)


@router.post("/{portfolio_id}/cash", response_model=PortfolioResponse)
def adjust_cash(
    portfolio_id: int,
    data: CashAdjustmentRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Deposit or withdraw cash."""
    return PortfolioResponse.model_validate(ledger.adjust_cash(portfolio_id, data.amount))


@router.get("/{portfolio_id}/positions", response_model=PositionListResponse)
def get_positions(
    portfolio_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PositionListResponse:
    """List open positions of a portfolio."""
    positions = ledger.get_positions(portfolio_id)
    return PositionListResponse(
        positions=[PositionResponse.model_validate(p) for p in positions],
        count=len(positions),
    )


@router.post("/{portfolio_id}/refresh", response_model=PortfolioResponse)
def refresh_portfolio(
    portfolio_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PortfolioResponse:
    """Mark positions to current market prices and persist the cached totals."""
    return PortfolioResponse.model_validate(ledger.mark_to_market(portfolio_id))
