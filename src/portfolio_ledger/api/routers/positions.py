"""Position lookup endpoints."""

from fastapi import APIRouter, Depends

from portfolio_ledger.api.deps import get_ledger_service
from portfolio_ledger.api.schemas import PositionResponse
from portfolio_ledger.core.exceptions import NotFoundError
from portfolio_ledger.services import LedgerService

router = APIRouter(prefix="/positions", tags=["positions"])


@router.get("/user/{user_id}/{symbol}", response_model=PositionResponse)
def get_user_position(
    user_id: int,
    symbol: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> PositionResponse:
    """Get a user's open position in a symbol."""
    position = ledger.get_position(user_id, symbol)
    if position is None:
        raise NotFoundError("Position", f"{symbol.upper()} for user {user_id}")
    return PositionResponse.model_validate(position)
