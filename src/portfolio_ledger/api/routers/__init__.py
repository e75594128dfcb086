"""API routers package."""

from portfolio_ledger.api.routers.portfolios import router as portfolios_router
from portfolio_ledger.api.routers.positions import router as positions_router
from portfolio_ledger.api.routers.trades import router as trades_router
from portfolio_ledger.api.routers.analysis import router as analysis_router

__all__ = [
    "portfolios_router",
    "positions_router",
    "trades_router",
    "analysis_router",
]
