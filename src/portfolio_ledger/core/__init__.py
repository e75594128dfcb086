"""Core utilities and shared functionality."""

from portfolio_ledger.core.timezone import (
    now_eastern,
    to_eastern,
    to_storage,
    parse_datetime_eastern,
    EASTERN_TZ,
)
from portfolio_ledger.core.exceptions import (
    AppError,
    ValidationError,
    InvalidQuantityError,
    InvalidPriceError,
    InvalidSideError,
    NotFoundError,
    InsufficientSharesError,
    InsufficientFundsError,
    PriceUnavailableError,
    PersistenceError,
    ConcurrencyError,
)

__all__ = [
    "now_eastern",
    "to_eastern",
    "to_storage",
    "parse_datetime_eastern",
    "EASTERN_TZ",
    "AppError",
    "ValidationError",
    "InvalidQuantityError",
    "InvalidPriceError",
    "InvalidSideError",
    "NotFoundError",
    "InsufficientSharesError",
    "InsufficientFundsError",
    "PriceUnavailableError",
    "PersistenceError",
    "ConcurrencyError",
]
