"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    retryable = False

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class InvalidQuantityError(ValidationError):
    """Raised when an order quantity is not strictly positive."""

    def __init__(self, quantity: int):
        super().__init__(
            f"Quantity must be positive, got {quantity}",
            code="INVALID_QUANTITY",
        )


class InvalidPriceError(ValidationError):
    """Raised when an execution or limit price is missing or not positive."""

    def __init__(self, price: object):
        super().__init__(f"Invalid price: {price}", code="INVALID_PRICE")


class InvalidSideError(ValidationError):
    """Raised when an order side is neither buy nor sell."""

    def __init__(self, side: str):
        super().__init__(f"Invalid order side: {side}", code="INVALID_SIDE")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: object):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class InsufficientSharesError(AppError):
    """Raised when attempting to sell more shares than owned."""

    def __init__(self, symbol: str, requested: int, available: int):
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, available {available}",
            code="INSUFFICIENT_SHARES",
        )


class InsufficientFundsError(AppError):
    """Raised when cash does not cover an order or a withdrawal."""

    def __init__(self, required: str, available: str):
        super().__init__(
            f"Insufficient cash: required {required}, available {available}",
            code="INSUFFICIENT_FUNDS",
        )


class PriceUnavailableError(AppError):
    """Raised when the market data source has no price for a symbol."""

    def __init__(self, symbol: str):
        super().__init__(f"No market price available for {symbol}", code="PRICE_UNAVAILABLE")


class PersistenceError(AppError):
    """
    Raised when a write to storage fails.

    The enclosing unit of work has been rolled back, so the ledger is
    unchanged and the request can be retried.
    """

    retryable = True

    def __init__(self, message: str, code: str = "PERSISTENCE_FAILURE"):
        super().__init__(message, code=code)


class ConcurrencyError(PersistenceError):
    """Raised when a row changed underneath an in-flight update."""

    def __init__(self, resource: str, identifier: object):
        super().__init__(
            f"{resource} {identifier} was modified concurrently; retry the request",
            code="CONCURRENT_MODIFICATION",
        )
