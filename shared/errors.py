"""Error taxonomy shared by every service, plus the FastAPI handler that renders it."""
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class ShopError(Exception):
    """Base exception for all shop errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ShopError):
    """Raised when a referenced catalog item, order, user or review doesn't exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class InvalidInputError(ShopError):
    """Raised for malformed identifiers, non-positive quantities and similar bad input."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_INPUT"


class InsufficientStockError(ShopError):
    """Raised when a line item asks for more units than the catalog holds."""

    status_code = status.HTTP_409_CONFLICT
    code = "INSUFFICIENT_STOCK"

    def __init__(self, item_id: int, title: str, available: int, requested: int):
        self.item_id = item_id
        self.available = available
        self.requested = requested
        super().__init__(
            f'Insufficient stock for item "{title}". Available: {available}, Requested: {requested}',
            {"item_id": item_id, "available": available, "requested": requested},
        )


class PriceMismatchError(ShopError):
    """Raised when a client-submitted unit price differs from the catalog price."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "PRICE_MISMATCH"

    def __init__(self, item_id: int, title: str, expected: float, received: float):
        self.item_id = item_id
        self.expected = expected
        self.received = received
        super().__init__(
            f'Price mismatch for item "{title}". Expected: {expected}, Received: {received}',
            {"item_id": item_id, "expected": expected, "received": received},
        )


class PaymentAmountMismatchError(ShopError):
    """Raised when a client total or payment amount disagrees with the server total."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "PAYMENT_AMOUNT_MISMATCH"

    def __init__(self, expected: float, received: float):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Payment amount mismatch. Expected: {expected}, Received: {received}",
            {"expected": expected, "received": received},
        )


class PaymentVerificationFailedError(ShopError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "PAYMENT_VERIFICATION_FAILED"


class PaymentGatewayError(ShopError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "PAYMENT_GATEWAY_ERROR"


class ConflictError(ShopError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ForbiddenError(ShopError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class UnauthorizedError(ShopError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class InternalError(ShopError):
    pass


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed",
        path=request.url.path,
        method=request.method,
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
    )
    body = {"detail": exc.message, "code": exc.code}
    if exc.details is not None:
        body["details"] = exc.details
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ShopError, shop_error_handler)
