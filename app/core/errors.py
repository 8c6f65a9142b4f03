"""Domain errors and their HTTP handlers"""
import logging
from decimal import Decimal
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger("app.errors")


class CambioError(Exception):
    """Base class for request-level failures.

    Every subclass carries the HTTP status it maps to and a ``context`` dict
    with the codes and numeric values involved, so callers can build an
    actionable message without parsing ``message``.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "cambio_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
            "context": {k: _jsonable(v) for k, v in self.context.items()},
        }


class UnsupportedPair(CambioError):
    error = "unsupported_pair"

    def __init__(self, from_currency: str, to_currency: str) -> None:
        super().__init__(
            f"Currency pair {from_currency}-{to_currency} not supported",
            from_currency=from_currency,
            to_currency=to_currency,
        )


class InvalidAmount(CambioError):
    error = "invalid_amount"

    def __init__(self, amount: Any) -> None:
        super().__init__(
            "Amount must be a finite number greater than zero",
            amount=amount,
        )


class CurrencyNotFound(CambioError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "currency_not_found"

    def __init__(self, *currency_codes: str) -> None:
        codes = ", ".join(currency_codes)
        super().__init__(
            f"Currency {codes} not found",
            currency_codes=list(currency_codes),
        )


class InvalidRateConfiguration(CambioError):
    status_code = 422
    error = "invalid_rate_configuration"

    def __init__(self, currency: str, buy_rate: Decimal, sell_rate: Decimal, rule: str) -> None:
        super().__init__(
            f"Invalid rates for {currency}: buy_rate={buy_rate}, sell_rate={sell_rate} ({rule})",
            currency=currency,
            buy_rate=buy_rate,
            sell_rate=sell_rate,
        )


class CurrencyAlreadyExists(CambioError):
    status_code = status.HTTP_409_CONFLICT
    error = "currency_already_exists"

    def __init__(self, currency: str) -> None:
        super().__init__(f"Currency {currency} already exists", currency=currency)


class BaseCurrencyProtected(CambioError):
    error = "base_currency_protected"

    def __init__(self, currency: str, action: str) -> None:
        super().__init__(f"Cannot {action} base currency {currency}", currency=currency)


class InvalidRateUpdate(CambioError):
    error = "invalid_rate_update"


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, list)):
        return value
    return str(value)


def cambio_error_handler(request: Request, exc: CambioError):  # type: ignore
    logger.warning(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.error,
        exc.message,
        extra={"error": exc.error, "status_code": exc.status_code, "context": exc.to_dict()["context"]},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "internal_error",
            "message": "An unexpected error occurred.",
        },
    )

