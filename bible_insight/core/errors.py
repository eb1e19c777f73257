"""
Error kinds surfaced by the API and the handlers that render them.

Every error leaves the process as a JSON body of the form
``{"error": "<message>"}``; rate-limit rejections add ``retryAfter`` and
request-validation failures add ``details``. Exceptions with no handler of
their own become a 500 ``{"error": "Internal server error"}``.
Handlers are registered on the app in main.py via register_error_handlers().
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded as SlowAPIRateLimitExceeded

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 60


class BibleInsightError(Exception):
    """Base class for API errors with an HTTP status code.

    Subclasses set ``status_code``; the message becomes the ``error`` field.
    """

    status_code: int = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict:
        return {"error": self.message}


class InvalidRequestError(BibleInsightError):
    """Malformed or missing request input. Maps to HTTP 400."""

    status_code = 400


class NotFoundError(BibleInsightError):
    """Requested verse or chapter does not exist. Maps to HTTP 404."""

    status_code = 404


class RateLimitExceeded(BibleInsightError):
    """Caller exhausted its quota for the current window.

    Maps to HTTP 429 Too Many Requests with a retry hint in seconds.
    """

    status_code = 429

    def __init__(
        self,
        caller_key: str = "GLOBAL",
        retry_after: int = DEFAULT_RETRY_AFTER,
        message: str = "Too many requests. Please try again later.",
    ):
        self.caller_key = caller_key
        self.retry_after = retry_after
        super().__init__(message)

    def to_response(self) -> dict:
        return {"error": self.message, "retryAfter": self.retry_after}


class UpstreamProviderError(BibleInsightError):
    """An LLM provider or the datastore failed or answered with an error.

    The message is what the client sees; the underlying cause stays in the
    server log (chained via ``raise ... from``).
    """

    status_code = 500

    def __init__(self, message: str = "Upstream service failed", provider: str = "unknown"):
        self.provider = provider
        super().__init__(message)


class ExtractionExhausted(BibleInsightError):
    """No extraction tier produced a value and the caller asked for strict mode."""

    status_code = 500

    def __init__(self, message: str = "Failed to parse analysis"):
        super().__init__(message)


# ── Handlers ──────────────────────────────────────────────────────────────────

async def _bible_insight_error_handler(request: Request, exc: BibleInsightError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__, request.method, request.url.path, exc.__cause__ or exc,
        )
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_response(), headers=headers)


async def _slowapi_rate_limit_handler(request: Request, exc: SlowAPIRateLimitExceeded) -> JSONResponse:
    """Render slowapi rejections in the same shape as RateLimitExceeded."""
    logger.info("slowapi limit hit on %s: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={"error": f"Rate limit exceeded: {exc.detail}", "retryAfter": DEFAULT_RETRY_AFTER},
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER)},
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 in the common error shape; the field-level detail stays under `details`."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Invalid request: {where} {first.get('msg', '')}".strip() if first else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"error": message, "details": jsonable_encoder(errors)},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback server-side, never leak it to the client."""
    logger.exception("Unhandled %s on %s %s", type(exc).__name__, request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BibleInsightError, _bible_insight_error_handler)
    app.add_exception_handler(SlowAPIRateLimitExceeded, _slowapi_rate_limit_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
