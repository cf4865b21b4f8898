import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from foodprint.api import estimate, health
from foodprint.api.schemas import ErrorResponse, ValidationErrorResponse
from foodprint.config import settings
from foodprint.services.ai_service import (
    GenerationError,
    RateLimitError,
    ServiceUnavailableError,
)
from foodprint.services.image_service import ImageValidationError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.service_name,
    version=settings.version,
    description="Carbon footprint estimator for dishes and food photos",
)


# =============================================================================
# Request ID Middleware
# =============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an id for log correlation.

    - Reuses an incoming X-Request-ID header when present
    - Otherwise generates a new UUID4 hex
    - Echoes the id back in the X-Request-ID response header
    """

    HEADER = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[self.HEADER] = request_id
        return response


app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


def _error_response(status_code: int, body: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, by_alias=True, exclude_none=True),
    )


def _validation_field(loc: tuple) -> str:
    """('body', 'dish') -> 'dish'; a missing body reports as 'body'."""
    parts = [str(p) for p in loc if p != "body"]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report request validation failures as 400 with per-field messages."""
    validation_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        validation_errors.setdefault(_validation_field(error.get("loc", ())), []).append(
            message
        )

    logger.info(
        "Request validation failed (RequestId: %s): %s",
        _request_id(request),
        validation_errors,
    )
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ValidationErrorResponse(
            code="VALIDATION_ERROR",
            message="Invalid request data",
            validation_errors=validation_errors,
            request_id=_request_id(request),
        ),
    )


@app.exception_handler(ImageValidationError)
async def image_validation_exception_handler(request: Request, exc: ImageValidationError):
    logger.warning("Invalid image input (RequestId: %s): %s", _request_id(request), exc)
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ValidationErrorResponse(
            code="VALIDATION_ERROR",
            message=str(exc),
            validation_errors={exc.field: [str(exc)]},
            request_id=_request_id(request),
        ),
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    logger.warning("Bad request (RequestId: %s): %s", _request_id(request), exc)
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        ErrorResponse(code="BAD_REQUEST", message=str(exc), request_id=_request_id(request)),
    )


@app.exception_handler(TimeoutError)
async def timeout_error_handler(request: Request, exc: TimeoutError):
    logger.error("Request timed out (RequestId: %s)", _request_id(request))
    return _error_response(
        status.HTTP_408_REQUEST_TIMEOUT,
        ErrorResponse(
            code="TIMEOUT",
            message="The operation timed out",
            request_id=_request_id(request),
        ),
    )


@app.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    logger.warning("AI rate limit hit (RequestId: %s)", _request_id(request))
    return _error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        ErrorResponse(code="RATE_LIMITED", message=str(exc), request_id=_request_id(request)),
    )


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    logger.error("AI service unavailable (RequestId: %s): %s", _request_id(request), exc)
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        ErrorResponse(
            code="SERVICE_UNAVAILABLE",
            message=str(exc),
            request_id=_request_id(request),
        ),
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    logger.error("AI request rejected (RequestId: %s): %s", _request_id(request), exc)
    return _error_response(
        status.HTTP_502_BAD_GATEWAY,
        ErrorResponse(
            code="UPSTREAM_ERROR",
            message="The analysis service rejected the request",
            details=str(exc) if settings.is_development else None,
            request_id=_request_id(request),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for unexpected errors.

    Error details are only exposed in development.
    """
    logger.exception("Unhandled exception occurred (RequestId: %s)", _request_id(request))
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            details=str(exc) if settings.is_development else None,
            request_id=_request_id(request),
        ),
    )


# Include routers
app.include_router(estimate.router)
app.include_router(health.router)
