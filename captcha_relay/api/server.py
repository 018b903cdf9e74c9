"""FastAPI application server."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from captcha_relay import __version__
from captcha_relay.api.dependencies import close_recaptcha_client, get_verification_service
from captcha_relay.core.exceptions import ClientInputError, RelayError
from captcha_relay.core.settings import get_settings
from captcha_relay.core.utils import setup_logging
from captcha_relay.models import (
    ErrorResponse,
    HealthResponse,
    RejectionResponse,
    UnavailableResponse,
    VerifyTokenRequest,
    VerifyTokenResponse,
)
from captcha_relay.services import VerificationService

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error"

# Rate limiter instance
limiter = Limiter(key_func=get_remote_address)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Add security headers to response."""
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Only add HSTS if behind HTTPS proxy
        if request.headers.get("X-Forwarded-Proto") == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded errors."""
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content=ErrorResponse(error=RATE_LIMIT_MESSAGE).model_dump(),
    )


async def relay_error_handler(request: Request, exc: RelayError) -> Response:
    """Convert application errors to their JSON response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    """Report malformed request bodies as client input errors."""
    logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
    error = ClientInputError(INVALID_BODY_MESSAGE)
    return JSONResponse(status_code=error.status_code, content=error.to_response())


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    """Last resort handler, keeps the response shape consistent."""
    logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=INTERNAL_ERROR_MESSAGE).model_dump(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Args:
        app (FastAPI): The FastAPI application instance.

    Yields:
        None
    """
    settings = get_settings()

    setup_logging(settings=settings.logging)

    logger.info(f"Starting CAPTCHA Relay Service v{__version__}")
    logger.info(
        f"Score threshold {settings.recaptcha.score_threshold}, "
        f"timeout {settings.recaptcha.timeout}s, "
        f"redirect mode '{settings.redirect.mode}'"
    )

    if not settings.recaptcha.secret:
        logger.error(
            "reCAPTCHA secret is not configured (RELAY_RECAPTCHA__SECRET), "
            "all verification requests will fail with a configuration error"
        )

    yield

    logger.info("Shutting down CAPTCHA Relay Service")
    await close_recaptcha_client()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="CAPTCHA Relay Service",
        description="Verify reCAPTCHA tokens and hand out redirect targets",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RelayError, relay_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - only add if origins are specified
    if settings.api_server.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api_server.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    return app


app = create_app()


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint (liveness only).

    Returns:
        HealthResponse: Health status, version and server time.
    """
    settings = get_settings()
    return HealthResponse(
        status="ready",
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
        ip_mode="ipv4-only" if settings.recaptcha.force_ipv4 else "dual-stack",
    )


@app.post(
    "/verify-token",
    response_model=VerifyTokenResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid token or request body"},
        403: {"model": RejectionResponse, "description": "Token rejected"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Server misconfiguration"},
        502: {"model": UnavailableResponse, "description": "Verification service unavailable"},
    },
)
@limiter.limit(lambda: get_settings().api_server.rate_limit)
async def verify_token(
    request: Request,
    payload: VerifyTokenRequest,
    service: Annotated[VerificationService, Depends(get_verification_service)],
) -> VerifyTokenResponse:
    """
    Verify a reCAPTCHA token and return the redirect target.

    The optional ``email`` payload is attached to the redirect URL as is.

    Args:
        request (Request): The request object (required for rate limiting).
        payload (VerifyTokenRequest): Token and optional payload.
        service (VerificationService): Injected verification service.

    Returns:
        VerifyTokenResponse: Redirect URL and score.
    """
    return await service.verify_token(token=payload.token, email=payload.email)
