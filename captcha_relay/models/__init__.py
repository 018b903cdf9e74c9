"""Data models."""

from captcha_relay.models.responses import (
    ErrorResponse,
    HealthResponse,
    RejectionResponse,
    UnavailableResponse,
    VerifyTokenResponse,
)
from captcha_relay.models.verification import VerificationResult, VerifyTokenRequest

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "RejectionResponse",
    "UnavailableResponse",
    "VerificationResult",
    "VerifyTokenRequest",
    "VerifyTokenResponse",
]
