"""Response models."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Health status")
    version: str = Field(description="Application version")
    timestamp: str = Field(description="Current server time (ISO format, UTC)")
    ip_mode: str = Field(description="Outbound IP mode: 'ipv4-only' or 'dual-stack'")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "status": "ready",
                "version": "1.0.0",
                "timestamp": "2024-01-01T12:00:00+00:00",
                "ip_mode": "dual-stack",
            }
        },
    )


class VerifyTokenResponse(BaseModel):
    """Accepted token response."""

    success: bool = Field(default=True, description="Always true for accepted tokens")
    redirect: str = Field(description="URL the client should navigate to")
    score: float = Field(description="Score reported by the provider")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "success": True,
                "redirect": "https://default-redirect.com#dGVzdA==",
                "score": 0.9,
            }
        },
    )


class ErrorResponse(BaseModel):
    """Error response for bad input, misconfiguration and rate limiting."""

    success: bool = Field(default=False, description="Always false")
    error: str = Field(description="Error message")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"success": False, "error": "Invalid token format"}},
    )


class RejectionResponse(BaseModel):
    """Token rejected by the score policy."""

    success: bool = Field(default=False, description="Always false")
    reason: str = Field(description="Why the token was rejected")
    score: float | None = Field(default=None, description="Observed score when below threshold")
    required_score: float | None = Field(
        default=None, alias="requiredScore", description="Configured score threshold"
    )
    errors: list[str] | None = Field(
        default=None, description="Provider error codes when verification failed"
    )

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": False,
                "reason": "Low reCAPTCHA score (minimum: 0.7)",
                "score": 0.3,
                "requiredScore": 0.7,
            }
        },
    )


class UnavailableResponse(BaseModel):
    """Verification provider could not be reached."""

    success: bool = Field(default=False, description="Always false")
    error: str = Field(description="Error message")
    retry: bool = Field(default=True, description="Whether the caller may retry")

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Verification service unavailable",
                "retry": True,
            }
        },
    )
