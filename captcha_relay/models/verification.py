"""Verification request and provider result models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VerifyTokenRequest(BaseModel):
    """Token submitted by the client for verification."""

    # Type and length of the token are checked by the verification service
    # so that a wrong type maps to the same client error as a short token.
    token: Any = Field(default=None, description="reCAPTCHA token issued to the client")
    email: str | None = Field(
        default=None, description="Opaque, already encoded payload passed through to the redirect"
    )

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "token": "03AFcWeA5n8q...",
                "email": "dGVzdEBleGFtcGxlLmNvbQ==",
            }
        },
    )


class VerificationResult(BaseModel):
    """Response body of the provider's siteverify endpoint."""

    success: bool = Field(strict=True, description="Whether the token was valid")
    score: float | None = Field(
        default=None, strict=True, ge=0.0, le=1.0, description="Score for the request (0.0 - 1.0)"
    )
    error_codes: list[str] = Field(
        default_factory=list, alias="error-codes", description="Provider error codes"
    )
    hostname: str | None = Field(default=None, description="Site the token was solved on")
    action: str | None = Field(default=None, description="Action name the token was issued for")
    challenge_ts: str | None = Field(default=None, description="Challenge timestamp (ISO format)")

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "success": True,
                "score": 0.9,
                "action": "submit",
                "challenge_ts": "2024-01-01T12:00:00Z",
                "hostname": "example.com",
                "error-codes": [],
            }
        },
    )

    @model_validator(mode="after")
    def require_score_on_success(self) -> "VerificationResult":
        """A successful verification must carry a score."""
        if self.success and self.score is None:
            raise ValueError("score is required when success is true")
        return self

    def is_accepted(self, threshold: float) -> bool:
        """
        Check if the result passes the score policy.

        Args:
            threshold (float): Minimum acceptable score.

        Returns:
            bool: True if verification succeeded and score is at or above threshold.
        """
        return self.success and self.score is not None and self.score >= threshold
