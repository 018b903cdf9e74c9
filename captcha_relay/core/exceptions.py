"""
Application error hierarchy.

Every error raised while handling a verification request is a RelayError
subclass carrying its HTTP status code and the JSON body returned to the
caller. The handlers registered in the API server turn them into responses.
"""

from typing import Any

from captcha_relay.models import ErrorResponse, RejectionResponse, UnavailableResponse


class RelayError(Exception):
    """Base application error."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        """
        Build the JSON response body for this error.

        Returns:
            dict[str, Any]: Response body.
        """
        return ErrorResponse(error=self.message).model_dump()


class ClientInputError(RelayError):
    """Missing or malformed request input."""

    status_code = 400


class ConfigurationError(RelayError):
    """Server is missing configuration needed to serve the request."""

    status_code = 500


class UpstreamUnavailableError(RelayError):
    """Verification provider timed out, failed or replied with garbage."""

    status_code = 502

    def to_response(self) -> dict[str, Any]:
        return UnavailableResponse(error=self.message, retry=True).model_dump()


class PolicyRejection(RelayError):
    """Token rejected: verification failed or score below threshold."""

    status_code = 403

    def __init__(
        self,
        reason: str,
        *,
        score: float | None = None,
        required_score: float | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.score = score
        self.required_score = required_score
        self.errors = errors

    def to_response(self) -> dict[str, Any]:
        return RejectionResponse(
            reason=self.reason,
            score=self.score,
            required_score=self.required_score,
            errors=self.errors,
        ).model_dump(by_alias=True, exclude_none=True)
