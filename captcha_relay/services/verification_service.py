"""Verification service - token validation, score policy and redirect."""

import logging
from typing import Any

from captcha_relay.core.exceptions import ClientInputError, ConfigurationError, PolicyRejection
from captcha_relay.core.settings import AppSettings
from captcha_relay.core.utils import compose_redirect
from captcha_relay.models import VerificationResult, VerifyTokenResponse
from captcha_relay.services.recaptcha_client import RecaptchaClient

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid token format"
CONFIGURATION_ERROR_MESSAGE = "Server configuration error"
VERIFICATION_FAILED_REASON = "reCAPTCHA verification failed"


def low_score_reason(threshold: float) -> str:
    return f"Low reCAPTCHA score (minimum: {threshold})"


class VerificationService:
    """Service for verifying client tokens and deciding on the redirect."""

    def __init__(self, settings: AppSettings, client: RecaptchaClient) -> None:
        """
        Initialize the verification service.

        Args:
            settings (AppSettings): Application settings.
            client (RecaptchaClient): Provider client.
        """
        self.settings = settings
        self.client = client

    def validate_token(self, token: Any) -> str:
        """
        Validate the client token.

        Args:
            token (Any): Token value from the request body.

        Returns:
            str: The token.

        Raises:
            ClientInputError: If the token is missing, not a string or too short.
        """
        min_length = self.settings.recaptcha.min_token_length
        if not isinstance(token, str) or len(token) < min_length:
            logger.warning(
                f"Rejected token: type={type(token).__name__}, "
                f"length={len(token) if isinstance(token, str) else None}, "
                f"min_length={min_length}"
            )
            raise ClientInputError(INVALID_TOKEN_MESSAGE)
        return token

    def require_secret(self) -> str:
        """
        Get the provider secret.

        Returns:
            str: The configured secret.

        Raises:
            ConfigurationError: If no secret is configured.
        """
        secret = self.settings.recaptcha.secret
        if not secret:
            logger.error("reCAPTCHA secret is not configured, cannot verify tokens")
            raise ConfigurationError(CONFIGURATION_ERROR_MESSAGE)
        return secret

    def evaluate(self, result: VerificationResult) -> float:
        """
        Apply the score policy to a provider result.

        Args:
            result (VerificationResult): Provider result.

        Returns:
            float: The accepted score.

        Raises:
            PolicyRejection: If verification failed or the score is too low.
        """
        threshold = self.settings.recaptcha.score_threshold

        if not result.success:
            logger.warning(f"reCAPTCHA verification failed: error_codes={result.error_codes}")
            raise PolicyRejection(VERIFICATION_FAILED_REASON, errors=list(result.error_codes))

        if result.score is None or not result.is_accepted(threshold):
            logger.warning(f"reCAPTCHA score too low: score={result.score}, threshold={threshold}")
            raise PolicyRejection(
                low_score_reason(threshold),
                score=result.score,
                required_score=threshold,
            )

        return result.score

    async def verify_token(self, token: Any, email: str | None = None) -> VerifyTokenResponse:
        """
        Verify a client token and build the redirect for accepted clients.

        Args:
            token (Any): Token from the request body.
            email (str | None): Opaque payload to attach to the redirect.

        Returns:
            VerifyTokenResponse: Redirect URL and score.

        Raises:
            ClientInputError: Bad token.
            ConfigurationError: Missing provider secret.
            UpstreamUnavailableError: Provider unreachable or invalid reply.
            PolicyRejection: Verification failed or score too low.
        """
        token = self.validate_token(token)
        secret = self.require_secret()

        result = await self.client.site_verify(secret=secret, token=token)
        score = self.evaluate(result)

        redirect = compose_redirect(
            base_url=self.settings.redirect.url,
            payload=email,
            mode=self.settings.redirect.mode,
        )

        logger.info(
            f"reCAPTCHA verified: score={score}, hostname={result.hostname}, "
            f"action={result.action}, payload={'yes' if email else 'no'}"
        )
        return VerifyTokenResponse(success=True, redirect=redirect, score=score)
