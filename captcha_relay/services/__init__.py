"""Business logic services."""

from captcha_relay.services.recaptcha_client import RecaptchaClient
from captcha_relay.services.verification_service import VerificationService

__all__ = [
    "RecaptchaClient",
    "VerificationService",
]
