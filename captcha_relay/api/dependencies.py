"""Dependency injection providers."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from captcha_relay.core.settings import get_settings
from captcha_relay.services import RecaptchaClient, VerificationService


@lru_cache
def get_recaptcha_client() -> RecaptchaClient:
    """
    Get cached reCAPTCHA client singleton.

    Returns:
        RecaptchaClient: The shared provider client.
    """
    return RecaptchaClient.from_settings(get_settings().recaptcha)


def get_verification_service(
    client: Annotated[RecaptchaClient, Depends(get_recaptcha_client)],
) -> VerificationService:
    """
    Get a verification service bound to the current settings.

    Args:
        client (RecaptchaClient): Injected provider client.

    Returns:
        VerificationService: The verification service instance.
    """
    return VerificationService(settings=get_settings(), client=client)


async def close_recaptcha_client() -> None:
    """Close the cached client, if one was created, and drop it from the cache."""
    if get_recaptcha_client.cache_info().currsize:
        await get_recaptcha_client().aclose()
    clear_dependency_caches()


def clear_dependency_caches() -> None:
    """Clear all dependency caches."""
    get_recaptcha_client.cache_clear()
