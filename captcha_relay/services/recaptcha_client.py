"""reCAPTCHA client - calls the provider's siteverify endpoint."""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from captcha_relay.core.exceptions import UpstreamUnavailableError
from captcha_relay.core.settings.app_settings import RecaptchaSettings
from captcha_relay.models import VerificationResult

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Verification service unavailable"

# Binding the local side to the IPv4 wildcard address restricts
# name resolution and connections to IPv4.
IPV4_LOCAL_ADDRESS = "0.0.0.0"


class RecaptchaClient:
    """Async client for the reCAPTCHA siteverify API.

    One instance is shared by all requests so connections are pooled.
    """

    def __init__(
        self,
        verify_url: str,
        timeout: float,
        force_ipv4: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            verify_url (str): siteverify endpoint URL.
            timeout (float): Total time in seconds a verify call may take.
            force_ipv4 (bool): Only connect over IPv4.
            transport (httpx.AsyncBaseTransport | None): Transport override.
        """
        self._verify_url = verify_url
        self._timeout = timeout
        if transport is None and force_ipv4:
            transport = httpx.AsyncHTTPTransport(local_address=IPV4_LOCAL_ADDRESS)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: RecaptchaSettings) -> "RecaptchaClient":
        """
        Create a client from provider settings.

        Args:
            settings (RecaptchaSettings): Provider settings.

        Returns:
            RecaptchaClient: The client instance.
        """
        return cls(
            verify_url=settings.verify_url,
            timeout=settings.timeout,
            force_ipv4=settings.force_ipv4,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    async def site_verify(self, secret: str, token: str) -> VerificationResult:
        """
        Verify a token with the provider.

        A single attempt is made. The whole exchange is bounded by the client
        timeout; on expiry the in-flight request is cancelled.

        Args:
            secret (str): Provider secret key.
            token (str): Client token.

        Returns:
            VerificationResult: Parsed provider response.

        Raises:
            UpstreamUnavailableError: On timeout, transport failure, non-2xx
                status or a response body that does not validate.
        """
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.post(
                    self._verify_url,
                    data={"secret": secret, "response": token},
                )
            response.raise_for_status()
            data: Any = response.json()
            return VerificationResult.model_validate(data)

        except TimeoutError as e:
            logger.error(f"reCAPTCHA API timed out after {self._timeout}s")
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE) from e
        except httpx.TimeoutException as e:
            logger.error(f"reCAPTCHA API timed out after {self._timeout}s: {e!r}")
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE) from e
        except httpx.HTTPStatusError as e:
            logger.error(f"reCAPTCHA API HTTP error: {e.response.status_code}")
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE) from e
        except httpx.RequestError as e:
            logger.error(f"reCAPTCHA API request error: {e!r}")
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE) from e
        except ValueError as e:
            # json.JSONDecodeError and pydantic ValidationError are both ValueErrors
            kind = "invalid" if isinstance(e, ValidationError) else "non-JSON"
            logger.error(f"reCAPTCHA API returned {kind} response: {e}")
            raise UpstreamUnavailableError(UNAVAILABLE_MESSAGE) from e

    async def aclose(self) -> None:
        """Close pooled connections."""
        await self._client.aclose()
