"""Google reCAPTCHA siteverify HTTP client."""

from __future__ import annotations

import time

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from recaptcha_validator.core.config import Settings, get_settings
from recaptcha_validator.core.errors import VerificationError
from recaptcha_validator.core.metrics import (
    recaptcha_provider_latency_seconds,
    recaptcha_provider_requests_total,
)
from recaptcha_validator.schemas.v1.recaptcha import RecaptchaVerification

logger = structlog.get_logger(__name__)

SITEVERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaClient:
    """Client for the reCAPTCHA siteverify endpoint.

    One form POST per token, no retries. Every failure is reported as
    :class:`VerificationError`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._settings.recaptcha.timeout_seconds),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def verify(self, token: str) -> RecaptchaVerification:
        """Ask Google whether ``token`` is valid.

        Args:
            token: Client-supplied reCAPTCHA response token, sent as-is.

        Returns:
            The decoded provider answer. A ``success: false`` answer is
            returned, not raised; judging it is the caller's job.

        Raises:
            VerificationError: secret missing, transport failure, non-2xx
                status, or a body that is not a siteverify JSON object.
        """
        config = self._settings.recaptcha
        if not config.has_secret_key:
            raise VerificationError("RECAPTCHA_SECRET_KEY is not configured")

        client = await self._get_client()
        started = time.perf_counter()
        try:
            response = await client.post(
                SITEVERIFY_URL,
                data={
                    "secret": config.secret_key.get_secret_value(),
                    "response": token,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            recaptcha_provider_requests_total.labels(result="transport_error").inc()
            logger.warning(
                "siteverify request failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise VerificationError(f"siteverify request failed: {exc}") from exc
        finally:
            recaptcha_provider_latency_seconds.observe(time.perf_counter() - started)

        try:
            result = RecaptchaVerification.model_validate_json(response.content)
        except PydanticValidationError as exc:
            recaptcha_provider_requests_total.labels(result="decode_error").inc()
            logger.warning(
                "siteverify returned an unreadable body",
                status_code=response.status_code,
                body_size=len(response.content),
            )
            raise VerificationError("siteverify returned an invalid JSON body") from exc

        recaptcha_provider_requests_total.labels(result="ok").inc()
        logger.debug(
            "siteverify answered",
            success=result.success,
            score=result.score,
            action=result.action,
            hostname=result.hostname,
        )
        return result
