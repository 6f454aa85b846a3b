"""Token validation service: decides whether a reCAPTCHA token is accepted."""

import structlog

from recaptcha_validator.clients.recaptcha_client import RecaptchaClient
from recaptcha_validator.core.errors import (
    InvalidRequestError,
    VerificationError,
    VerificationRejectedError,
)
from recaptcha_validator.core.metrics import recaptcha_validations_total
from recaptcha_validator.schemas.v1.recaptcha import RecaptchaVerification

logger = structlog.get_logger(__name__)

# reCAPTCHA v3 scores at or above this are treated as human.
MIN_SCORE = 0.5

TOKEN_REQUIRED_MESSAGE = "reCAPTCHA token is required"
VERIFICATION_FAILED_MESSAGE = "reCAPTCHA validation failed"
LOW_SCORE_MESSAGE = "reCAPTCHA score too low. Possible bot detected"
PROVIDER_ERROR_MESSAGE = "Error validating reCAPTCHA"


def rejection_message(result: RecaptchaVerification) -> str:
    """Message for a provider-reported failure, with its error codes if any."""
    if result.error_codes:
        return f"{VERIFICATION_FAILED_MESSAGE}: {', '.join(result.error_codes)}"
    return VERIFICATION_FAILED_MESSAGE


class ValidationService:
    """Apply the acceptance rules on top of a siteverify answer."""

    def __init__(self, client: RecaptchaClient):
        self.client = client

    async def validate(self, token: str) -> RecaptchaVerification:
        if not token or not token.strip():
            recaptcha_validations_total.labels(outcome="invalid_request").inc()
            raise InvalidRequestError(TOKEN_REQUIRED_MESSAGE)

        try:
            result = await self.client.verify(token)
        except VerificationError as exc:
            recaptcha_validations_total.labels(outcome="error").inc()
            logger.error(
                "reCAPTCHA verification could not be completed",
                token=token,
                error=exc.message,
            )
            raise VerificationError(PROVIDER_ERROR_MESSAGE) from exc

        if not result.success:
            recaptcha_validations_total.labels(outcome="rejected").inc()
            logger.info(
                "reCAPTCHA token rejected by provider",
                error_codes=result.error_codes or [],
                hostname=result.hostname,
            )
            raise VerificationRejectedError(
                rejection_message(result),
                result=result,
                reason="provider_rejected",
            )

        if result.score < MIN_SCORE:
            recaptcha_validations_total.labels(outcome="low_score").inc()
            logger.info(
                "reCAPTCHA score below threshold",
                score=result.score,
                threshold=MIN_SCORE,
                action=result.action,
            )
            raise VerificationRejectedError(LOW_SCORE_MESSAGE, result=result, reason="low_score")

        recaptcha_validations_total.labels(outcome="accepted").inc()
        logger.info(
            "reCAPTCHA token accepted",
            score=result.score,
            action=result.action,
            hostname=result.hostname,
        )
        return result
