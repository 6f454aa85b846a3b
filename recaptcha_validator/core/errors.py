"""reCAPTCHA service error hierarchy."""

from typing import Any


class RecaptchaServiceError(Exception):
    """Base exception for reCAPTCHA service errors."""

    code = "RECAPTCHA_INTERNAL_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.details = details
        super().__init__(message)


class InvalidRequestError(RecaptchaServiceError):
    """Invalid request body or parameters."""

    code = "RECAPTCHA_INVALID_REQUEST"
    status_code = 400


class VerificationRejectedError(RecaptchaServiceError):
    """The provider answered, but the token must not be accepted.

    Covers both a provider-reported failure and a score below the
    acceptance threshold. The provider result travels with the error so
    it can be echoed back to the caller.
    """

    code = "RECAPTCHA_REJECTED"
    status_code = 400

    def __init__(
        self,
        message: str,
        result: Any = None,
        reason: str = "rejected",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details={**(details or {}), "reason": reason})
        self.result = result
        self.reason = reason


class ForbiddenError(RecaptchaServiceError):
    """Access forbidden, e.g. a wrong metrics token."""

    code = "RECAPTCHA_FORBIDDEN"
    status_code = 403


class VerificationError(RecaptchaServiceError):
    """The provider could not be asked, or its answer could not be read.

    Missing secret, transport failures and undecodable bodies all end up
    here on purpose; callers only ever see one generic message.
    """

    code = "RECAPTCHA_VERIFICATION_ERROR"
    status_code = 500


class ConfigurationError(RecaptchaServiceError):
    """Required configuration is missing or invalid."""

    code = "RECAPTCHA_CONFIGURATION_ERROR"
    status_code = 500


ERROR_STATUS_MAP: dict[type[RecaptchaServiceError], int] = {
    InvalidRequestError: 400,
    VerificationRejectedError: 400,
    ForbiddenError: 403,
    VerificationError: 500,
    ConfigurationError: 500,
}


def get_status_code(error: RecaptchaServiceError) -> int:
    """Get HTTP status code for error."""
    return ERROR_STATUS_MAP.get(type(error), 500)
