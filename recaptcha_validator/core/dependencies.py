"""Dependency injection providers and type aliases."""

from typing import Annotated

from fastapi import Depends, Request

from recaptcha_validator.clients.recaptcha_client import RecaptchaClient
from recaptcha_validator.core.errors import ConfigurationError
from recaptcha_validator.services.validation_service import ValidationService


def get_recaptcha_client(request: Request) -> RecaptchaClient:
    """Return the process-wide client created in the app lifespan."""
    client = getattr(request.app.state, "recaptcha_client", None)
    if client is None:
        raise ConfigurationError("reCAPTCHA client is not initialized")
    return client


def get_validation_service(
    client: Annotated[RecaptchaClient, Depends(get_recaptcha_client)],
) -> ValidationService:
    return ValidationService(client)


ValidationServiceDep = Annotated[ValidationService, Depends(get_validation_service)]

__all__ = [
    "ValidationServiceDep",
    "get_recaptcha_client",
    "get_validation_service",
]
