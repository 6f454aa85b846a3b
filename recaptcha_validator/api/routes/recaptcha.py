"""reCAPTCHA validation routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from recaptcha_validator.core.dependencies import ValidationServiceDep
from recaptcha_validator.schemas.v1.common import ApiEnvelope
from recaptcha_validator.schemas.v1.recaptcha import RecaptchaRequest

router = APIRouter(tags=["reCAPTCHA"])


@router.post(
    "/validate-recaptcha",
    response_model=ApiEnvelope,
    responses={
        400: {"model": ApiEnvelope, "description": "Missing, rejected or low-score token"},
        405: {"model": ApiEnvelope, "description": "Method not allowed"},
        500: {"model": ApiEnvelope, "description": "Provider call failed"},
    },
)
async def validate_recaptcha(payload: RecaptchaRequest, service: ValidationServiceDep):
    """Validate a reCAPTCHA token with Google and return the verification result."""
    result = await service.validate(payload.token)
    return JSONResponse(
        status_code=200,
        content=ApiEnvelope.ok(result.to_payload()).to_content(),
    )
