"""Health check routes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from recaptcha_validator.schemas.v1.common import ApiEnvelope
from recaptcha_validator.schemas.v1.health import HealthStatus
from recaptcha_validator.utils.clock import utc_now_iso

router = APIRouter(tags=["health"])

SERVICE_NAME = "reCAPTCHA Validation Service"


@router.get("/", response_model=ApiEnvelope)
@router.get("/health", response_model=ApiEnvelope)
async def health_check():
    """Basic health check. Downstream dependencies are not checked."""
    status = HealthStatus(status="OK", service=SERVICE_NAME, timestamp=utc_now_iso())
    return JSONResponse(status_code=200, content=ApiEnvelope.ok(status.model_dump()).to_content())
