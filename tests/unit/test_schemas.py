"""Unit tests for request, provider and envelope schemas."""

from recaptcha_validator.schemas.v1.common import ApiEnvelope
from recaptcha_validator.schemas.v1.health import HealthStatus
from recaptcha_validator.schemas.v1.recaptcha import RecaptchaRequest, RecaptchaVerification


def test_request_token_defaults_to_empty():
    assert RecaptchaRequest().token == ""
    assert RecaptchaRequest.model_validate({"token": "abc"}).token == "abc"


def test_verification_parses_provider_keys():
    result = RecaptchaVerification.model_validate_json(
        '{"success": false, "error-codes": ["invalid-input-secret"], "extra": 1}'
    )
    assert result.success is False
    assert result.error_codes == ["invalid-input-secret"]
    assert result.score == 0.0
    assert result.action == ""


def test_verification_payload_omits_absent_error_codes():
    result = RecaptchaVerification(
        success=True,
        score=0.9,
        action="login",
        challenge_ts="2024-01-01T00:00:00Z",
        hostname="example.com",
    )
    assert result.to_payload() == {
        "success": True,
        "score": 0.9,
        "action": "login",
        "challenge_ts": "2024-01-01T00:00:00Z",
        "hostname": "example.com",
    }


def test_verification_payload_uses_hyphenated_error_codes():
    payload = RecaptchaVerification(success=False, error_codes=["bad-request"]).to_payload()
    assert payload["error-codes"] == ["bad-request"]
    assert "error_codes" not in payload


def test_envelope_ok_shape():
    assert ApiEnvelope.ok({"a": 1}).to_content() == {
        "success": True,
        "data": {"a": 1},
        "errorMessage": None,
    }


def test_envelope_error_shape():
    assert ApiEnvelope.error("nope").to_content() == {
        "success": False,
        "data": None,
        "errorMessage": "nope",
    }


def test_health_status_fields():
    status = HealthStatus(status="OK", service="svc", timestamp="2024-01-01T00:00:00Z")
    assert status.model_dump() == {
        "status": "OK",
        "service": "svc",
        "timestamp": "2024-01-01T00:00:00Z",
    }
