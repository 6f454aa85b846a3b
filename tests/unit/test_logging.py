"""Unit tests for logging module."""

from unittest.mock import patch

from recaptcha_validator.core.logging import redact_event, setup_logging


def test_setup_logging():
    with patch("recaptcha_validator.core.logging.get_settings") as mock_settings:
        mock_settings.return_value.app.log_level.value = "INFO"
        mock_settings.return_value.observability.log_record_format = "json"
        setup_logging()


def test_setup_logging_console():
    with patch("recaptcha_validator.core.logging.get_settings") as mock_settings:
        mock_settings.return_value.app.log_level.value = "DEBUG"
        mock_settings.return_value.observability.log_record_format = "console"
        setup_logging()


def test_redact_event_masks_token_and_secret_keys():
    event = redact_event(
        None,
        "info",
        {
            "event": "reCAPTCHA verification could not be completed",
            "token": "03AFcWeA6xYzLongTokenValue9xQ",
            "secret": "s3cr3t",
            "status_code": 500,
        },
    )
    assert event["event"] == "reCAPTCHA verification could not be completed"
    assert event["token"] == "03AF***9xQ"
    assert event["secret"] == "***REDACTED***"
    assert event["status_code"] == 500
