"""Unit tests for clock utility."""

from datetime import UTC, datetime

from recaptcha_validator.utils.clock import utc_now, utc_now_iso


def test_utc_now():
    result = utc_now()
    assert isinstance(result, datetime)
    assert result.tzinfo is not None


def test_utc_now_returns_utc():
    result = utc_now()
    now = datetime.now(UTC)
    diff = abs((result - now).total_seconds())
    assert diff < 5


def test_utc_now_iso_uses_z_suffix(monkeypatch):
    fixed = datetime(2024, 1, 1, 12, 30, 45, 123456, tzinfo=UTC)
    monkeypatch.setattr("recaptcha_validator.utils.clock.utc_now", lambda: fixed)
    assert utc_now_iso() == "2024-01-01T12:30:45Z"
