"""Root conftest for tests."""

import json
import os
from collections.abc import Callable

import httpx
import pytest

if os.getenv("APP_ENV", "").strip().lower() == "prod":
    raise RuntimeError("Refusing to run tests with APP_ENV=prod")

os.environ["APP_ENV"] = "test"
os.environ["RECAPTCHA_SECRET_KEY"] = "test-secret-key"
os.environ.setdefault("METRICS_TOKEN", "test-metrics-token")
os.environ.pop("OTEL_EXPORTER_OTLP_ENDPOINT", None)


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    dir_marker_map = {
        "unit": pytest.mark.unit,
        "smoke": pytest.mark.smoke,
    }
    for item in items:
        test_path = str(item.fspath)
        for dir_name, marker in dir_marker_map.items():
            if f"/{dir_name}/" in test_path or f"\\{dir_name}\\" in test_path:
                item.add_marker(marker)
                break


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings around each test so env changes take effect."""
    from recaptcha_validator.core.config import reload_settings

    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def siteverify_calls() -> list[httpx.Request]:
    """Requests seen by the fake siteverify transport."""
    return []


@pytest.fixture
def fake_siteverify(siteverify_calls) -> Callable[..., httpx.MockTransport]:
    """Build a transport that answers siteverify with a canned body.

    ``fake_siteverify({"success": True, "score": 0.9})`` answers with JSON,
    ``fake_siteverify(error=httpx.ConnectError("down"))`` fails the call,
    ``fake_siteverify(raw="<html>")`` answers with a non-JSON body.
    """

    def _build(
        payload: dict | None = None,
        *,
        status_code: int = 200,
        raw: str | None = None,
        error: Exception | None = None,
    ) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            siteverify_calls.append(request)
            if error is not None:
                raise error
            if raw is not None:
                return httpx.Response(status_code, text=raw)
            return httpx.Response(status_code, content=json.dumps(payload or {}))

        return httpx.MockTransport(handler)

    return _build


@pytest.fixture
def make_client(fake_siteverify):
    """RecaptchaClient wired to the fake transport."""
    from recaptcha_validator.clients.recaptcha_client import RecaptchaClient

    def _make(*args, settings=None, **kwargs):
        return RecaptchaClient(settings=settings, transport=fake_siteverify(*args, **kwargs))

    return _make


@pytest.fixture
def settings_env(monkeypatch):
    """Apply environment changes, then rebuild the cached settings."""
    from recaptcha_validator.core.config import reload_settings

    def _apply(**values: str | None):
        for name, value in values.items():
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
        return reload_settings()

    return _apply
